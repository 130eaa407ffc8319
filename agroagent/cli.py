#!/usr/bin/env python3
"""
Command line access to the crop disease tools:
 - parse a saved model answer into its diagnostic fields
 - upload an image to the crop-detect gateway and print the diagnosis
 - run the gateway app locally

Usage examples:
  agroagent parse answer.txt
  cat answer.txt | agroagent parse -
  agroagent detect tomato_leaf.jpg --gateway-url http://127.0.0.1:8001
  agroagent serve --port 8001
"""
import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path

from . import config
from .client import ApiError, detect_disease
from .models import AnalysisRequest, DiagnosticReport
from .parser import parse_ai_response, plant_name_from_filename


def report_summary(report: DiagnosticReport) -> dict:
    summary = report.model_dump()
    summary.update({
        "is_healthy": report.is_healthy,
        "confidence_display": report.confidence_display,
        "needs_raw_fallback": report.needs_raw_fallback,
    })
    return summary


def print_report(report: DiagnosticReport, prediction: str, title: str = "") -> None:
    """Human-readable rendering; falls back to the raw text when parsing found nothing."""
    print(f"=== {title or 'Crop Analysis'} ===")
    print("Status: " + ("Healthy" if report.is_healthy else "Disease Detected"))
    diagnosis = report.disease or "Unknown"
    if report.confidence:
        diagnosis += f" - {report.confidence_display} confidence"
    print(f"Diagnosis: {diagnosis}")
    if report.symptoms:
        print("Symptoms Identified:")
        for symptom in report.symptoms:
            print(f"  • {symptom}")
    if report.treatment:
        print(f"Treatment: {report.treatment}")
        if report.prevention:
            print(f"Prevention: {report.prevention}")
    if report.needs_raw_fallback:
        print(prediction)


def _cmd_parse(args) -> int:
    if args.file == "-":
        text = sys.stdin.read()
    else:
        path = Path(args.file)
        if not path.exists():
            logging.error("File not found: %s", path)
            return 1
        text = path.read_text(encoding="utf-8")

    print(json.dumps(report_summary(parse_ai_response(text)), indent=2, ensure_ascii=False))
    return 0


def _cmd_detect(args) -> int:
    path = Path(args.image)
    if not path.exists():
        logging.error("Image not found: %s", path)
        return 1

    mime_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    request = AnalysisRequest(image_bytes=path.read_bytes(), filename=path.name, mime_type=mime_type)

    logging.info("Uploading %s (%s) to %s", path.name, mime_type, args.gateway_url or config.GATEWAY_URL)
    try:
        result = detect_disease(request, session_token=args.token, gateway_url=args.gateway_url)
    except ApiError as e:
        logging.error("Error: %s", e)
        return 1

    if args.raw:
        print(result.prediction)
    else:
        report = parse_ai_response(result.prediction)
        print_report(report, result.prediction, plant_name_from_filename(result.filename))
    return 0


def _cmd_serve(args) -> int:
    import uvicorn
    uvicorn.run("agroagent.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="agroagent",
        description="AI Agro Agent crop disease tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Usage examples:")[1],
    )
    p.add_argument("--verbose", "-v", action="store_true",
                   help="Enable verbose logging")
    sub = p.add_subparsers(dest="command", required=True)

    parse_p = sub.add_parser("parse", help="Parse a saved model answer")
    parse_p.add_argument("file", help="Text file with the model answer, or - for stdin")
    parse_p.set_defaults(func=_cmd_parse)

    detect_p = sub.add_parser("detect", help="Upload an image for disease detection")
    detect_p.add_argument("image", help="Path to a crop/leaf image")
    detect_p.add_argument("--token", default=None,
                          help="Session bearer token (default: GATEWAY_PUBLIC_KEY)")
    detect_p.add_argument("--gateway-url", default=None,
                          help=f"Gateway base URL (default: {config.GATEWAY_URL})")
    detect_p.add_argument("--raw", action="store_true",
                          help="Print the unparsed model answer")
    detect_p.set_defaults(func=_cmd_detect)

    serve_p = sub.add_parser("serve", help="Run the crop-detect gateway")
    serve_p.add_argument("--host", default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8001)
    serve_p.set_defaults(func=_cmd_serve)

    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
