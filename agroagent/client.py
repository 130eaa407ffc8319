"""
HTTP calls made by the front-end pages.

Every call is a single attempt: no retry, no caching, no timeout beyond the
transport default. Failures surface as ApiError (or DetectionError for the
disease pipeline) carrying a message the page can show inline.
"""
import json
import logging
from typing import Any, Iterable, Optional

import requests

from . import config
from .gateway import NO_ANALYSIS
from .models import AnalysisRequest, AnalysisResult

logger = logging.getLogger(__name__)

DETECTION_FAILED = "Detection failed"
ANALYSIS_FAILED = "Failed to analyze image"

CHAT_ERROR = "Sorry, I couldn't connect to the server. Please make sure the API is running."
WEATHER_ERROR = "Failed to get weather data. Please ensure the API server is running."
MARKET_ERROR = "Failed to get market price. Please ensure the API server is running."


class ApiError(RuntimeError):
    """A front-end call failed; the message is safe to show to the user."""


class DetectionError(ApiError):
    pass


def pick_text(data: Any, keys: Iterable[str]) -> str:
    """First truthy value among `keys`, else the whole body as JSON text."""
    if isinstance(data, dict):
        for key in keys:
            if data.get(key):
                return str(data[key])
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def _get_json(method: str, url: str, error_message: str, **kwargs) -> Any:
    try:
        resp = requests.request(method, url, **kwargs)
        resp.raise_for_status()
        return resp.json()
    except requests.exceptions.RequestException as e:
        # includes invalid JSON bodies
        logger.warning("%s %s failed: %s", method, url, e)
        raise ApiError(error_message) from e
    except ValueError as e:
        logger.warning("%s %s returned invalid JSON: %s", method, url, e)
        raise ApiError(error_message) from e


def send_chat(message: str, base_url: Optional[str] = None) -> str:
    base_url = base_url or config.BACKEND_URL
    data = _get_json("POST", f"{base_url}/chat", CHAT_ERROR, json={"message": message})
    return pick_text(data, ("response", "message"))


def get_weather_advice(city: str, base_url: Optional[str] = None) -> str:
    base_url = base_url or config.BACKEND_URL
    data = _get_json("GET", f"{base_url}/weather", WEATHER_ERROR, params={"city": city})
    return pick_text(data, ("advice", "message", "weather"))


def get_market_price(crop: str, base_url: Optional[str] = None) -> str:
    base_url = base_url or config.BACKEND_URL
    data = _get_json("GET", f"{base_url}/market/price", MARKET_ERROR, params={"crop": crop})
    return pick_text(data, ("price", "predicted_price", "value"))


def resolve_bearer_token(session_token: Optional[str], public_key: Optional[str] = None) -> str:
    """Session token when signed in, otherwise the public key."""
    if session_token:
        return session_token
    return public_key if public_key is not None else config.GATEWAY_PUBLIC_KEY


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return DETECTION_FAILED
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return DETECTION_FAILED


def detect_disease(request: AnalysisRequest, session_token: Optional[str] = None,
                   public_key: Optional[str] = None, gateway_url: Optional[str] = None) -> AnalysisResult:
    """Upload one image to the crop-detect function.

    Raises:
        DetectionError: with the server's `error` message, "Detection failed"
            when the error body is unusable, or "Failed to analyze image" when
            the gateway cannot be reached.
    """
    gateway_url = gateway_url or config.GATEWAY_URL
    token = resolve_bearer_token(session_token, public_key)
    files = {"file": (request.filename, request.image_bytes, request.mime_type)}

    try:
        resp = requests.post(
            f"{gateway_url}/crop-detect",
            files=files,
            headers={"Authorization": f"Bearer {token}"},
        )
    except requests.exceptions.RequestException as e:
        logger.warning("crop-detect unreachable: %s", e)
        raise DetectionError(ANALYSIS_FAILED) from e

    if not resp.ok:
        raise DetectionError(_error_message(resp))

    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    return AnalysisResult(
        filename=str(data.get("filename") or request.filename),
        prediction=str(data.get("prediction") or NO_ANALYSIS),
        success=bool(data.get("success", True)),
    )
