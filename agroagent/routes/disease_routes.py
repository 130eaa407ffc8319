import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from ..gateway import analyze_image, resolve_mime_type
from ..models import AnalysisResult, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post(
    "/crop-detect",
    response_model=AnalysisResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def crop_detect(request: Request):
    # Plain text under "file" counts as no file
    form = await request.form()
    file = form.get("file")
    if not isinstance(file, UploadFile):
        return _error("No file provided", 400)

    try:
        image_bytes = await file.read()
        mime_type = resolve_mime_type(file.content_type)
        logger.info("Analyzing %s (%s, %d bytes)", file.filename, mime_type, len(image_bytes))

        prediction = analyze_image(image_bytes, mime_type)
    except Exception as e:
        logger.exception("Error in crop-detect")
        return _error(str(e) or "Failed to analyze image", 500)

    return AnalysisResult(filename=file.filename or "", prediction=prediction, success=True)
