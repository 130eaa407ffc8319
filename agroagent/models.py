from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class ConfidenceLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = "Unknown"


# Display heuristics only, checked in this order
CONFIDENCE_PERCENTAGES = (
    (ConfidenceLevel.HIGH, "95%"),
    (ConfidenceLevel.MEDIUM, "75%"),
    (ConfidenceLevel.LOW, "50%"),
)


def confidence_level(text: str) -> ConfidenceLevel:
    lowered = (text or "").lower()
    for level, _ in CONFIDENCE_PERCENTAGES:
        if level.value.lower() in lowered:
            return level
    return ConfidenceLevel.UNKNOWN


def is_healthy(disease: str) -> bool:
    return "healthy" in (disease or "").lower()


def confidence_display(text: str) -> str:
    """Map model confidence text to the percentage shown next to a diagnosis.

    Text matching none of the buckets is returned unchanged.
    """
    level = confidence_level(text)
    for bucket, percentage in CONFIDENCE_PERCENTAGES:
        if bucket is level:
            return percentage
    return text


class DiagnosticReport(BaseModel):
    """Structured view of a free-text disease analysis.

    Every field defaults to empty; the report is rebuilt from the prediction
    text each time it is shown and carries no identity of its own.
    """
    disease: str = ""
    confidence: str = ""
    symptoms: List[str] = Field(default_factory=list)
    treatment: str = ""
    prevention: str = ""

    @property
    def is_healthy(self) -> bool:
        return is_healthy(self.disease)

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return confidence_level(self.confidence)

    @property
    def confidence_display(self) -> str:
        return confidence_display(self.confidence)

    @property
    def needs_raw_fallback(self) -> bool:
        # Show the unparsed prediction instead
        return not self.disease and not self.treatment


class AnalysisRequest(BaseModel):
    image_bytes: bytes
    filename: str
    mime_type: str = "image/jpeg"


class AnalysisResult(BaseModel):
    filename: str
    prediction: str
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
