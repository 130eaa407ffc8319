"""
Parse the free-text disease report returned by the multimodal model.

The gateway prompt asks for five numbered, bold-labelled sections:

    1. **Disease/Condition**: ...
    2. **Confidence**: ...
    3. **Symptoms Observed**: ...
    4. **Recommended Treatment**: ...
    5. **Prevention Tips**: ...

The model does not always comply, so every section is optional and the
parser never raises. Callers show the raw text when the report
`needs_raw_fallback`.
"""
import re
from typing import List

from .models import (
    ConfidenceLevel,
    DiagnosticReport,
    confidence_display,
    confidence_level,
    is_healthy,
)

__all__ = [
    "ConfidenceLevel",
    "confidence_display",
    "confidence_level",
    "is_healthy",
    "parse_ai_response",
    "plant_name_from_filename",
]

# Single-line sections: capture to end of line
DISEASE_RE = re.compile(r"\*\*Disease/Condition\*\*:\s*(.+?)(?:\n|$)", re.IGNORECASE)
CONFIDENCE_RE = re.compile(r"\*\*Confidence\*\*:\s*(.+?)(?:\n|$)", re.IGNORECASE)

# Block sections: capture until the next numbered item, bold header or end of text
_BLOCK_END = r"(?=\n\d\.|\n\*\*|$)"
SYMPTOMS_RE = re.compile(r"\*\*Symptoms Observed\*\*:\s*(.+?)" + _BLOCK_END, re.IGNORECASE | re.DOTALL)
TREATMENT_RE = re.compile(r"\*\*Recommended Treatment\*\*:\s*(.+?)" + _BLOCK_END, re.IGNORECASE | re.DOTALL)
PREVENTION_RE = re.compile(r"\*\*Prevention Tips\*\*:\s*(.+?)" + _BLOCK_END, re.IGNORECASE | re.DOTALL)

SYMPTOM_SPLIT_RE = re.compile(r"[-•]\s*|\n")


def _capture(pattern: re.Pattern, text: str) -> str:
    match = pattern.search(text)
    return match.group(1).strip() if match else ""


def _split_symptoms(block: str) -> List[str]:
    fragments = (fragment.strip() for fragment in SYMPTOM_SPLIT_RE.split(block))
    return [f for f in fragments if f and not f.startswith("**")]


def parse_ai_response(prediction: str) -> DiagnosticReport:
    """Extract the diagnostic fields from a model answer.

    Args:
        prediction: raw text as returned by the gateway.

    Returns:
        A fully defaulted DiagnosticReport. Missing sections are empty.
    """
    text = prediction if isinstance(prediction, str) else ""

    symptoms_block = _capture(SYMPTOMS_RE, text)

    return DiagnosticReport(
        disease=_capture(DISEASE_RE, text),
        confidence=_capture(CONFIDENCE_RE, text),
        symptoms=_split_symptoms(symptoms_block) if symptoms_block else [],
        treatment=_capture(TREATMENT_RE, text),
        prevention=_capture(PREVENTION_RE, text),
    )


def plant_name_from_filename(filename: str) -> str:
    """'tomato_leaf-01.jpg' -> 'tomato leaf 01'"""
    stem = re.sub(r"\.[^/.]+$", "", filename or "")
    return re.sub(r"[-_]", " ", stem)
