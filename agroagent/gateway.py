"""
Upstream call to the multimodal chat-completions service.

One request per uploaded image: the fixed pathologist prompt plus the image as
an inline data URL. The model's text comes back unmodified.
"""
import base64
import logging
from typing import Any, Dict, Optional

import requests

from . import config

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"
NO_ANALYSIS = "Unable to analyze image"

DIAGNOSIS_PROMPT = """You are an expert agricultural plant pathologist. Analyze this crop/plant image and identify any diseases or health issues.

Provide your response in this exact format:
1. **Disease/Condition**: [Name of the disease or "Healthy" if no disease detected]
2. **Confidence**: [High/Medium/Low]
3. **Symptoms Observed**: [Brief description of visible symptoms]
4. **Recommended Treatment**: [Practical treatment recommendations]
5. **Prevention Tips**: [How to prevent this in the future]

Be specific and practical in your recommendations. If you cannot identify the plant or disease clearly, state that and provide general advice."""


class GatewayError(RuntimeError):
    """The completion service is unreachable, misconfigured or returned an error."""


def resolve_mime_type(content_type: Optional[str]) -> str:
    # Browsers send octet-stream when they cannot tell the type
    if not content_type or content_type == "application/octet-stream":
        return DEFAULT_MIME_TYPE
    return content_type


def build_payload(image_bytes: bytes, mime_type: str,
                  model: Optional[str] = None, max_tokens: Optional[int] = None) -> Dict[str, Any]:
    """Build the chat-completions body: one user turn with text and image parts."""
    image_b64 = base64.b64encode(image_bytes).decode("ascii")
    return {
        "model": model or config.AI_MODEL,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": DIAGNOSIS_PROMPT},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{image_b64}"},
                    },
                ],
            }
        ],
        "max_tokens": max_tokens or config.AI_MAX_TOKENS,
    }


def extract_prediction(data: Any) -> str:
    """Return choices[0].message.content, or the generic fallback text."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return NO_ANALYSIS
    return content or NO_ANALYSIS


def analyze_image(image_bytes: bytes, mime_type: str,
                  api_key: Optional[str] = None, url: Optional[str] = None) -> str:
    """Send one image to the completion service and return its raw answer.

    Raises:
        GatewayError: missing credential, transport failure, non-2xx status
            or an undecodable body.
    """
    api_key = api_key or config.AI_GATEWAY_API_KEY
    url = url or config.AI_GATEWAY_URL
    if not api_key:
        raise GatewayError("AI_GATEWAY_API_KEY is not configured")

    payload = build_payload(image_bytes, mime_type)
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }

    logger.debug("Posting %d image bytes (%s) to %s", len(image_bytes), mime_type, url)
    try:
        resp = requests.post(url, json=payload, headers=headers)
    except requests.exceptions.RequestException as e:
        raise GatewayError(f"Failed to reach AI gateway: {e}")

    if not resp.ok:
        logger.error("AI Gateway error: %s", resp.text)
        raise GatewayError(f"AI analysis failed: {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as e:
        raise GatewayError(f"Failed to parse AI gateway response: {e}")

    return extract_prediction(data)
