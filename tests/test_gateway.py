import base64

import pytest
import requests

from agroagent import config, gateway
from agroagent.gateway import (
    DIAGNOSIS_PROMPT,
    GatewayError,
    analyze_image,
    build_payload,
    extract_prediction,
    resolve_mime_type,
)
from agroagent.parser import parse_ai_response


@pytest.mark.parametrize("declared, expected", [
    ("image/png", "image/png"),
    ("image/webp", "image/webp"),
    (None, "image/jpeg"),
    ("", "image/jpeg"),
    ("application/octet-stream", "image/jpeg"),
])
def test_resolve_mime_type(declared, expected):
    assert resolve_mime_type(declared) == expected


def test_payload_is_one_user_turn_with_prompt_and_image(monkeypatch):
    monkeypatch.setattr(config, "AI_MODEL", "google/gemini-2.5-flash")
    monkeypatch.setattr(config, "AI_MAX_TOKENS", 1000)

    payload = build_payload(b"leafbytes", "image/png")

    assert payload["model"] == "google/gemini-2.5-flash"
    assert payload["max_tokens"] == 1000
    [message] = payload["messages"]
    assert message["role"] == "user"
    text_part, image_part = message["content"]
    assert text_part == {"type": "text", "text": DIAGNOSIS_PROMPT}
    expected_b64 = base64.b64encode(b"leafbytes").decode("ascii")
    assert image_part == {"type": "image_url", "image_url": {"url": f"data:image/png;base64,{expected_b64}"}}


def test_prompt_requests_every_parsed_section():
    for label in ("**Disease/Condition**:", "**Confidence**:", "**Symptoms Observed**:",
                  "**Recommended Treatment**:", "**Prevention Tips**:"):
        assert label in DIAGNOSIS_PROMPT


@pytest.mark.parametrize("data", [{}, {"choices": []}, {"choices": [{"message": {}}]},
                                  {"choices": [{"message": {"content": ""}}]}, None])
def test_extract_prediction_defaults(data):
    assert extract_prediction(data) == "Unable to analyze image"


def test_analyze_image_returns_text_unmodified(monkeypatch, fake_response, recorder, well_formed_answer):
    post = recorder(fake_response(200, {"choices": [{"message": {"content": well_formed_answer}}]}))
    monkeypatch.setattr(gateway.requests, "post", post)

    prediction = analyze_image(b"img", "image/jpeg", api_key="secret", url="http://ai/v1/chat/completions")

    assert prediction == well_formed_answer
    assert parse_ai_response(prediction).disease == "Early Blight (Alternaria solani)"
    args, kwargs = post.calls[0]
    assert args == ("http://ai/v1/chat/completions",)
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["json"]["messages"][0]["content"][1]["image_url"]["url"].startswith("data:image/jpeg;base64,")


def test_missing_credential_skips_upstream(monkeypatch, recorder):
    post = recorder()
    monkeypatch.setattr(gateway.requests, "post", post)
    monkeypatch.setattr(config, "AI_GATEWAY_API_KEY", None)

    with pytest.raises(GatewayError, match="AI_GATEWAY_API_KEY"):
        analyze_image(b"img", "image/jpeg")
    assert post.calls == []


def test_upstream_error_status(monkeypatch, fake_response, recorder):
    monkeypatch.setattr(gateway.requests, "post", recorder(fake_response(429, None, text="rate limited")))

    with pytest.raises(GatewayError, match="AI analysis failed: 429"):
        analyze_image(b"img", "image/jpeg", api_key="secret")


def test_upstream_unreachable(monkeypatch, recorder):
    monkeypatch.setattr(gateway.requests, "post", recorder(exc=requests.exceptions.ConnectionError("dns")))

    with pytest.raises(GatewayError, match="Failed to reach AI gateway"):
        analyze_image(b"img", "image/jpeg", api_key="secret")


def test_upstream_invalid_json(monkeypatch, fake_response, recorder):
    monkeypatch.setattr(gateway.requests, "post", recorder(fake_response(200, None, text="<html>")))

    with pytest.raises(GatewayError, match="Failed to parse"):
        analyze_image(b"img", "image/jpeg", api_key="secret")
