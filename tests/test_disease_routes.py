import pytest
from fastapi.testclient import TestClient

from agroagent import config, gateway
from agroagent.main import app


@pytest.fixture
def api():
    return TestClient(app)


@pytest.fixture
def upstream(monkeypatch, fake_response, recorder):
    """Replace the completion service with a canned answer."""
    monkeypatch.setattr(config, "AI_GATEWAY_API_KEY", "secret")
    post = recorder(fake_response(200, {"choices": [{"message": {
        "content": "**Disease/Condition**: Healthy\n**Confidence**: High\n"}}]}))
    monkeypatch.setattr(gateway.requests, "post", post)
    return post


def test_home(api):
    resp = api.get("/")
    assert resp.status_code == 200
    assert "crop-detect" in resp.json()["message"]


def test_crop_detect_forwards_prediction(api, upstream):
    resp = api.post("/crop-detect", files={"file": ("leaf.jpg", b"jpegbytes", "image/jpeg")})

    assert resp.status_code == 200
    assert resp.json() == {
        "filename": "leaf.jpg",
        "prediction": "**Disease/Condition**: Healthy\n**Confidence**: High\n",
        "success": True,
    }
    assert len(upstream.calls) == 1


def test_crop_detect_keeps_declared_mime_type(api, upstream):
    api.post("/crop-detect", files={"file": ("leaf.png", b"pngbytes", "image/png")})

    _, kwargs = upstream.calls[0]
    url = kwargs["json"]["messages"][0]["content"][1]["image_url"]["url"]
    assert url.startswith("data:image/png;base64,")


def test_crop_detect_defaults_undeclared_mime_type(api, upstream):
    api.post("/crop-detect", files={"file": ("blob", b"bytes", "application/octet-stream")})

    _, kwargs = upstream.calls[0]
    url = kwargs["json"]["messages"][0]["content"][1]["image_url"]["url"]
    assert url.startswith("data:image/jpeg;base64,")


def test_missing_file_is_rejected_without_upstream_call(api, upstream):
    resp = api.post("/crop-detect", files={"image": ("leaf.jpg", b"jpegbytes", "image/jpeg")})

    assert resp.status_code == 400
    assert resp.json() == {"error": "No file provided"}
    assert upstream.calls == []


def test_text_file_field_is_rejected_without_upstream_call(api, upstream):
    resp = api.post("/crop-detect", data={"file": "not-a-file"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "No file provided"}
    assert upstream.calls == []


def test_empty_body_is_rejected(api, upstream):
    resp = api.post("/crop-detect")

    assert resp.status_code == 400
    assert resp.json() == {"error": "No file provided"}
    assert upstream.calls == []


def test_upstream_failure_is_a_server_error(api, monkeypatch, fake_response, recorder):
    monkeypatch.setattr(config, "AI_GATEWAY_API_KEY", "secret")
    monkeypatch.setattr(gateway.requests, "post", recorder(fake_response(503, None, text="unavailable")))

    resp = api.post("/crop-detect", files={"file": ("leaf.jpg", b"jpegbytes", "image/jpeg")})

    assert resp.status_code == 500
    assert resp.json() == {"error": "AI analysis failed: 503"}


def test_missing_upstream_credential_is_a_server_error(api, monkeypatch):
    monkeypatch.setattr(config, "AI_GATEWAY_API_KEY", None)

    resp = api.post("/crop-detect", files={"file": ("leaf.jpg", b"jpegbytes", "image/jpeg")})

    assert resp.status_code == 500
    assert "AI_GATEWAY_API_KEY" in resp.json()["error"]


def test_cors_preflight(api):
    resp = api.options("/crop-detect", headers={
        "Origin": "http://localhost:5173",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "authorization",
    })

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
