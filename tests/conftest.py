import json

import pytest
import requests


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self.text, 0)
        return self._body

    def raise_for_status(self):
        if not self.ok:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class Recorder:
    """Records calls and replays a canned response or exception."""

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def recorder():
    return Recorder


WELL_FORMED_ANSWER = """1. **Disease/Condition**: Early Blight (Alternaria solani)
2. **Confidence**: High
3. **Symptoms Observed**:
- Dark concentric rings on older leaves
- Yellowing around lesions
- Premature leaf drop
4. **Recommended Treatment**: Remove infected leaves and apply a copper-based fungicide every 7-10 days.
5. **Prevention Tips**: Rotate crops yearly and water at the base of the plant."""


@pytest.fixture
def well_formed_answer():
    return WELL_FORMED_ANSWER
