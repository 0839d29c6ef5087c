import pytest
import requests
import streamlit as st


@pytest.fixture(autouse=True)
def no_secrets(monkeypatch):
    """Run without a .streamlit/secrets.toml so the default subgraph endpoints apply."""
    monkeypatch.setattr(st, "secrets", {})


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self.payload


@pytest.fixture
def fake_post(monkeypatch):
    """Replace requests.post; returns the list of captured calls. Set ``.payload`` on it to answer."""

    class Recorder(list):
        payload = {}
        status_code = 200
        error = None

    calls = Recorder()

    def post(url, json=None, headers=None, **kwargs):
        calls.append({"url": url, "json": json, "headers": headers})
        if calls.error is not None:
            raise calls.error
        return FakeResponse(calls.payload, calls.status_code)

    monkeypatch.setattr(requests, "post", post)
    return calls
