import pytest
import requests
from tenacity import wait_none

import ingestion.loaders as loaders
from common.config import AppConfig, DocumentConfig
from common.errors import SourceUnavailable
from ingestion.loaders import load_document, load_from_path, load_from_url


class FakeResponse:
    def __init__(self, text="<html></html>", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(loaders._fetch.retry, "wait", wait_none())


def test_load_from_path_keeps_raw_text(tmp_path):
    path = tmp_path / "terms.html"
    path.write_bytes(b"<h3 id='a'>A</h3>\r\n<p>b</p>")

    doc = load_from_path(path)

    assert doc.text == "<h3 id='a'>A</h3>\r\n<p>b</p>"
    assert doc.metadata == {"source": "terms.html", "type": "file"}
    assert len(doc.content_sha1) == 40


def test_load_from_missing_path(tmp_path):
    with pytest.raises(SourceUnavailable):
        load_from_path(tmp_path / "missing.html")


def test_load_from_url(monkeypatch):
    seen = {}

    def fake_get(url, timeout=None, headers=None):
        seen.update(url=url, timeout=timeout, headers=headers)
        return FakeResponse("<h3 id='x'>X</h3>")

    monkeypatch.setattr(loaders.requests, "get", fake_get)

    doc = load_from_url("https://example.com/terms.html", timeout=5, user_agent="UA/1")

    assert doc.text == "<h3 id='x'>X</h3>"
    assert doc.source_id == "https://example.com/terms.html"
    assert seen["timeout"] == 5
    assert seen["headers"] == {"User-Agent": "UA/1"}


def test_fetch_failure_retries_then_raises(monkeypatch, no_retry_wait):
    calls = []

    def fake_get(url, timeout=None, headers=None):
        calls.append(url)
        return FakeResponse(status_code=503)

    monkeypatch.setattr(loaders.requests, "get", fake_get)

    with pytest.raises(SourceUnavailable) as exc:
        load_from_url("https://example.com/terms.html")

    assert len(calls) == 3
    assert exc.value.context["url"] == "https://example.com/terms.html"


def test_load_document_prefers_local_file(tmp_path, monkeypatch):
    path = tmp_path / "current.html"
    path.write_text("<p>local</p>")

    def fail_get(*args, **kwargs):
        raise AssertionError("no network expected")

    monkeypatch.setattr(loaders.requests, "get", fail_get)
    document = DocumentConfig(target_url="https://example.com", source_path=path)

    assert load_document(document, AppConfig()).text == "<p>local</p>"
