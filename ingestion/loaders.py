from __future__ import annotations

import hashlib
from pathlib import Path

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from common.config import AppConfig, DocumentConfig
from common.errors import SourceUnavailable
from common.logger import get_logger
from ingestion.document_models import RawDoc

log = get_logger(__name__)


def _sha1(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def load_from_path(path: Path) -> RawDoc:
    """Read a previously downloaded document from disk."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            txt = f.read()
    except OSError as e:
        raise SourceUnavailable("cannot read document file", path=str(path)) from e
    return RawDoc(
        source_id=str(Path(path).resolve()),
        text=txt,
        metadata={"source": Path(path).name, "type": "file"},
        content_sha1=_sha1(txt),
    )


@retry(
    retry=retry_if_exception_type(requests.RequestException),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)
def _fetch(url: str, timeout: int, user_agent: str) -> requests.Response:
    """Download URL with retry logic."""
    resp = requests.get(url, timeout=timeout, headers={"User-Agent": user_agent})
    resp.raise_for_status()
    return resp


def load_from_url(
    url: str, timeout: int = 30, user_agent: str = "PolicyWatch/1.0"
) -> RawDoc:
    try:
        resp = _fetch(url, timeout, user_agent)
    except requests.RequestException as e:
        raise SourceUnavailable("failed to fetch document", url=url) from e

    html = resp.text
    log.info("Fetched %s (%d chars)", url, len(html))
    return RawDoc(
        source_id=url,
        text=html,
        metadata={"source": url, "type": "web", "status": resp.status_code},
        content_sha1=_sha1(html),
    )


def load_document(document: DocumentConfig, app: AppConfig) -> RawDoc:
    """Current version of the monitored document, from disk or the web."""
    if document.source_path is not None:
        return load_from_path(document.source_path)
    return load_from_url(document.target_url, app.timeout, app.user_agent)
