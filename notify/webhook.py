"""
Report delivery over JSON webhooks.

Redirects are never followed silently: a 3xx answer gets exactly one
explicit re-POST of the same body to its Location target.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urldefrag, urljoin

import orjson
import requests

from common.errors import DeliveryFailure
from common.logger import get_logger

log = get_logger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


def change_links(base_url: str, keys: Iterable[str]) -> List[str]:
    """Anchor link for every changed section, in ChangeSet order."""
    base, _ = urldefrag(base_url)
    return [f"{base}#{key}" for key in keys]


def _post(url: str, data: bytes, timeout: int) -> requests.Response:
    try:
        return requests.post(
            url, data=data, headers=_JSON_HEADERS, timeout=timeout, allow_redirects=False
        )
    except requests.RequestException as e:
        raise DeliveryFailure("webhook unreachable", url=url) from e


def post_json(url: str, body: Dict[str, Any], timeout: int = 15) -> requests.Response:
    data = orjson.dumps(body)
    resp = _post(url, data, timeout)

    if 300 <= resp.status_code < 400:
        location = resp.headers.get("Location")
        if not location:
            raise DeliveryFailure(
                "redirect without Location header", url=url, status=resp.status_code
            )
        target = urljoin(url, location)
        log.info("Webhook redirected (%d), re-posting once", resp.status_code)
        resp = _post(target, data, timeout)
        url = target

    if not 200 <= resp.status_code < 300:
        raise DeliveryFailure(
            "webhook returned non-success status",
            url=url,
            status=resp.status_code,
            body=resp.text[:500],
        )
    return resp


class WebhookNotifier:
    """Primary channel: shared-secret JSON webhook receiving the full report."""

    name = "webhook"

    def __init__(self, url: str, secret: str, timeout: int = 15):
        self.url = url
        self.secret = secret
        self.timeout = timeout

    def send(self, report: str, links: List[str]) -> None:
        post_json(
            self.url,
            {"secret": self.secret, "payload": report, "links": links},
            timeout=self.timeout,
        )
        log.info("Report delivered to webhook (%d links)", len(links))


def build_chat_message(
    document_name: str,
    target_url: str,
    links: List[str],
    report_url: Optional[str] = None,
) -> str:
    lines = [
        f"❗️{document_name} has been updated",
        f"Target URL: {target_url}",
        "Changed sections:",
        *(f"- {url}" for url in links),
    ]
    if report_url:
        lines += ["", "Diff document:", report_url]
    return "\n".join(lines)


class ChatNotifier:
    """Secondary channel: chat incoming webhook (Slack style `{"text": ...}`)."""

    name = "chat"

    def __init__(
        self,
        url: str,
        document_name: str,
        target_url: str,
        report_url: Optional[str] = None,
        timeout: int = 15,
    ):
        self.url = url
        self.document_name = document_name
        self.target_url = target_url
        self.report_url = report_url
        self.timeout = timeout

    def send(self, report: str, links: List[str]) -> None:
        text = build_chat_message(
            self.document_name, self.target_url, links, self.report_url
        )
        post_json(self.url, {"text": text}, timeout=self.timeout)
        log.info("Chat notification sent")
