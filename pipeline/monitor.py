from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Protocol

from common.config import MonitorConfig
from common.errors import ParseDegraded
from common.logger import get_logger
from diffing.change_detector import classify, diff_keys
from diffing.providers import DiffProvider, build_provider
from diffing.renderer import render_report
from ingestion.document_models import RawDoc, RunResult, SectionMap
from ingestion.loaders import load_document
from ingestion.sections import extract_sections
from notify.webhook import ChatNotifier, WebhookNotifier, change_links
from storage.snapshot_store import FileSnapshotStore

log = get_logger(__name__)


class SnapshotStore(Protocol):
    def read(self) -> Optional[str]: ...

    def write(self, raw: str) -> None: ...


class Notifier(Protocol):
    name: str

    def send(self, report: str, links: List[str]) -> None: ...


class PolicyMonitor:
    """
    One monitoring run: fetch, compare with the snapshot, report, notify.

    The snapshot only moves forward once every notifier has accepted the
    report; any exception before that leaves it untouched.
    """

    def __init__(
        self,
        config: MonitorConfig,
        loader: Callable[[], RawDoc],
        store: SnapshotStore,
        provider: DiffProvider,
        notifiers: List[Notifier],
    ):
        self.config = config
        self.loader = loader
        self.store = store
        self.provider = provider
        self.notifiers = notifiers

    @classmethod
    def from_config(cls, config: MonitorConfig) -> "PolicyMonitor":
        settings, secrets = config.settings, config.secrets
        notifiers: List[Notifier] = [
            WebhookNotifier(
                secrets.gas_webhook_url,
                secrets.gas_shared_secret,
                timeout=settings.notify.timeout,
            )
        ]
        if secrets.slack_webhook_url:
            notifiers.append(
                ChatNotifier(
                    secrets.slack_webhook_url,
                    document_name=settings.document.name,
                    target_url=settings.document.target_url,
                    report_url=settings.notify.report_url,
                    timeout=settings.notify.timeout,
                )
            )
        return cls(
            config=config,
            loader=lambda: load_document(settings.document, settings.app),
            store=FileSnapshotStore(settings.app.snapshot_path),
            provider=build_provider(settings.diff),
            notifiers=notifiers,
        )

    def _extract(self, html: str) -> SectionMap:
        doc = self.config.settings.document
        return extract_sections(
            html,
            heading_tag=doc.heading_tag,
            id_attr=doc.id_attr,
            noise_tags=doc.noise_tags,
        )

    def _extract_before(self, previous: Optional[str]) -> SectionMap:
        if previous is None:
            return {}
        try:
            return self._extract(previous)
        except ParseDegraded as e:
            log.warning("Previous snapshot unparsable, comparing against nothing: %s", e)
            return {}

    def run(self, dry_run: bool = False, progress: bool = False) -> RunResult:
        current = self.loader()
        log.debug("Fetched document: %s", current.text)

        previous = self.store.read()
        log.debug("Previous document: %s", previous)
        if previous is not None and previous == current.text:
            log.info("No changes detected (sha1 %s).", current.content_sha1)
            return RunResult(status="unchanged")

        after = self._extract(current.text)
        before = self._extract_before(previous)

        keys = diff_keys(before, after)
        for key in keys:
            log.info("Section %s: %s", key, classify(key, before, after))
        links = change_links(self.config.settings.document.target_url, keys)

        if not keys:
            log.info("Document changed outside tracked sections, nothing to notify.")
            if not dry_run:
                self.store.write(current.text)
            return RunResult(status="no_sections_changed")

        report = asyncio.run(
            render_report(
                keys,
                before,
                after,
                self.provider,
                concurrency=self.config.settings.diff.concurrency,
                progress=progress,
            )
        )
        log.info("diff length: %d", len(report))
        log.info("diff preview: %s", report[:500])

        if dry_run:
            return RunResult(status="dry_run", changed_keys=keys, links=links, report=report)

        for notifier in self.notifiers:
            notifier.send(report, links)

        self.store.write(current.text)
        return RunResult(status="notified", changed_keys=keys, links=links, report=report)
