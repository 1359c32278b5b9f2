"""
Error taxonomy for a monitoring run.

Every fatal error aborts the run before the snapshot is advanced, so the
same change is picked up again by the next scheduled invocation.
"""

from __future__ import annotations

from typing import Any


class PolicyWatchError(Exception):
    """
    Base error carrying a stable code plus diagnostic context
    (stage, section key, URL, ...).

    Usage:
        raise DeliveryFailure("webhook returned 500", url=url, status=500)
    """

    code = "POLICY_WATCH_ERROR"

    def __init__(self, message: str = "", **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        parts = [f"[{self.code}]"]
        if self.message:
            parts.append(self.message)
        if ctx_str:
            parts.append(f"({ctx_str})")
        return " ".join(parts)


class SourceUnavailable(PolicyWatchError):
    """Current document or previous snapshot could not be read."""

    code = "SOURCE_UNAVAILABLE"


class ParseDegraded(PolicyWatchError):
    """Section extraction failed for one side of the comparison."""

    code = "PARSE_DEGRADED"


class DiffProviderFailure(PolicyWatchError):
    """The diff provider failed for a reason other than 'inputs differ'."""

    code = "DIFF_PROVIDER_FAILURE"


class DeliveryFailure(PolicyWatchError):
    code = "DELIVERY_FAILURE"


class ConfigurationMissing(PolicyWatchError):
    """A required secret or endpoint is absent at startup."""

    code = "CONFIGURATION_MISSING"


class SnapshotWriteFailure(PolicyWatchError):
    """The run succeeded but the new snapshot could not be stored."""

    code = "SNAPSHOT_WRITE_FAILURE"
