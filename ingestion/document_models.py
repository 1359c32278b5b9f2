from dataclasses import dataclass, field
from typing import Any, Dict, List

SectionMap = Dict[str, str]  # section key (anchor id) -> normalized section text


@dataclass
class RawDoc:
    source_id: str  # URL or path the document was read from
    text: str  # full raw markup
    metadata: Dict[str, Any]  # { "source": "...", "type": "web|file" }
    content_sha1: str


@dataclass
class DiffBlock:
    key: str
    diff: str

    def render(self) -> str:
        return f"===== {self.key} =====\n{self.diff.strip()}\n"


@dataclass
class RunResult:
    status: str  # unchanged | no_sections_changed | notified | dry_run
    changed_keys: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    report: str = ""
