"""
Split a structured HTML document into keyed sections.

A section starts at a heading of the configured level that carries an
anchor id and runs over the heading's following siblings up to the next
such heading. The anchor id is the section key, which is what change
links point at.
"""

from __future__ import annotations

from itertools import chain
from typing import Callable, Iterable, Iterator, List, Sequence, Tuple, TypeVar

from bs4 import BeautifulSoup, NavigableString, Tag

from common.errors import ParseDegraded
from common.logger import get_logger
from ingestion.cleaners import collapse_whitespace, normalize_text
from ingestion.document_models import SectionMap

log = get_logger(__name__)

N = TypeVar("N")

DEFAULT_NOISE_TAGS = ("script", "style", "noscript")


def slice_runs(
    nodes: Iterable[N], is_marker: Callable[[N], bool]
) -> Iterator[Tuple[N, List[N]]]:
    """
    Yield (marker, run) pairs where run holds the nodes after a marker up to
    the next marker. Nodes before the first marker are dropped.
    """
    marker = None
    run: List[N] = []
    for node in nodes:
        if is_marker(node):
            if marker is not None:
                yield marker, run
            marker, run = node, []
        elif marker is not None:
            run.append(node)
    if marker is not None:
        yield marker, run


def _attr_value(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):  # multi-valued attributes such as class
        value = " ".join(value)
    return value or ""


def _visible_text(node) -> str:
    if isinstance(node, Tag):
        return node.get_text().strip()
    # Comments, doctypes and CDATA are NavigableString subclasses
    if type(node) is NavigableString:
        return str(node).strip()
    return ""


def _section_text(heading: str, body_parts: Sequence[str]) -> str:
    body = "\n\n".join(body_parts)
    if heading:
        return normalize_text(f"# {heading}\n\n{body}")
    return normalize_text(body)


def extract_sections(
    html: str,
    heading_tag: str = "h3",
    id_attr: str = "id",
    noise_tags: Sequence[str] = DEFAULT_NOISE_TAGS,
) -> SectionMap:
    """
    Build an ordered {anchor id: normalized text} map from raw HTML.

    Headings without an id are not sections of their own; their text stays
    in the body of the section before them. A repeated id keeps the text of
    its last occurrence.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as e:
        raise ParseDegraded("could not parse document", stage="extract") from e

    for tag in soup.find_all(list(noise_tags)):
        tag.decompose()

    def is_heading(node) -> bool:
        return (
            isinstance(node, Tag)
            and node.name == heading_tag
            and bool(_attr_value(node, id_attr).strip())
        )

    sections: SectionMap = {}
    for heading in soup.find_all(is_heading):
        # Only the first run matters: it is bounded by the next heading sibling.
        _, run = next(slice_runs(chain([heading], heading.next_siblings), is_heading))
        # kept verbatim: change links use it as the page anchor
        key = _attr_value(heading, id_attr)
        if key in sections:
            log.debug("Duplicate section id %r, keeping the later one", key)
        parts = [t for t in (_visible_text(n) for n in run) if t]
        sections[key] = _section_text(collapse_whitespace(heading.get_text()), parts)

    log.info("Extracted %d sections from <%s %s=...> headings", len(sections), heading_tag, id_attr)
    return sections
