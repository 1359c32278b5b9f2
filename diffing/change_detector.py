from __future__ import annotations

from typing import List

from ingestion.document_models import SectionMap


def diff_keys(before: SectionMap, after: SectionMap) -> List[str]:
    """
    Keys that were added, removed or whose text changed.

    Order: keys of `before` as they appear there, then keys that only
    exist in `after`.
    """
    changed: List[str] = []
    for key in list(before) + [k for k in after if k not in before]:
        if before.get(key) != after.get(key):
            changed.append(key)
    return changed


def classify(key: str, before: SectionMap, after: SectionMap) -> str:
    if key not in before:
        return "added"
    if key not in after:
        return "removed"
    return "modified" if before[key] != after[key] else "unchanged"
