from __future__ import annotations

import asyncio
from typing import List, Sequence, Tuple

from tqdm.asyncio import tqdm_asyncio

from common.errors import DiffProviderFailure
from common.logger import get_logger
from diffing.providers import DiffProvider
from ingestion.document_models import DiffBlock, SectionMap

log = get_logger(__name__)

_Outcome = Tuple[str, "DiffBlock | None", "DiffProviderFailure | None"]


async def render_blocks(
    keys: Sequence[str],
    before: SectionMap,
    after: SectionMap,
    provider: DiffProvider,
    concurrency: int = 4,
    progress: bool = False,
) -> List[DiffBlock]:
    """
    Diff every key, at most `concurrency` provider calls at a time.

    A missing side is diffed as the empty string, so removed sections show
    up as full deletions and new ones as full additions. Every key is
    attempted; if any of them failed the whole batch raises afterwards.
    """
    semaphore = asyncio.Semaphore(concurrency)

    async def _one(key: str) -> _Outcome:
        async with semaphore:
            try:
                diff = await provider.diff(before.get(key, ""), after.get(key, ""))
            except DiffProviderFailure as e:
                return key, None, e
            except Exception as e:
                err = DiffProviderFailure(str(e), key=key)
                err.__cause__ = e
                return key, None, err
        return key, DiffBlock(key=key, diff=diff), None

    outcomes: List[_Outcome] = await tqdm_asyncio.gather(
        *(_one(k) for k in keys),
        desc="Diffing sections",
        disable=not progress,
    )

    failed = [(key, err) for key, _, err in outcomes if err is not None]
    if failed:
        for key, err in failed:
            log.error("Diff failed for section %s: %s", key, err)
        raise DiffProviderFailure(
            f"diff failed for {len(failed)} section(s)",
            keys=[key for key, _ in failed],
            provider=provider.name,
        ) from failed[0][1]
    return [block for _, block, _ in outcomes]


async def render_report(
    keys: Sequence[str],
    before: SectionMap,
    after: SectionMap,
    provider: DiffProvider,
    concurrency: int = 4,
    progress: bool = False,
) -> str:
    if not keys:
        return ""
    blocks = await render_blocks(keys, before, after, provider, concurrency, progress)
    return "\n".join(block.render() for block in blocks)
