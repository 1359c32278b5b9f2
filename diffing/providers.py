"""
Diff providers: turn a (before, after) pair of section texts into a
minimal-context textual diff. "No differences" is an empty string, never
an error.
"""

from __future__ import annotations

import asyncio
import difflib
import tempfile
from pathlib import Path
from typing import List

from common.config import DiffConfig
from common.errors import DiffProviderFailure
from common.logger import get_logger

log = get_logger(__name__)


class DiffProvider:
    name = "base"

    async def diff(self, before: str, after: str) -> str:
        raise NotImplementedError


class GitDiffProvider(DiffProvider):
    """
    Shells out to `git diff --no-index` on two temp files.

    git runs inside the temp directory with relative file names, so the
    output never contains the random directory path.
    """

    name = "git"

    def __init__(self, git_binary: str = "git", word_diff: bool = True):
        self.git_binary = git_binary
        self.word_diff = word_diff

    def command(self) -> List[str]:
        cmd = [
            self.git_binary,
            "-c",
            "core.quotepath=false",
            "diff",
            "--no-index",
            "--no-ext-diff",
            "--color=never",
            "-U0",
            "--ignore-blank-lines",
            "--ignore-all-space",
        ]
        if self.word_diff:
            cmd.append("--word-diff=plain")
        return cmd + ["--", "before.txt", "after.txt"]

    async def diff(self, before: str, after: str) -> str:
        try:
            workdir = tempfile.TemporaryDirectory(prefix="policywatch-")
        except OSError as e:
            raise DiffProviderFailure(
                "cannot create temp directory", stage="materialize"
            ) from e

        with workdir as tmp:
            try:
                Path(tmp, "before.txt").write_text(before, encoding="utf-8")
                Path(tmp, "after.txt").write_text(after, encoding="utf-8")
            except OSError as e:
                raise DiffProviderFailure(
                    "cannot write diff inputs", stage="materialize"
                ) from e
            try:
                proc = await asyncio.create_subprocess_exec(
                    *self.command(),
                    cwd=tmp,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as e:
                raise DiffProviderFailure(
                    "could not start git", binary=self.git_binary
                ) from e
            stdout, stderr = await proc.communicate()

        # 1 means "files differ"
        if proc.returncode not in (0, 1):
            raise DiffProviderFailure(
                "git diff failed",
                returncode=proc.returncode,
                stderr=stderr.decode("utf-8", errors="replace").strip(),
            )
        return stdout.decode("utf-8", errors="replace")


class DifflibDiffProvider(DiffProvider):
    """Pure-Python unified diff, zero context, blank lines and spacing ignored."""

    name = "difflib"

    @staticmethod
    def _lines(text: str) -> List[str]:
        lines = (" ".join(line.split()) for line in text.splitlines())
        return [line for line in lines if line]

    async def diff(self, before: str, after: str) -> str:
        diff = difflib.unified_diff(
            self._lines(before),
            self._lines(after),
            fromfile="before",
            tofile="after",
            n=0,
            lineterm="",
        )
        return "\n".join(diff)


def build_provider(cfg: DiffConfig) -> DiffProvider:
    if cfg.provider == "git":
        return GitDiffProvider(git_binary=cfg.git_binary, word_diff=cfg.word_diff)
    if cfg.provider == "difflib":
        return DifflibDiffProvider()
    raise ValueError(f"Unsupported diff provider: {cfg.provider}")
