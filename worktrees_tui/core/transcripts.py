"""Derive one-line session summaries from Claude Code transcripts.

Transcripts are JSONL files under ``~/.claude/projects/<project>/``. The
summary for a cwd is the first real user message of the most recently
active transcript for that cwd.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Iterable, Optional, cast

from worktrees_tui.constants import (
    CAVEAT_PREFIX,
    COMMAND_ENVELOPE_MARKERS,
    SUMMARY_ELLIPSIS,
    SUMMARY_MAX_LENGTH,
    TRANSCRIPT_MAX_AGE_S,
)

logger = logging.getLogger(__name__)


def _iter_jsonl_entries(path: Path) -> Iterable[dict[str, object]]:
    """Yield JSON objects for each line in a transcript file."""
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            if not line.strip():
                continue
            try:
                entry_value: object = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(entry_value, dict):
                yield cast(dict[str, object], entry_value)


def _extract_user_text(entry: dict[str, object]) -> Optional[str]:
    """Return the text of a user message entry, or None."""
    message = entry.get("message")
    if not isinstance(message, dict) or message.get("role") != "user":
        return None
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                return text if isinstance(text, str) else None
    return None


def is_real_user_message(text: Optional[str]) -> bool:
    """Filter out blanks, command envelopes, caveats and slash commands."""
    if text is None:
        return False
    stripped = text.strip()
    if not stripped or stripped == "null":
        return False
    if any(marker in stripped for marker in COMMAND_ENVELOPE_MARKERS):
        return False
    if stripped.startswith(CAVEAT_PREFIX):
        return False
    # Single slash = command (/clear); multiple slashes = path (/Users/...)
    first_word = stripped.split()[0]
    if first_word.startswith("/") and first_word.count("/") == 1:
        return False
    return True


def truncate_summary(text: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    line = " ".join(text.split())
    if len(line) <= max_length:
        return line
    return line[: max_length - len(SUMMARY_ELLIPSIS)] + SUMMARY_ELLIPSIS


def summarize_transcript(path: Path) -> tuple[Optional[str], Optional[str]]:
    """Return ``(cwd, summary)`` for one transcript, stopping once both are known."""
    cwd: Optional[str] = None
    summary: Optional[str] = None
    for entry in _iter_jsonl_entries(path):
        if cwd is None:
            entry_cwd = entry.get("cwd")
            if isinstance(entry_cwd, str) and entry_cwd:
                cwd = entry_cwd
        if summary is None and entry.get("type") == "user":
            text = _extract_user_text(entry)
            if is_real_user_message(text):
                summary = truncate_summary(cast(str, text))
        if cwd is not None and summary is not None:
            break
    return cwd, summary


class TranscriptSummaries:
    """Scans recently active transcripts and maps cwd → summary."""

    def __init__(self, projects_dir: Path, max_age_s: float = TRANSCRIPT_MAX_AGE_S) -> None:
        self.projects_dir = Path(projects_dir)
        self.max_age_s = max_age_s

    def _recent_files(self, now: float) -> list[tuple[float, Path]]:
        if not self.projects_dir.is_dir():
            return []
        recent: list[tuple[float, Path]] = []
        for path in self.projects_dir.glob("*/*.jsonl"):
            try:
                mtime = path.stat().st_mtime
            except OSError:
                continue
            if now - mtime <= self.max_age_s:
                recent.append((mtime, path))
        recent.sort(key=lambda item: item[0], reverse=True)
        return recent

    def collect(self, now: Optional[float] = None) -> dict[str, str]:
        now = time.time() if now is None else now
        summaries: dict[str, str] = {}
        for _mtime, path in self._recent_files(now):
            try:
                cwd, summary = summarize_transcript(path)
            except OSError as e:
                logger.debug("Skipping transcript %s: %s", path, e)
                continue
            if cwd and summary and cwd not in summaries:
                summaries[cwd] = summary
        return summaries
