#!/usr/bin/env python3
"""Comment-aware line classifier for PR description text.

Markdown PR templates usually carry HTML comment blocks with instructions
for the author. The scanner is a two-state machine (normal / inside a
comment) that drops those blocks, blank lines and sub-headings, and keeps
every other line trimmed.
"""

from __future__ import annotations

from typing import Iterable, List, NamedTuple, Optional

from utils.changelog_models import ScanState


COMMENT_START = "<!--"
COMMENT_END = "-->"


class ScanResult(NamedTuple):
    state: ScanState
    line: Optional[str]


def transition(line: str, state: ScanState) -> ScanState:
    """Return the scanner state after reading ``line``.

    A line holding both markers counts as a comment start.
    """
    if COMMENT_START in line:
        return ScanState.IN_COMMENT
    if COMMENT_END in line:
        return ScanState.NORMAL
    return state


def scan_line(line: str, state: ScanState) -> ScanResult:
    """Classify one line. Marker lines never carry content, even text around the marker."""
    if COMMENT_START in line or COMMENT_END in line:
        return ScanResult(transition(line, state), None)

    trimmed = line.strip()
    if state is ScanState.NORMAL and trimmed and not trimmed.startswith("#"):
        return ScanResult(state, trimmed)
    return ScanResult(state, None)


def scan_lines(lines: Iterable[str], state: ScanState = ScanState.NORMAL) -> List[str]:
    """Fold ``scan_line`` over ``lines`` and collect the surviving lines in order."""
    kept: List[str] = []
    for raw in lines:
        state, line = scan_line(raw, state)
        if line is not None:
            kept.append(line)
    return kept
