#!/usr/bin/env python3
"""Locate the Changelog section of a PR description and pull out its entry lines."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from configs.config import ChangesetSettings, DEFAULT_SETTINGS
from utils.changelog_errors import EmptyChangelogSectionError, InvalidChangelogHeadingError
from utils.line_scanner import scan_lines


logger = logging.getLogger(__name__)


def _section_pattern(heading: str) -> re.Pattern:
    # Heading up to the next line starting with '##' (excluded), or end of text
    return re.compile(re.escape(heading) + r"[\s\S]*?(?=\n##|\Z)")


def find_changelog_section(description: str, settings: ChangesetSettings = DEFAULT_SETTINGS) -> Optional[str]:
    """Return the raw Changelog section, heading line included, or None."""
    if not description:
        return None
    match = _section_pattern(settings.heading).search(description)
    return match.group(0) if match else None


def extract_changelog_entries(description: Optional[str], settings: ChangesetSettings = DEFAULT_SETTINGS) -> List[str]:
    """Extract candidate changelog entry lines from a PR description.

    Args:
        description: PR body in markdown (may be None for an empty body)
        settings: Changeset settings carrying the heading text

    Returns:
        Trimmed candidate lines in source order; the heading itself is never included

    Raises:
        InvalidChangelogHeadingError: If the description is empty or has no heading
        EmptyChangelogSectionError: If the section has no lines outside comments
    """
    section = find_changelog_section(description or "", settings)
    if section is None:
        raise InvalidChangelogHeadingError()

    entries = scan_lines(section.split("\n"))
    if not entries:
        raise EmptyChangelogSectionError()

    logger.info(f"Found {len(entries)} changelog {'entry' if len(entries) == 1 else 'entries'}")
    for entry in entries:
        logger.debug(f"  {entry}")
    return entries
