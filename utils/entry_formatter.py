#!/usr/bin/env python3
"""Validation and formatting of single changelog entries.

Grammar: ``- <prefix>[:] [description]`` where the prefix is an
alphanumeric token matched case-insensitively against ChangelogPrefix.
"""

from __future__ import annotations

import re
from typing import Union

from configs.config import ChangesetSettings, DEFAULT_SETTINGS
from utils.changelog_errors import (
    ChangelogEntryMissingHyphenError,
    EmptyEntryDescriptionError,
    EntryTooLongError,
    InvalidPrefixError,
)
from utils.changelog_models import ChangelogPrefix, ParsedEntry, PreparedEntry


# Prefix must be followed by a colon, whitespace or end of line, so that
# "- feat-ish: x" is reported as an unknown prefix instead of "feat".
_ENTRY_RE = re.compile(r"^-\s*(?P<prefix>[A-Za-z0-9]+)(?=[:\s]|$)\s*:?(?P<description>.*)$", re.DOTALL)


def capitalize(text: str) -> str:
    """Uppercase the first character only; the rest is left untouched."""
    if not text:
        return text
    return text[0].upper() + text[1:]


def _found_prefix(entry: str) -> str:
    body = entry[1:].strip()
    return body.split(":", 1)[0].strip()


def parse_entry(entry: str) -> ParsedEntry:
    """Split a raw entry line into prefix and trimmed description.

    Raises:
        ChangelogEntryMissingHyphenError: If the line does not start with '-'
        InvalidPrefixError: If the prefix token is not an accepted category
    """
    entry = entry.strip()
    if not entry.startswith("-"):
        raise ChangelogEntryMissingHyphenError()

    match = _ENTRY_RE.match(entry)
    if not match:
        raise InvalidPrefixError(_found_prefix(entry))

    token = match.group("prefix")
    prefix = ChangelogPrefix.lookup(token)
    if prefix is None:
        raise InvalidPrefixError(token)
    return ParsedEntry(prefix=prefix, description=match.group("description").strip())


def format_entry(description: str, pr_number: Union[str, int], pr_link: str) -> str:
    return f"- {capitalize(description)} ([#{pr_number}]({pr_link}))"


def prepare_entry(
    entry: str,
    pr_number: Union[str, int],
    pr_link: str,
    settings: ChangesetSettings = DEFAULT_SETTINGS,
) -> PreparedEntry:
    """Validate one raw entry and render it as a linked changelog line.

    The skip option short-circuits: it needs no description and yields an
    empty formatted line.

    Args:
        entry: Raw entry line, e.g. "- feat: add login page"
        pr_number: Pull request number used in the link text
        pr_link: Pull request URL
        settings: Settings carrying the maximum description length

    Returns:
        PreparedEntry(formatted, prefix)

    Raises:
        ChangelogEntryMissingHyphenError, InvalidPrefixError,
        EmptyEntryDescriptionError, EntryTooLongError
    """
    parsed = parse_entry(entry)
    if parsed.prefix.is_skip:
        return PreparedEntry(formatted="", prefix=parsed.prefix)

    if not parsed.description:
        raise EmptyEntryDescriptionError(parsed.prefix.value)
    if len(parsed.description) > settings.max_entry_length:
        raise EntryTooLongError(len(parsed.description), settings.max_entry_length)

    return PreparedEntry(
        formatted=format_entry(parsed.description, pr_number, pr_link),
        prefix=parsed.prefix,
    )
