#!/usr/bin/env python3
"""Build, resolve and serialize the changeset for one pull request.

Pipeline: raw entry lines -> category map -> resolution -> fragment content.
Nothing here performs I/O; the returned ChangesetDecision is applied by
ChangesetAgent through the GitHub client.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Union

from configs.config import ChangesetSettings, DEFAULT_SETTINGS
from utils.changelog_errors import CategoryWithSkipOptionError
from utils.changelog_models import CategoryMap, ChangelogPrefix, ChangesetDecision, PreparedEntry, Resolution
from utils.changelog_parser import extract_changelog_entries
from utils.entry_formatter import prepare_entry


logger = logging.getLogger(__name__)

EntryPreparer = Callable[..., PreparedEntry]


def build_category_map(
    entries: Iterable[str],
    pr_number: Union[str, int],
    pr_link: str,
    settings: ChangesetSettings = DEFAULT_SETTINGS,
    preparer: EntryPreparer = prepare_entry,
) -> CategoryMap:
    """Group formatted entries by category, keeping first-seen key order.

    The first invalid entry aborts the whole map.
    """
    category_map: CategoryMap = {}
    for entry in entries:
        formatted, prefix = preparer(entry, pr_number, pr_link, settings)
        category_map.setdefault(prefix, []).append(formatted)
    return category_map


def resolve(category_map: CategoryMap) -> Resolution:
    """Decide between skipping and writing the changeset file.

    Raises:
        CategoryWithSkipOptionError: If 'skip' appears next to any other category
    """
    if ChangelogPrefix.SKIP in category_map:
        if len(category_map) > 1:
            raise CategoryWithSkipOptionError()
        logger.info("Skip option found. No changeset file to create or update; any existing one is deleted.")
        return Resolution.SKIP
    return Resolution.PROCEED


def serialize(category_map: CategoryMap) -> str:
    """Render the category map as fragment text.

    Each category becomes ``<prefix>:`` followed by its entries one per
    line; categories are separated by a blank line. No trailing newline.
    """
    blocks = []
    for prefix, lines in category_map.items():
        key = prefix.value if isinstance(prefix, ChangelogPrefix) else str(prefix)
        blocks.append(f"{key}:\n" + "\n".join(lines))
    return "\n\n".join(blocks)


def changeset_file_path(pr_number: Union[str, int], settings: ChangesetSettings = DEFAULT_SETTINGS) -> str:
    return f"{settings.changeset_path}/{pr_number}.yml"


def compute_changeset(
    description: Optional[str],
    pr_number: Union[str, int],
    pr_link: str,
    settings: ChangesetSettings = DEFAULT_SETTINGS,
) -> ChangesetDecision:
    """Run the full pipeline over a PR description.

    Args:
        description: PR body (None or empty is treated as a missing heading)
        pr_number: Pull request number
        pr_link: Pull request URL
        settings: Changeset settings

    Returns:
        ChangesetDecision describing the file action and its content

    Raises:
        ChangesetError: The first comment-worthy validation error encountered
    """
    entries = extract_changelog_entries(description, settings)
    category_map = build_category_map(entries, pr_number, pr_link, settings)
    resolution = resolve(category_map)

    content = serialize(category_map) if resolution is Resolution.PROCEED else None
    return ChangesetDecision(
        resolution=resolution,
        pr_number=str(pr_number),
        file_path=changeset_file_path(pr_number, settings),
        content=content,
        categories=[p.value for p in category_map],
    )
