#!/usr/bin/env python3
from __future__ import annotations

import re
from typing import Optional

from utils.changelog_errors import ChangesetError


def spaced_name(name: str) -> str:
    """'InvalidPrefixError' -> 'Invalid Prefix Error'."""
    return re.sub(r"([A-Z])", r" \1", name).strip()


def format_error_comment(error: ChangesetError) -> str:
    return f"### ❌ {spaced_name(error.name)}\n\n{error.message}\n"


def get_error_comment(error: Exception) -> Optional[str]:
    """Comment body for comment-worthy errors, None for everything else."""
    if isinstance(error, ChangesetError) and error.should_comment:
        return format_error_comment(error)
    return None
