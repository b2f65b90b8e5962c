#!/usr/bin/env python3
"""Data models for changelog parsing and changeset resolution.

These types are shared by the line scanner, entry formatter, categorizer and
skip resolver. All of them live for a single pull request event only.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChangelogPrefix(str, Enum):
	"""Category prefixes accepted at the start of a changelog entry."""

	BREAKING = "breaking"
	DEPRECATE = "deprecate"
	FEAT = "feat"
	FIX = "fix"
	INFRA = "infra"
	DOC = "doc"
	CHORE = "chore"
	REFACTOR = "refactor"
	SECURITY = "security"
	SKIP = "skip"
	TEST = "test"

	@property
	def is_skip(self) -> bool:
		return self is ChangelogPrefix.SKIP

	@classmethod
	def lookup(cls, token: str) -> Optional["ChangelogPrefix"]:
		"""Case-insensitive lookup; None when the token is not a known prefix."""
		try:
			return cls(token.lower())
		except ValueError:
			return None


class ScanState(str, Enum):
	"""States of the comment-aware line scanner."""

	NORMAL = "normal"
	IN_COMMENT = "in_comment"


@dataclass(frozen=True)
class ParsedEntry:
	"""One raw entry split into its prefix token and trimmed description."""

	prefix: ChangelogPrefix
	description: str


@dataclass(frozen=True)
class PreparedEntry:
	"""A validated entry: formatted line (empty for skip) and its category."""

	formatted: str
	prefix: ChangelogPrefix

	def __iter__(self):
		# Allows `formatted, prefix = prepare_entry(...)`
		return iter((self.formatted, self.prefix))


# Insertion order of keys is the first-seen order of each prefix.
CategoryMap = Dict[ChangelogPrefix, List[str]]


class Resolution(str, Enum):
	"""Terminal outcome of the skip resolver (reject is raised, not returned)."""

	SKIP = "skip"
	PROCEED = "proceed"


class ChangesetDecision(BaseModel):
	"""What the caller must do with the changeset file for one pull request."""

	model_config = ConfigDict(frozen=True)

	resolution: Resolution = Field(..., description="Skip or proceed")
	pr_number: str = Field(..., description="Pull request number as text")
	file_path: str = Field(..., description="Repository path of the fragment file")
	content: Optional[str] = Field(None, description="Fragment content when proceeding")
	categories: List[str] = Field(default_factory=list, description="Category keys in first-seen order")


HandlingStatus = Literal["created", "updated", "deleted", "skipped", "failed", "ignored"]


class HandlingResult(BaseModel):
	"""Summary of one handled pull request event, for logs and HTTP responses."""

	status: HandlingStatus
	pr_number: Optional[str] = None
	file_path: Optional[str] = None
	error: Optional[str] = None
	message: Optional[str] = None
	commented: bool = False
