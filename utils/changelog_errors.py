#!/usr/bin/env python3
"""Error taxonomy for changeset processing.

Every error carries a ``should_comment`` flag. Errors caused by the PR
author's input are comment-worthy and get rendered into a PR comment;
operational failures (GitHub API, payload shape) only show up in logs and
through the failed-changeset label.
"""

from __future__ import annotations

from typing import Optional

from configs.config import MAX_ENTRY_LENGTH
from utils.changelog_models import ChangelogPrefix


class ChangesetError(Exception):
    """Base class for all changeset errors."""

    should_comment = False
    default_message = "Changeset processing failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def name(self) -> str:
        return type(self).__name__


# ---- Comment-worthy: problems with the PR description ----

class InvalidChangelogHeadingError(ChangesetError):
    """The '## Changelog' heading is missing or malformed."""

    should_comment = True
    default_message = (
        "The '## Changelog' heading in your PR description is either missing or malformed. "
        "Please make sure that your PR description includes a '## Changelog' heading with proper "
        "spelling, capitalization, spacing, and Markdown syntax."
    )


class EmptyChangelogSectionError(ChangesetError):
    """The Changelog section exists but holds no entries."""

    should_comment = True
    default_message = (
        "The Changelog section in your PR description is empty. Please add a valid changelog entry "
        "or entries. If you did add a changelog entry, check to make sure that it was not accidentally "
        "included inside the comment block in the Changelog section."
    )


class ChangelogEntryMissingHyphenError(ChangesetError):
    should_comment = True
    default_message = "Changelog entries must begin with a hyphen (-)."


class InvalidPrefixError(ChangesetError):
    """Entry prefix is not one of the accepted categories."""

    should_comment = True

    def __init__(self, found_prefix: str):
        self.found_prefix = found_prefix
        choices = [p.value for p in ChangelogPrefix]
        quoted = ", ".join(f'"{c}"' for c in choices[:-1])
        super().__init__(
            f'Invalid description prefix. Found "{found_prefix}". Expected {quoted}, or "{choices[-1]}".'
        )


class EmptyEntryDescriptionError(ChangesetError):
    should_comment = True

    def __init__(self, found_prefix: str):
        self.found_prefix = found_prefix
        super().__init__(f'Description for "{found_prefix}" entry cannot be empty.')


class EntryTooLongError(ChangesetError):
    """Entry description exceeds the maximum length."""

    should_comment = True

    def __init__(self, entry_length: int, max_length: int = MAX_ENTRY_LENGTH):
        self.entry_length = entry_length
        self.max_length = max_length
        self.overage = entry_length - max_length
        unit = "character" if self.overage == 1 else "characters"
        super().__init__(
            f"Entry is {entry_length} characters long, which is {self.overage} {unit} longer than "
            f"the maximum allowed length of {max_length} characters. Please revise your entry to be "
            f"within the maximum length."
        )


class CategoryWithSkipOptionError(ChangesetError):
    should_comment = True
    default_message = (
        "If your Changelog section includes the 'skip' option, it cannot also contain other "
        "changelog entries. Please revise your Changelog section."
    )


# ---- Operational: infrastructure trouble, never commented ----

class PullRequestDataExtractionError(ChangesetError):
    default_message = "Error extracting data from Pull Request"


class GetGithubContentError(ChangesetError):
    default_message = "Error retrieving content from GitHub repository"


class CreateFileError(ChangesetError):
    default_message = "Error creating file in repository"


class UpdateFileError(ChangesetError):
    default_message = "Error updating file in repository"


class DeleteFileError(ChangesetError):
    default_message = "Error deleting file in repository"


class UpdatePRLabelError(ChangesetError):
    default_message = (
        "There was an error updating the label of the pull request. Please ensure the PR is "
        "accessible and the label format is correct."
    )


class PostCommentError(ChangesetError):
    default_message = "Error posting comment to pull request"


class InstallationAuthError(ChangesetError):
    default_message = "Error obtaining GitHub App installation credentials"
