#!/usr/bin/env python3
"""Create, update and delete changeset fragment files in the PR head repository."""

from __future__ import annotations

import logging
from typing import Literal, Optional

from clients.github_client import GithubApiError, GithubAuthError, GithubClient
from utils.changelog_errors import CreateFileError, DeleteFileError, GetGithubContentError, UpdateFileError


logger = logging.getLogger(__name__)

WriteStatus = Literal["created", "updated"]


def _existing_sha(client: GithubClient, owner: str, repo: str, path: str, branch: str) -> Optional[str]:
    try:
        existing = client.get_file(owner, repo, path, ref=branch)
    except (GithubApiError, GithubAuthError) as e:
        logger.error(f"Error fetching {path} on {owner}/{repo}@{branch}: {e}")
        raise GetGithubContentError() from e
    return existing.get("sha") if existing else None


def create_or_update_changeset(
    client: GithubClient,
    owner: str,
    repo: str,
    branch: str,
    pr_number: int,
    path: str,
    content: str,
) -> WriteStatus:
    """Write the fragment file, updating it in place when it already exists.

    Raises:
        GetGithubContentError: If the existing file cannot be looked up
        CreateFileError / UpdateFileError: If the write is rejected
    """
    sha = _existing_sha(client, owner, repo, path, branch)
    if sha is None:
        logger.info("File not found. Proceeding to create a new one.")
    message = f"Changeset file for PR #{pr_number} {'updated' if sha else 'created'}"
    try:
        client.create_or_update_file(owner, repo, path, content, message, branch, sha=sha)
    except (GithubApiError, GithubAuthError) as e:
        logger.error(f"Error writing {path}: {e}")
        raise (UpdateFileError() if sha else CreateFileError()) from e

    status: WriteStatus = "updated" if sha else "created"
    logger.info(f"✓ File {path} {status} successfully")
    return status


def delete_changeset(
    client: GithubClient,
    owner: str,
    repo: str,
    branch: str,
    pr_number: int,
    path: str,
) -> bool:
    """Delete the fragment file if it exists.

    Returns:
        True if a file was deleted, False if there was nothing to delete

    Raises:
        GetGithubContentError: If the existing file cannot be looked up
        DeleteFileError: If the delete is rejected
    """
    sha = _existing_sha(client, owner, repo, path, branch)
    if sha is None:
        logger.debug(f"No changeset file at {path}; nothing to delete")
        return False
    message = f"Changeset file for PR #{pr_number} deleted"
    try:
        client.delete_file(owner, repo, path, message, sha, branch)
    except (GithubApiError, GithubAuthError) as e:
        logger.error(f"Error deleting {path}: {e}")
        raise DeleteFileError() from e
    logger.info(f"✓ File {path} deleted successfully")
    return True
