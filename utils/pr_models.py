#!/usr/bin/env python3
"""Pydantic models for pull request webhook payloads.

Only the fields the changeset bot needs are modelled; everything else in
the GitHub payload is ignored.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from utils.changelog_errors import PullRequestDataExtractionError


logger = logging.getLogger(__name__)


class OwnerInfo(BaseModel):
    """Repository owner (user or organization)."""

    login: str = Field(..., description="Owner login")

    model_config = {"extra": "ignore"}


class RepoInfo(BaseModel):
    name: str = Field(..., description="Repository name")
    owner: OwnerInfo = Field(..., description="Repository owner")

    model_config = {"extra": "ignore"}


class BranchRef(BaseModel):
    """Base or head side of a pull request."""

    ref: str = Field(..., description="Branch name")
    repo: RepoInfo = Field(..., description="Repository holding the branch")

    model_config = {"extra": "ignore"}


class PullRequestPayload(BaseModel):
    """The ``pull_request`` object of a pull_request webhook event."""

    number: int = Field(..., description="Pull request number")
    body: Optional[str] = Field(None, description="Pull request description")
    html_url: str = Field(..., description="GitHub URL for the PR")
    base: BranchRef = Field(..., description="Target branch")
    head: BranchRef = Field(..., description="Source branch")

    model_config = {"extra": "ignore"}


class PullRequestData(BaseModel):
    """Flattened pull request data used by the changeset agent."""

    base_owner: str
    base_repo: str
    base_branch: str
    head_owner: str
    head_repo: str
    head_branch: str
    pr_number: int
    pr_description: Optional[str] = None
    pr_link: str

    @property
    def base_full_name(self) -> str:
        return f"{self.base_owner}/{self.base_repo}"


def extract_pull_request_data(pr_payload: Dict[str, Any]) -> PullRequestData:
    """Extract the fields the agent needs from a ``pull_request`` payload.

    Args:
        pr_payload: The ``pull_request`` object of the webhook event

    Returns:
        Flattened PullRequestData

    Raises:
        PullRequestDataExtractionError: If required fields are missing or malformed
    """
    try:
        pr = PullRequestPayload.model_validate(pr_payload or {})
    except ValidationError as e:
        logger.error(f"Error extracting data from pull request: {e}")
        raise PullRequestDataExtractionError() from e

    logger.info(f"Extracting data for PR #{pr.number} in {pr.base.repo.owner.login}/{pr.base.repo.name}")
    return PullRequestData(
        base_owner=pr.base.repo.owner.login,
        base_repo=pr.base.repo.name,
        base_branch=pr.base.ref,
        head_owner=pr.head.repo.owner.login,
        head_repo=pr.head.repo.name,
        head_branch=pr.head.ref,
        pr_number=pr.number,
        pr_description=pr.body,
        pr_link=pr.html_url,
    )


def safe_extract(data: Dict, *keys, default=None):
    """Safely extract nested dictionary values.

    Example:
        safe_extract(event, "pull_request", "number")
    """
    current = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current
