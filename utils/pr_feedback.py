#!/usr/bin/env python3
"""Label toggling and comment posting on pull requests.

Label updates are idempotent: current labels are listed first and the
label is only added or removed when the PR is not already in the wanted
state. Transient GitHub failures (rate limit, 5xx, network) are retried
with exponential backoff and jitter.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Optional

from clients.github_client import GithubApiError, GithubAuthError, GithubClient
from configs.config import Config
from utils.changelog_errors import PostCommentError, UpdatePRLabelError


logger = logging.getLogger(__name__)

_RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


def _retryable(error: Exception) -> bool:
    if isinstance(error, GithubAuthError):
        return False
    if isinstance(error, GithubApiError):
        # No status means the request never got an answer
        return error.status_code is None or error.status_code in _RETRYABLE_STATUSES
    return False


class PRFeedback:
    def __init__(
        self,
        client: GithubClient,
        *,
        max_retries: Optional[int] = None,
        base_sleep: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        retry_config = Config.get_retry_config()
        self.client = client
        self.max_retries = retry_config["max_retries"] if max_retries is None else max_retries
        self.base_sleep = retry_config["base_sleep"] if base_sleep is None else base_sleep
        self._sleep = sleep

    def _retry(self, func, *args, **kwargs):
        max_attempts = 1 + self.max_retries
        attempt = 0
        while True:
            try:
                return func(*args, **kwargs)
            except (GithubApiError, GithubAuthError) as e:
                attempt += 1
                if attempt >= max_attempts or not _retryable(e):
                    raise
                # backoff + jitter
                delay = self.base_sleep * (2 ** (attempt - 1)) + random.random() * 0.1
                logger.debug(f"Retrying {getattr(func, '__name__', 'call')} in {delay:.2f}s after: {e}")
                self._sleep(delay)

    # ---- Public API ----
    def set_label(self, owner: str, repo: str, pr_number: int, label: str, present: bool) -> bool:
        """Make sure ``label`` is present (or absent) on the PR.

        Returns:
            True if a change was made, False if the PR was already in that state

        Raises:
            UpdatePRLabelError: If listing or changing labels fails
        """
        try:
            current = self._retry(self.client.list_labels, owner, repo, pr_number)
            exists = label in current
            if present and not exists:
                self._retry(self.client.add_labels, owner, repo, pr_number, [label])
                logger.info(f'Label "{label}" added to PR #{pr_number}')
                return True
            if not present and exists:
                self._retry(self.client.remove_label, owner, repo, pr_number, label)
                logger.info(f'Label "{label}" removed from PR #{pr_number}')
                return True
        except (GithubApiError, GithubAuthError) as e:
            logger.error(f'Error updating label "{label}" for PR #{pr_number}: {e}')
            raise UpdatePRLabelError() from e

        logger.debug(f'Label "{label}" is already {"present" if present else "absent"} on PR #{pr_number}. No action taken.')
        return False

    def add_label(self, owner: str, repo: str, pr_number: int, label: str) -> bool:
        return self.set_label(owner, repo, pr_number, label, True)

    def remove_label(self, owner: str, repo: str, pr_number: int, label: str) -> bool:
        return self.set_label(owner, repo, pr_number, label, False)

    def post_comment(self, owner: str, repo: str, pr_number: int, body: str) -> bool:
        """Post ``body`` as a PR comment; an empty body posts nothing.

        Raises:
            PostCommentError: If GitHub rejects the comment
        """
        if not body:
            logger.info(f"No comment posted to PR #{pr_number} due to empty comment")
            return False
        try:
            self._retry(self.client.create_comment, owner, repo, pr_number, body)
        except (GithubApiError, GithubAuthError) as e:
            logger.error(f"Error posting comment to PR #{pr_number}: {e}")
            raise PostCommentError() from e
        logger.info(f"✓ Comment posted to PR #{pr_number}")
        return True
