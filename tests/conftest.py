"""
Shared fixtures for changeset bot tests.
"""
import copy
import itertools
from typing import Any, Dict, List, Optional

import pytest

from clients.github_client import GithubApiError
from configs.config import ChangesetSettings


class FakeGithubClient:
    """In-memory stand-in for GithubClient.

    Files are keyed by (owner, repo, branch, path); labels by PR number.
    Set ``failures[method_name] = exception`` to make a method raise.
    """

    def __init__(self):
        self.files: Dict[tuple, Dict[str, Any]] = {}
        self.labels: Dict[int, List[str]] = {}
        self.comments: List[Dict[str, Any]] = []
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        self._sha = itertools.count(1)
        self.closed = 0

    def _record(self, name: str, *args):
        self.calls.append((name,) + args)
        if name in self.failures:
            raise self.failures[name]

    def get_file(self, owner, repo, path, ref) -> Optional[Dict[str, Any]]:
        self._record("get_file", owner, repo, path, ref)
        found = self.files.get((owner, repo, ref, path))
        return copy.deepcopy(found) if found else None

    def create_or_update_file(self, owner, repo, path, content, message, branch, sha=None):
        self._record("create_or_update_file", owner, repo, path, content, message, branch, sha)
        key = (owner, repo, branch, path)
        if sha is not None and self.files.get(key, {}).get("sha") != sha:
            raise GithubApiError("sha mismatch", status_code=409)
        self.files[key] = {"sha": f"sha{next(self._sha)}", "content": content, "path": path}
        return {"content": self.files[key]}

    def delete_file(self, owner, repo, path, message, sha, branch):
        self._record("delete_file", owner, repo, path, message, sha, branch)
        del self.files[(owner, repo, branch, path)]

    def list_labels(self, owner, repo, number):
        self._record("list_labels", owner, repo, number)
        return list(self.labels.get(number, []))

    def add_labels(self, owner, repo, number, labels):
        self._record("add_labels", owner, repo, number, list(labels))
        self.labels.setdefault(number, []).extend(labels)

    def remove_label(self, owner, repo, number, label):
        self._record("remove_label", owner, repo, number, label)
        current = self.labels.get(number, [])
        if label not in current:
            return False
        current.remove(label)
        return True

    def create_comment(self, owner, repo, number, body):
        self._record("create_comment", owner, repo, number, body)
        comment = {"id": len(self.comments) + 1, "body": body, "number": number}
        self.comments.append(comment)
        return comment

    def close(self):
        self.closed += 1

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def settings() -> ChangesetSettings:
    return ChangesetSettings()


@pytest.fixture
def fake_client() -> FakeGithubClient:
    return FakeGithubClient()


def make_pr_payload(
    body: Optional[str],
    number: int = 42,
    base_owner: str = "acme",
    head_owner: str = "acme",
    repo: str = "widgets",
    head_branch: str = "feature/login",
) -> Dict[str, Any]:
    """Build the ``pull_request`` part of a webhook payload."""
    return {
        "number": number,
        "body": body,
        "html_url": f"https://github.com/{base_owner}/{repo}/pull/{number}",
        "base": {"ref": "main", "repo": {"name": repo, "owner": {"login": base_owner}}},
        "head": {"ref": head_branch, "repo": {"name": repo, "owner": {"login": head_owner}}},
    }


@pytest.fixture
def pr_payload():
    return make_pr_payload
