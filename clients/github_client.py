#!/usr/bin/env python3
"""GitHub REST API client for changeset file, label and comment operations.

Wraps a ``requests.Session`` with authentication headers and retries for
idempotent methods. Every operation raises GithubAuthError/GithubApiError
on failure; callers decide how to translate them.
"""

import base64
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from configs.config import Config

# Set up logging
logger = logging.getLogger(__name__)


class GithubAuthError(Exception):
    """Raised when GitHub API authentication fails."""
    pass


class GithubApiError(Exception):
    """Raised when GitHub API operations fail."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GithubClient:
    """Installation-scoped client for the GitHub REST API."""

    def __init__(
        self,
        token: Optional[str] = None,
        timeout_s: Optional[int] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: Installation token or PAT (defaults to Config.GITHUB_TOKEN)
            timeout_s: Request timeout in seconds (defaults to Config.HTTP_TIMEOUT_S)
            base_url: API root (defaults to Config.GITHUB_API_URL)
            session: Pre-built session, mainly for tests

        Raises:
            GithubAuthError: If no valid token is provided
        """
        github_config = Config.get_github_config()
        self.token = token or github_config["token"]
        self.timeout_s = timeout_s or github_config["timeout_s"]
        self.base_url = (base_url or github_config["base_url"]).rstrip('/')

        if not self.token:
            raise GithubAuthError("GitHub token is required (GITHUB_TOKEN, GITHUB_PAT or an installation token)")

        if session is None:
            session = requests.Session()
            # Configure retries for transient failures on idempotent methods
            retry_strategy = Retry(
                total=3,
                status_forcelist=[429, 500, 502, 503, 504],
                backoff_factor=1,
                allowed_methods=["HEAD", "GET", "OPTIONS"]
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("https://", adapter)
        self.session = session
        self.session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'changeset-bot/1.0'
        })

        logger.debug("GitHub client initialized")

    @classmethod
    def for_installation(
        cls,
        owner: str,
        repo: str,
        app_jwt: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> "GithubClient":
        """Exchange a GitHub App JWT for an installation token scoped to owner/repo.

        Falls back to Config.GITHUB_TOKEN when no JWT is configured, which is
        the usual setup inside GitHub Actions.

        Raises:
            GithubAuthError: If neither a JWT nor a token is available, or the exchange fails
        """
        github_config = Config.get_github_config()
        app_jwt = app_jwt or github_config["app_jwt"]
        base_url = (base_url or github_config["base_url"]).rstrip('/')
        timeout_s = timeout_s or github_config["timeout_s"]

        if not app_jwt:
            return cls(token=github_config["token"], timeout_s=timeout_s, base_url=base_url, session=session)

        http = session or requests.Session()
        headers = {
            'Authorization': f'Bearer {app_jwt}',
            'Accept': 'application/vnd.github+json',
        }
        try:
            logger.info(f"Fetching app installation for {owner}/{repo}")
            resp = http.get(f"{base_url}/repos/{owner}/{repo}/installation", headers=headers, timeout=timeout_s)
            if resp.status_code != 200:
                raise GithubAuthError(f"GitHub App is not installed on {owner}/{repo}: HTTP {resp.status_code}")
            installation_id = resp.json()["id"]

            resp = http.post(
                f"{base_url}/app/installations/{installation_id}/access_tokens",
                headers=headers,
                timeout=timeout_s,
            )
            if resp.status_code != 201:
                raise GithubAuthError(f"Installation token exchange failed: HTTP {resp.status_code}")
            token = resp.json()["token"]
        except requests.RequestException as e:
            raise GithubAuthError(f"Failed to obtain installation token for {owner}/{repo}: {e}")

        logger.debug(f"✓ Installation token obtained for {owner}/{repo}")
        return cls(token=token, timeout_s=timeout_s, base_url=base_url, session=session)

    # ---- Internals ----
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str, *, allow_404: bool = False, **kwargs) -> Optional[Any]:
        """Send a request and map error statuses to typed exceptions.

        Returns the decoded JSON body (None for 204, or for 404 when allowed).
        """
        try:
            response = self.session.request(method, self._url(path), timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            raise GithubApiError(f"{method} {path} failed: {e}")

        status = response.status_code
        if status == 401:
            raise GithubAuthError("Invalid GitHub token or insufficient permissions")
        if status == 404 and allow_404:
            return None
        if status >= 400:
            raise GithubApiError(f"GitHub API error on {method} {path}: HTTP {status}", status_code=status)
        if status == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _contents_path(owner: str, repo: str, path: str) -> str:
        return f"/repos/{owner}/{repo}/contents/{quote(path)}"

    # ---- Repository contents ----
    def get_file(self, owner: str, repo: str, path: str, ref: str) -> Optional[Dict[str, Any]]:
        """Fetch file metadata at ``ref``; None if the file does not exist.

        Raises:
            GithubApiError: If the path is a directory or the request fails
        """
        logger.debug(f"Fetching file content: {owner}/{repo}/{path} @ {ref}")
        data = self._request("GET", self._contents_path(owner, repo, path), params={'ref': ref}, allow_404=True)
        if data is None:
            return None
        if isinstance(data, list):
            raise GithubApiError(f"{path} is a directory, not a file")
        return data

    def create_or_update_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str,
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a file, or update it when ``sha`` of the current blob is given."""
        payload: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch,
        }
        if sha:
            payload["sha"] = sha
        logger.info(f"{'Updating' if sha else 'Creating'} {owner}/{repo}/{path} on {branch}")
        return self._request("PUT", self._contents_path(owner, repo, path), json=payload)

    def delete_file(self, owner: str, repo: str, path: str, message: str, sha: str, branch: str) -> None:
        logger.info(f"Deleting {owner}/{repo}/{path} on {branch}")
        payload = {"message": message, "sha": sha, "branch": branch}
        self._request("DELETE", self._contents_path(owner, repo, path), json=payload)

    # ---- Labels ----
    def list_labels(self, owner: str, repo: str, number: int) -> List[str]:
        data = self._request("GET", f"/repos/{owner}/{repo}/issues/{number}/labels", params={'per_page': 100})
        return [label.get("name", "") for label in data or []]

    def add_labels(self, owner: str, repo: str, number: int, labels: List[str]) -> None:
        self._request("POST", f"/repos/{owner}/{repo}/issues/{number}/labels", json={"labels": list(labels)})

    def remove_label(self, owner: str, repo: str, number: int, label: str) -> bool:
        """Remove a label; returns False if it was not on the issue."""
        result = self._request(
            "DELETE",
            f"/repos/{owner}/{repo}/issues/{number}/labels/{quote(label, safe='')}",
            allow_404=True,
        )
        # A successful removal answers with the remaining labels
        return result is not None

    # ---- Comments ----
    def create_comment(self, owner: str, repo: str, number: int, body: str) -> Dict[str, Any]:
        return self._request("POST", f"/repos/{owner}/{repo}/issues/{number}/comments", json={"body": body})

    def close(self) -> None:
        """Close the GitHub client session."""
        if self.session:
            self.session.close()
            logger.debug("GitHub client session closed")
