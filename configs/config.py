import os
from dataclasses import dataclass
from typing import Dict, Any

from dotenv import load_dotenv

load_dotenv()


CHANGELOG_HEADING = "## Changelog"
MAX_ENTRY_LENGTH = 100
CHANGESET_PATH = "changelogs/fragments"
SKIP_LABEL = "Skip-Changelog"
FAILED_CHANGESET_LABEL = "failed changeset"


@dataclass(frozen=True)
class ChangesetSettings:
	"""Fixed configuration handed to the changelog core.

	The core never reads the environment; callers build one of these
	(usually via Config.get_changeset_settings()) and pass it in.
	"""

	heading: str = CHANGELOG_HEADING
	max_entry_length: int = MAX_ENTRY_LENGTH
	changeset_path: str = CHANGESET_PATH
	skip_label: str = SKIP_LABEL
	failed_label: str = FAILED_CHANGESET_LABEL


DEFAULT_SETTINGS = ChangesetSettings()


class Config:
	"""Configuration for the changeset bot."""

	# GitHub authentication
	GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or os.getenv("GITHUB_PAT")
	GITHUB_APP_JWT = os.getenv("GITHUB_APP_JWT")
	GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip('/')
	GITHUB_WEBHOOK_SECRET = os.getenv("GITHUB_WEBHOOK_SECRET", "")
	HTTP_TIMEOUT_S = int(os.getenv("HTTP_TIMEOUT_S", "30"))

	# Changeset fragments and labels
	CHANGESET_PATH = os.getenv("CHANGESET_PATH", CHANGESET_PATH).rstrip('/')
	SKIP_LABEL = os.getenv("SKIP_LABEL", SKIP_LABEL)
	FAILED_CHANGESET_LABEL = os.getenv("FAILED_CHANGESET_LABEL", FAILED_CHANGESET_LABEL)

	# Label/comment retries
	FEEDBACK_RETRY_MAX = int(os.getenv("FEEDBACK_RETRY_MAX", "2"))
	FEEDBACK_RETRY_BASE_SLEEP = float(os.getenv("FEEDBACK_RETRY_BASE_SLEEP", "0.5"))

	# Webhook server
	HOST = os.getenv("HOST", "0.0.0.0")
	PORT = int(os.getenv("PORT", "3000"))

	@classmethod
	def get_github_config(cls) -> Dict[str, Any]:
		"""Get GitHub configuration for the REST client."""
		return {
			"base_url": cls.GITHUB_API_URL,
			"token": cls.GITHUB_TOKEN,
			"app_jwt": cls.GITHUB_APP_JWT,
			"timeout_s": cls.HTTP_TIMEOUT_S,
		}

	@classmethod
	def get_retry_config(cls) -> Dict[str, Any]:
		return {
			"max_retries": cls.FEEDBACK_RETRY_MAX,
			"base_sleep": cls.FEEDBACK_RETRY_BASE_SLEEP,
		}

	@classmethod
	def get_changeset_settings(cls) -> ChangesetSettings:
		"""Build the explicit settings object consumed by the changelog core.

		Heading text and the maximum entry length are fixed; only the storage
		path and label names can be overridden from the environment.
		"""
		return ChangesetSettings(
			changeset_path=cls.CHANGESET_PATH,
			skip_label=cls.SKIP_LABEL,
			failed_label=cls.FAILED_CHANGESET_LABEL,
		)
