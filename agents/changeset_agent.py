#!/usr/bin/env python3
"""Changeset agent for pull request changelog fragments.

This agent reads the ``## Changelog`` section of a pull request description,
turns it into a per-PR fragment file and keeps the PR labels in sync with
the outcome (created/updated, skipped, or failed).
"""

import json
import logging
import sys
from typing import Any, Callable, Dict, Optional, Tuple

from clients.github_client import GithubAuthError, GithubClient
from configs.config import ChangesetSettings, Config
from utils.changelog_errors import ChangesetError, InstallationAuthError, PullRequestDataExtractionError
from utils.changelog_models import ChangesetDecision, HandlingResult, Resolution
from utils.changeset_builder import changeset_file_path, compute_changeset
from utils.changeset_files import create_or_update_changeset, delete_changeset
from utils.comment_formatter import get_error_comment
from utils.pr_feedback import PRFeedback
from utils.pr_models import PullRequestData, extract_pull_request_data, safe_extract

# Set up logging
logger = logging.getLogger(__name__)

HANDLED_ACTIONS = {"opened", "edited"}

ClientFactory = Callable[[str, str], GithubClient]


class ChangesetAgent:
	"""Agent that applies changelog sections of pull requests to the repository."""

	def __init__(
		self,
		settings: Optional[ChangesetSettings] = None,
		client_factory: Optional[ClientFactory] = None,
		feedback_factory: Callable[[GithubClient], PRFeedback] = PRFeedback,
	):
		"""Initialize the changeset agent.

		Args:
			settings: Changeset settings. If None, built from Config.
			client_factory: Callable returning an installation client for (owner, repo).
			feedback_factory: Callable wrapping a client into a PRFeedback.
		"""
		self.settings = settings or Config.get_changeset_settings()
		self._client_factory = client_factory or GithubClient.for_installation
		self._feedback_factory = feedback_factory
		logger.info("Changeset agent initialized")

	def handle_event(self, event_name: str, event: Dict[str, Any]) -> HandlingResult:
		"""Route a webhook event; only pull_request opened/edited are handled."""
		if not isinstance(event, dict):
			logger.warning(f"Ignoring {event_name} event with a non-object payload")
			return HandlingResult(status="ignored", message=f"Event {event_name} payload is not an object")

		action = event.get("action")
		if event_name != "pull_request" or action not in HANDLED_ACTIONS:
			logger.debug(f"Ignoring event {event_name}.{action}")
			return HandlingResult(status="ignored", message=f"Event {event_name}.{action} ignored")

		number = safe_extract(event, "pull_request", "number")
		logger.info(f"Received a pull request {action} event for #{number}")
		return self.handle_pull_request(event.get("pull_request") or {})

	def handle_pull_request(self, pr_payload: Dict[str, Any]) -> HandlingResult:
		"""Create, update or delete the changeset file for one pull request.

		Errors are caught here and only here: comment-worthy ones are posted
		back to the PR, and every failure adds the failed-changeset label.

		Args:
			pr_payload: The ``pull_request`` object of the webhook event

		Returns:
			HandlingResult describing what was done
		"""
		try:
			pr = extract_pull_request_data(pr_payload)
		except PullRequestDataExtractionError as e:
			# Without owner/repo there is nothing to label or comment on
			logger.error(f"{e.name}: {e.message}")
			return HandlingResult(status="failed", error=e.name, message=e.message)

		logger.info(f"Processing changelog of {pr.base_full_name}#{pr.pr_number}")
		try:
			base_client, head_client = self._clients(pr)
		except InstallationAuthError as e:
			# No client, so no file cleanup, comment or label either
			return self._failure_result(pr, e)

		try:
			decision = compute_changeset(pr.pr_description, pr.pr_number, pr.pr_link, self.settings)
			return self._apply(decision, pr, base_client, head_client)
		except ChangesetError as e:
			return self._handle_failure(pr, e, base_client, head_client)
		finally:
			self._close_clients(base_client, head_client)

	# ---- Internals ----
	def _clients(self, pr: PullRequestData) -> Tuple[GithubClient, GithubClient]:
		try:
			base_client = self._client_factory(pr.base_owner, pr.base_repo)
		except GithubAuthError as e:
			logger.error(f"Could not authenticate for {pr.base_full_name}: {e}")
			raise InstallationAuthError() from e
		if (pr.head_owner, pr.head_repo) == (pr.base_owner, pr.base_repo):
			return base_client, base_client

		try:
			return base_client, self._client_factory(pr.head_owner, pr.head_repo)
		except GithubAuthError as e:
			logger.error(f"Could not authenticate for {pr.head_owner}/{pr.head_repo}: {e}")
			base_client.close()
			raise InstallationAuthError() from e

	@staticmethod
	def _close_clients(base_client: GithubClient, head_client: GithubClient) -> None:
		base_client.close()
		if head_client is not base_client:
			head_client.close()

	def _apply(
		self,
		decision: ChangesetDecision,
		pr: PullRequestData,
		base_client: GithubClient,
		head_client: GithubClient,
	) -> HandlingResult:
		feedback = self._feedback_factory(base_client)
		labels = (pr.base_owner, pr.base_repo, pr.pr_number)

		if decision.resolution is Resolution.SKIP:
			feedback.add_label(*labels, self.settings.skip_label)
			deleted = delete_changeset(
				head_client, pr.head_owner, pr.head_repo, pr.head_branch, pr.pr_number, decision.file_path
			)
			feedback.remove_label(*labels, self.settings.failed_label)
			logger.info(f"✓ PR #{pr.pr_number} skipped changelog")
			return HandlingResult(
				status="skipped",
				pr_number=decision.pr_number,
				file_path=decision.file_path,
				message="Existing changeset file deleted" if deleted else "No changeset file to delete",
			)

		status = create_or_update_changeset(
			head_client,
			pr.head_owner,
			pr.head_repo,
			pr.head_branch,
			pr.pr_number,
			decision.file_path,
			decision.content or "",
		)
		feedback.remove_label(*labels, self.settings.skip_label)
		feedback.remove_label(*labels, self.settings.failed_label)
		logger.info(f"✓ Changeset for PR #{pr.pr_number} {status}: {', '.join(decision.categories)}")
		return HandlingResult(status=status, pr_number=decision.pr_number, file_path=decision.file_path)

	def _failure_result(self, pr: PullRequestData, error: ChangesetError) -> HandlingResult:
		logger.error(f"Changeset failed for PR #{pr.pr_number}: {error.name}: {error.message}")
		return HandlingResult(
			status="failed",
			pr_number=str(pr.pr_number),
			file_path=changeset_file_path(pr.pr_number, self.settings),
			error=error.name,
			message=error.message,
		)

	def _handle_failure(
		self,
		pr: PullRequestData,
		error: ChangesetError,
		base_client: GithubClient,
		head_client: GithubClient,
	) -> HandlingResult:
		"""Report ``error`` back to the PR; every step is best-effort."""
		result = self._failure_result(pr, error)
		feedback = self._feedback_factory(base_client)
		labels = (pr.base_owner, pr.base_repo, pr.pr_number)

		steps = [
			("delete stale changeset", lambda: delete_changeset(
				head_client, pr.head_owner, pr.head_repo, pr.head_branch, pr.pr_number, result.file_path
			)),
			("add failed label", lambda: feedback.add_label(*labels, self.settings.failed_label)),
			("clear skip label", lambda: feedback.remove_label(*labels, self.settings.skip_label)),
		]
		comment = get_error_comment(error)
		if comment:
			steps.insert(1, ("post error comment", lambda: feedback.post_comment(*labels, comment)))

		commented = False
		for name, step in steps:
			try:
				outcome = step()
			except ChangesetError as e:
				# Keep going: the original error is what gets reported
				logger.warning(f"Could not {name} for PR #{pr.pr_number}: {e.name}: {e.message}")
				continue
			if name == "post error comment":
				commented = bool(outcome)
		return result.model_copy(update={"commented": commented})


def print_decision(decision: ChangesetDecision) -> None:
	"""Print a compact summary of a changeset decision."""
	print(f"PR #{decision.pr_number}: {decision.resolution.value}")
	print(f"File: {decision.file_path}")
	if decision.content is not None:
		print()
		print(decision.content)


def _read_text(path: str) -> str:
	if path == "-":
		return sys.stdin.read()
	with open(path, "r", encoding="utf-8") as f:
		return f.read()


def main(argv=None):
	"""CLI entry point for the changeset agent."""
	import argparse

	parser = argparse.ArgumentParser(
		description="Changeset Bot - maintain changelog fragments from PR descriptions",
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Examples:
  changeset-bot check --body-file pr_body.md --pr 42 --link https://github.com/o/r/pull/42
  changeset-bot handle-event --event-path "$GITHUB_EVENT_PATH"
  changeset-bot serve --port 3000
		"""
	)
	parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
	sub = parser.add_subparsers(dest="command", required=True)

	chk = sub.add_parser("check", help="Validate a PR description and print the resulting changeset")
	chk.add_argument("--body-file", required=True, help="File holding the PR description ('-' for stdin)")
	chk.add_argument("--pr", required=True, help="Pull request number")
	chk.add_argument("--link", required=True, help="Pull request URL")
	chk.add_argument("--json", action="store_true", help="Output the decision as JSON")

	evt = sub.add_parser("handle-event", help="Apply a pull_request event payload (GitHub Actions)")
	evt.add_argument("--event-path", required=True, help="Path to the event JSON payload")
	evt.add_argument("--event-name", default="pull_request", help="Event name (default: pull_request)")

	srv = sub.add_parser("serve", help="Run the webhook server")
	srv.add_argument("--host", default=Config.HOST)
	srv.add_argument("--port", type=int, default=Config.PORT)

	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.INFO,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)

	if args.command == "check":
		try:
			decision = compute_changeset(
				_read_text(args.body_file), args.pr, args.link, Config.get_changeset_settings()
			)
		except ChangesetError as e:
			print(get_error_comment(e) or f"{e.name}: {e.message}", file=sys.stderr)
			return 1
		if args.json:
			print(json.dumps(decision.model_dump(mode="json"), indent=2))
		else:
			print_decision(decision)
		return 0

	if args.command == "handle-event":
		with open(args.event_path, "r", encoding="utf-8") as f:
			event = json.load(f)
		result = ChangesetAgent().handle_event(args.event_name, event)
		print(json.dumps(result.model_dump(), indent=2))
		return 1 if result.status == "failed" else 0

	if args.command == "serve":
		import uvicorn
		uvicorn.run("server.webhook_app:app", host=args.host, port=args.port)
		return 0

	return 2


if __name__ == "__main__":
	sys.exit(main())
