"""
CLI Tests
=========
"""
import json

import pytest

from agents import changeset_agent
from agents.changeset_agent import main
from utils.changelog_models import HandlingResult


@pytest.fixture
def body_file(tmp_path):
    def _write(text):
        path = tmp_path / "body.md"
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


class TestCheck:

    def test_prints_changeset(self, body_file, capsys):
        path = body_file("## Changelog\n- feat: add login page\n")
        code = main(["check", "--body-file", path, "--pr", "42", "--link", "http://x/42"])

        out = capsys.readouterr().out
        assert code == 0
        assert "PR #42: proceed" in out
        assert "File: changelogs/fragments/42.yml" in out
        assert "feat:\n- Add login page ([#42](http://x/42))" in out

    def test_json_output(self, body_file, capsys):
        path = body_file("## Changelog\n- skip\n")
        code = main(["check", "--body-file", path, "--pr", "7", "--link", "http://x/7", "--json"])

        decision = json.loads(capsys.readouterr().out)
        assert code == 0
        assert decision["resolution"] == "skip"
        assert decision["content"] is None

    def test_invalid_entry_prints_comment(self, body_file, capsys):
        path = body_file("## Changelog\n- nope: thing\n")
        code = main(["check", "--body-file", path, "--pr", "1", "--link", "http://x/1"])

        assert code == 1
        assert "### ❌ Invalid Prefix Error" in capsys.readouterr().err


class TestHandleEvent:

    def test_exit_code_follows_status(self, tmp_path, capsys, monkeypatch):
        event_path = tmp_path / "event.json"
        event_path.write_text(json.dumps({"action": "opened", "pull_request": {}}), encoding="utf-8")

        class FailingAgent:
            def handle_event(self, event_name, event):
                return HandlingResult(status="failed", error="PullRequestDataExtractionError")

        monkeypatch.setattr(changeset_agent, "ChangesetAgent", FailingAgent)
        code = main(["handle-event", "--event-path", str(event_path)])

        assert code == 1
        assert json.loads(capsys.readouterr().out)["status"] == "failed"

    def test_ignored_event(self, tmp_path, capsys):
        event_path = tmp_path / "event.json"
        event_path.write_text(json.dumps({"action": "closed"}), encoding="utf-8")

        code = main(["handle-event", "--event-path", str(event_path)])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["status"] == "ignored"
