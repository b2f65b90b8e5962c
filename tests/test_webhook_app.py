"""
Webhook App Tests
=================
Signature checking and event dispatch of the FastAPI receiver.
"""
import hashlib
import hmac
import json

import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

from utils.changelog_models import HandlingResult
from server.webhook_app import app, get_agent, get_webhook_secret, verify_signature


SECRET = "s3cret"


class StubAgent:

    def __init__(self):
        self.events = []

    def handle_event(self, event_name, event):
        self.events.append((event_name, event))
        return HandlingResult(status="created", pr_number="42", file_path="changelogs/fragments/42.yml")


def sign(body: bytes, secret: str = SECRET) -> str:
    return "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


@pytest.fixture
def stub_agent():
    return StubAgent()


@pytest.fixture
def client(stub_agent):
    app.dependency_overrides[get_agent] = lambda: stub_agent
    app.dependency_overrides[get_webhook_secret] = lambda: SECRET
    yield TestClient(app)
    app.dependency_overrides.clear()


def post(client, payload, event="pull_request", signature=None):
    body = json.dumps(payload).encode("utf-8")
    headers = {"X-GitHub-Event": event, "Content-Type": "application/json"}
    headers["X-Hub-Signature-256"] = signature if signature is not None else sign(body)
    return client.post("/api/webhook", content=body, headers=headers)


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestWebhook:

    def test_signed_delivery_dispatched(self, client, stub_agent):
        response = post(client, {"action": "opened", "pull_request": {"number": 42}})

        assert response.status_code == 200
        assert response.json()["status"] == "created"
        assert stub_agent.events == [("pull_request", {"action": "opened", "pull_request": {"number": 42}})]

    def test_bad_signature_rejected(self, client, stub_agent):
        response = post(client, {"action": "opened"}, signature="sha256=deadbeef")
        assert response.status_code == 401
        assert stub_agent.events == []

    def test_missing_event_header(self, client):
        body = b"{}"
        response = client.post("/api/webhook", content=body, headers={"X-Hub-Signature-256": sign(body)})
        assert response.status_code == 422

    @pytest.mark.parametrize("body", [b"[1, 2]", b'"text"', b"42"])
    def test_non_object_json_rejected(self, client, stub_agent, body):
        response = client.post(
            "/api/webhook",
            content=body,
            headers={"X-GitHub-Event": "pull_request", "X-Hub-Signature-256": sign(body)},
        )
        assert response.status_code == 400
        assert stub_agent.events == []

    def test_invalid_json(self, client):
        body = b"not json"
        response = client.post(
            "/api/webhook",
            content=body,
            headers={"X-GitHub-Event": "pull_request", "X-Hub-Signature-256": sign(body)},
        )
        assert response.status_code == 400

    def test_unsigned_accepted_without_secret(self, client, stub_agent):
        app.dependency_overrides[get_webhook_secret] = lambda: ""
        response = client.post(
            "/api/webhook",
            content=b'{"action": "opened"}',
            headers={"X-GitHub-Event": "pull_request"},
        )
        assert response.status_code == 200
        assert len(stub_agent.events) == 1


class TestVerifySignature:

    def test_valid(self):
        assert verify_signature(b"payload", sign(b"payload"), SECRET)

    def test_wrong_secret(self):
        assert not verify_signature(b"payload", sign(b"payload", "other"), SECRET)

    @pytest.mark.parametrize("header", [None, "", "sha1=abc"])
    def test_malformed_header(self, header):
        assert not verify_signature(b"payload", header, SECRET)
