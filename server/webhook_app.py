"""
Webhook Application
===================
GitHub App webhook receiver for the changeset bot.

Run with:
    uvicorn server.webhook_app:app --port 3000
"""
import hashlib
import hmac
import json
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from agents.changeset_agent import ChangesetAgent
from configs.config import Config

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
WEBHOOK_PATH = "/api/webhook"

app = FastAPI(
    title="Changeset Bot",
    description="Maintains changelog fragment files from pull request descriptions",
    version=API_VERSION,
)


@lru_cache(maxsize=1)
def get_agent() -> ChangesetAgent:
    return ChangesetAgent()


def get_webhook_secret() -> str:
    return Config.GITHUB_WEBHOOK_SECRET


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """Check an ``X-Hub-Signature-256`` header against the raw request body."""
    if not signature or not signature.startswith("sha256="):
        return False
    expected = "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


@app.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns OK if the service is running.
    """
    return {"status": "ok", "version": API_VERSION}


@app.post(WEBHOOK_PATH)
async def receive_webhook(
    request: Request,
    x_github_event: str = Header(..., alias="X-GitHub-Event"),
    x_hub_signature_256: Optional[str] = Header(None, alias="X-Hub-Signature-256"),
    agent: ChangesetAgent = Depends(get_agent),
    secret: str = Depends(get_webhook_secret),
):
    """
    Receive a GitHub webhook delivery.

    - **pull_request** opened/edited: changeset file is created, updated or deleted
    - anything else: acknowledged and ignored
    """
    body = await request.body()
    if secret and not verify_signature(body, x_hub_signature_256, secret):
        logger.warning(f"Rejected {x_github_event} delivery with invalid signature")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    try:
        event = json.loads(body or b"{}")
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Payload is not valid JSON")
    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Payload must be a JSON object")

    # GitHub calls are blocking
    result = await run_in_threadpool(agent.handle_event, x_github_event, event)
    return result.model_dump()
