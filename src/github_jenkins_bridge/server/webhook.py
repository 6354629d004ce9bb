"""GitHub webhook route.

- verifies `X-Hub-Signature-256` when a secret is configured
- answers `ping`, ignores every event other than `push`
- validates the payload and hands it to the push handler
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from collections.abc import Callable

from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from github_jenkins_bridge.bridge.github.events import PushEvent
from github_jenkins_bridge.bridge.handler import HandleResult, log_result
from github_jenkins_bridge.server.models import WebhookResponse

logger = logging.getLogger(__name__)

PushHandler = Callable[[PushEvent], HandleResult]


def verify_signature(body: bytes, signature_header: str | None, secret: str) -> None:
    """Raise 401 unless the header carries the HMAC SHA-256 of `body`."""

    if not signature_header or not signature_header.startswith("sha256="):
        raise HTTPException(status_code=401, detail="Missing or invalid signature header")
    expected = "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    if not hmac.compare_digest(expected, signature_header):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")


def build_webhook_router(*, secret: str, handler: PushHandler) -> APIRouter:
    router = APIRouter()

    @router.post("/github/webhook", response_model=WebhookResponse)
    async def github_webhook(
        request: Request,
        x_github_event: str = Header(alias="X-GitHub-Event"),
        x_hub_signature_256: str | None = Header(default=None, alias="X-Hub-Signature-256"),
        x_github_delivery: str | None = Header(default=None, alias="X-GitHub-Delivery"),
    ) -> WebhookResponse:
        body = await request.body()
        if secret:
            verify_signature(body, x_hub_signature_256, secret)

        if x_github_event == "ping":
            return WebhookResponse(status="pong")
        if x_github_event != "push":
            return WebhookResponse(status="ignored", message=f"Unhandled event: {x_github_event}")

        try:
            event = PushEvent.model_validate(json.loads(body.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise HTTPException(status_code=400, detail="Invalid JSON payload") from e
        except ValidationError as e:
            raise HTTPException(status_code=422, detail="Unexpected push payload shape") from e

        logger.debug(
            "Received push event",
            extra={"delivery": x_github_delivery, "ref": event.ref, "after": event.after},
        )
        # The handler blocks on GitHub/Jenkins HTTP calls.
        result = await run_in_threadpool(handler, event)
        log_result(result)

        return WebhookResponse(
            status=result.outcome.value,
            message=result.message,
            job=result.job_name,
            error_kind=result.error_kind.value if result.error_kind is not None else None,
        )

    return router
