"""Pydantic models for the webhook server."""

from __future__ import annotations

from pydantic import BaseModel


class WebhookResponse(BaseModel):
    status: str
    message: str = ""
    job: str | None = None
    error_kind: str | None = None
