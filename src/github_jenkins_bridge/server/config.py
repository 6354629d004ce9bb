"""Configuration for the webhook server.

Extends the bridge settings with what only the HTTP surface needs.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from github_jenkins_bridge.bridge.config import BridgeSettings


class ServerSettings(BridgeSettings):
    """Settings for the webhook receiver.

    Notes:
        - An empty GITHUB_WEBHOOK_SECRET disables signature verification. Only do
          this when the endpoint is not reachable from the internet.
    """

    webhook_secret: str = Field(
        default="",
        validation_alias="GITHUB_WEBHOOK_SECRET",
        description="Secret configured on the GitHub webhook (HMAC SHA-256)",
    )
    host: str = Field(default="127.0.0.1", validation_alias="BRIDGE_HOST")
    port: int = Field(default=8000, ge=1, le=65535, validation_alias="BRIDGE_PORT")

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")
