"""Configuration for the push bridge.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

To avoid collisions with other tools that may also use `GITHUB_TOKEN`, this
project uses a dedicated token variable: `BRIDGE_GITHUB_TOKEN`.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WORKFLOW_PATH = ".github/workflows/main.yml"
DEFAULT_PIPELINE_ENTRY_POINT = "githubActionsEntryPoint"


class BridgeSettings(BaseSettings):
    """Settings for the push bridge.

    Environment variables:
    - BRIDGE_GITHUB_TOKEN
    - JENKINS_URL
    - JENKINS_USER, JENKINS_API_TOKEN  (optional)
    - GITHUB_BASE_URL                  (optional)
    - LOG_LEVEL                        (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `BridgeSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="BRIDGE_GITHUB_TOKEN",
        description="GitHub token used to read workflow files",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    jenkins_url: str = Field(
        default="",
        validation_alias="JENKINS_URL",
        description="Jenkins base URL, e.g. https://jenkins.example.com",
    )
    jenkins_user: str = Field(
        default="",
        validation_alias="JENKINS_USER",
        description="Jenkins user for basic authentication",
    )
    jenkins_api_token: str = Field(
        default="",
        validation_alias="JENKINS_API_TOKEN",
        description="Jenkins API token paired with JENKINS_USER",
    )
    jenkins_use_crumb: bool = Field(
        default=False,
        validation_alias="JENKINS_USE_CRUMB",
        description="Fetch a CSRF crumb before POST requests",
    )

    workflow_path: str = Field(
        default=DEFAULT_WORKFLOW_PATH,
        validation_alias="BRIDGE_WORKFLOW_PATH",
        description="Repository path of the workflow file holding the trigger configuration",
    )
    pipeline_entry_point: str = Field(
        default=DEFAULT_PIPELINE_ENTRY_POINT,
        validation_alias="BRIDGE_PIPELINE_ENTRY_POINT",
        description="Shared library step invoked by every generated pipeline",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias="BRIDGE_HTTP_TIMEOUT_SECONDS",
        description="Timeout applied to each outbound HTTP request",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_endpoints(self) -> BridgeSettings:
        if not self.github_token.strip():
            raise ValueError("BRIDGE_GITHUB_TOKEN is required")
        if not self.jenkins_url.strip():
            raise ValueError("JENKINS_URL is required")
        return self

    @property
    def jenkins_auth(self) -> tuple[str, str] | None:
        """Basic auth pair for Jenkins, or None when no user is configured."""

        if not self.jenkins_user.strip():
            return None
        return self.jenkins_user, self.jenkins_api_token
