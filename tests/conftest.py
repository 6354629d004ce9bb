"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from github_jenkins_bridge.bridge.github.events import PushEvent
from github_jenkins_bridge.bridge.jenkins.client import JobInfo, JobNotFoundError

AFTER_SHA = "6dcb09b5b57875f334f61aebed695e2e4193db5e"

_SETTINGS_ENV_VARS = (
    "BRIDGE_GITHUB_TOKEN",
    "GITHUB_BASE_URL",
    "JENKINS_URL",
    "JENKINS_USER",
    "JENKINS_API_TOKEN",
    "JENKINS_USE_CRUMB",
    "BRIDGE_WORKFLOW_PATH",
    "BRIDGE_PIPELINE_ENTRY_POINT",
    "BRIDGE_HTTP_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "GITHUB_WEBHOOK_SECRET",
    "BRIDGE_HOST",
    "BRIDGE_PORT",
)


class FakeJenkins:
    """In-memory stand-in for JenkinsClient that records calls."""

    def __init__(self) -> None:
        self.jobs: dict[str, str] = {}
        self.descriptions: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.builds: list[tuple[str, dict[str, str]]] = []

    def get_job(self, name: str) -> JobInfo:
        self.calls.append(("get", name))
        if name not in self.jobs:
            raise JobNotFoundError(f"Jenkins job not found: {name}", status_code=404)
        return JobInfo(
            name=name,
            url=f"http://jenkins/job/{name}/",
            description=self.descriptions.get(name, ""),
        )

    def create_job(self, name: str, config_xml: str) -> None:
        self.calls.append(("create", name))
        self.jobs[name] = config_xml
        self.descriptions[name] = _description_of(config_xml)

    def update_job(self, name: str, config_xml: str) -> None:
        self.calls.append(("update", name))
        self.jobs[name] = config_xml
        self.descriptions[name] = _description_of(config_xml)

    def build_job(self, name: str, parameters: dict[str, str]) -> str | None:
        self.calls.append(("build", name))
        self.builds.append((name, dict(parameters)))
        return "http://jenkins/queue/item/1/"


def _description_of(config_xml: str) -> str:
    start = config_xml.index("<description>") + len("<description>")
    end = config_xml.index("</description>")
    return config_xml[start:end]


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep a developer's shell env and .env out of the tests."""

    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    """Undo `configure_logging` so later tests keep pytest's log capture."""

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_jenkins() -> FakeJenkins:
    return FakeJenkins()


@pytest.fixture
def push_payload() -> Callable[..., dict[str, Any]]:
    """Build a GitHub push payload with sensible defaults."""

    def _build(
        *,
        owner: str = "acme",
        repo: str = "site",
        ref: str = "refs/heads/main",
        after: str = AFTER_SHA,
        commits: list[dict[str, Any]] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        if commits is None:
            commits = [
                {
                    "id": after,
                    "message": "Update app",
                    "added": [],
                    "modified": ["src/app.js"],
                    "removed": [],
                }
            ]
        payload: dict[str, Any] = {
            "ref": ref,
            "before": "0" * 39 + "1",
            "after": after,
            "repository": {
                "name": repo,
                "full_name": f"{owner}/{repo}",
                "owner": {"login": owner, "id": 1},
            },
            "pusher": {"name": "octocat"},
            "commits": commits,
        }
        payload.update(extra)
        return payload

    return _build


@pytest.fixture
def make_event(push_payload: Callable[..., dict[str, Any]]) -> Callable[..., PushEvent]:
    def _make(**kwargs: Any) -> PushEvent:
        return PushEvent.model_validate(push_payload(**kwargs))

    return _make

