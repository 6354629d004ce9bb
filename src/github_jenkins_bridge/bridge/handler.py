"""Per-event push handling.

Flow for one push:
  fetch workflow file at the pushed commit -> parse -> evaluate trigger
  -> ensure Jenkins job -> enqueue build

`PushEventHandler.handle` never raises. Every failure is reported as a
`HandleResult` with an `ErrorKind`, so a single bad event cannot take down the
server delivering it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from github import GithubException
from requests import RequestException

from github_jenkins_bridge.bridge.config import DEFAULT_WORKFLOW_PATH, BridgeSettings
from github_jenkins_bridge.bridge.github.client import GitHubClient
from github_jenkins_bridge.bridge.github.events import PushEvent
from github_jenkins_bridge.bridge.jenkins.client import JenkinsClient, JenkinsError
from github_jenkins_bridge.bridge.provisioner import (
    JobAction,
    JobIdentityCollision,
    JobLookupError,
    JobProvisioner,
    job_identity,
)
from github_jenkins_bridge.bridge.triggers import (
    TriggerConfigError,
    load_trigger_config,
    should_trigger,
)

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    TRIGGERED = "triggered"
    SKIPPED = "skipped"
    IGNORED = "ignored"
    FAILED = "failed"


class ErrorKind(str, Enum):
    CONFIG_FETCH = "config_fetch"
    CONFIG_PARSE = "config_parse"
    JOB_LOOKUP = "job_lookup"
    JOB_PROVISION = "job_provision"
    BUILD_ENQUEUE = "build_enqueue"


@dataclass(frozen=True, slots=True)
class HandleResult:
    outcome: Outcome
    owner: str
    repo: str
    branch: str
    message: str = ""
    job_name: str | None = None
    job_action: JobAction | None = None
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILED

    def log_context(self) -> dict[str, object]:
        context: dict[str, object] = {
            "outcome": self.outcome.value,
            "owner": self.owner,
            "repo": self.repo,
            "branch": self.branch,
        }
        if self.job_name is not None:
            context["job"] = self.job_name
        if self.job_action is not None:
            context["job_action"] = self.job_action.value
        if self.error_kind is not None:
            context["error_kind"] = self.error_kind.value
        return context


class _StepFailed(Exception):
    def __init__(self, kind: ErrorKind, cause: BaseException) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.kind = kind


# Failures each step is expected to produce; anything else is still reported
# under the step's kind, but with a traceback in the log.
_EXPECTED_FAILURES: dict[ErrorKind, tuple[type[Exception], ...]] = {
    ErrorKind.CONFIG_FETCH: (FileNotFoundError, ValueError, GithubException, RequestException),
    ErrorKind.CONFIG_PARSE: (TriggerConfigError,),
    ErrorKind.JOB_PROVISION: (JenkinsError, RequestException),
    ErrorKind.BUILD_ENQUEUE: (JenkinsError, RequestException),
}


@contextmanager
def _step(kind: ErrorKind) -> Iterator[None]:
    try:
        yield
    except (JobLookupError, JobIdentityCollision) as e:
        raise _StepFailed(ErrorKind.JOB_LOOKUP, e) from e
    except _EXPECTED_FAILURES[kind] as e:
        raise _StepFailed(kind, e) from e
    except Exception as e:  # noqa: BLE001
        logger.exception("Unexpected failure during push handling", extra={"step": kind.value})
        raise _StepFailed(kind, e) from e


class PushEventHandler:
    """Runs the push-to-build flow for single events."""

    def __init__(
        self,
        *,
        github: GitHubClient,
        provisioner: JobProvisioner,
        workflow_path: str = DEFAULT_WORKFLOW_PATH,
    ) -> None:
        self._github = github
        self._provisioner = provisioner
        self._workflow_path = workflow_path

    def handle(self, event: PushEvent) -> HandleResult:
        owner, repo, branch = event.owner, event.repo, event.branch

        if not event.is_branch_push:
            return HandleResult(
                outcome=Outcome.IGNORED,
                owner=owner,
                repo=repo,
                branch=branch,
                message=f"Not a branch push: {event.ref}",
            )
        if event.is_branch_deletion:
            return HandleResult(
                outcome=Outcome.IGNORED,
                owner=owner,
                repo=repo,
                branch=branch,
                message="Branch deleted",
            )

        try:
            return self._run(event, owner, repo, branch)
        except _StepFailed as e:
            return HandleResult(
                outcome=Outcome.FAILED,
                owner=owner,
                repo=repo,
                branch=branch,
                message=str(e),
                job_name=job_identity(owner, repo, branch),
                error_kind=e.kind,
            )

    def _run(self, event: PushEvent, owner: str, repo: str, branch: str) -> HandleResult:
        with _step(ErrorKind.CONFIG_FETCH):
            text = self._github.get_text_file(
                owner=owner, repo=repo, path=self._workflow_path, ref=event.after
            )

        with _step(ErrorKind.CONFIG_PARSE):
            config = load_trigger_config(text)
            matched = should_trigger(config, branch, event)

        if not matched:
            return HandleResult(
                outcome=Outcome.SKIPPED,
                owner=owner,
                repo=repo,
                branch=branch,
                message="Trigger conditions not met",
            )

        with _step(ErrorKind.JOB_PROVISION):
            action = self._provisioner.ensure_job(owner, repo, branch)

        with _step(ErrorKind.BUILD_ENQUEUE):
            self._provisioner.trigger_build(owner, repo, branch, event)

        return HandleResult(
            outcome=Outcome.TRIGGERED,
            owner=owner,
            repo=repo,
            branch=branch,
            message="Build enqueued",
            job_name=job_identity(owner, repo, branch),
            job_action=action,
        )


def log_result(result: HandleResult) -> None:
    """Log a handler result at a level matching its outcome."""

    context = result.log_context()
    target = f"{result.owner}/{result.repo}:{result.branch}"
    if result.outcome is Outcome.TRIGGERED:
        logger.info(f"Successfully processed push event for {target}", extra=context)
    elif result.outcome is Outcome.FAILED:
        logger.error(
            f"Error processing push event for {target}: {result.message}", extra=context
        )
    else:
        logger.info(f"Skipping build for {target}: {result.message}", extra=context)


def build_push_handler(settings: BridgeSettings) -> PushEventHandler:
    """Wire real GitHub/Jenkins clients from settings into a handler."""

    github = GitHubClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
        timeout=settings.http_timeout_seconds,
    )
    jenkins = JenkinsClient(
        base_url=settings.jenkins_url,
        auth=settings.jenkins_auth,
        use_crumb=settings.jenkins_use_crumb,
        timeout=settings.http_timeout_seconds,
    )
    provisioner = JobProvisioner(jenkins=jenkins, entry_point=settings.pipeline_entry_point)
    return PushEventHandler(
        github=github, provisioner=provisioner, workflow_path=settings.workflow_path
    )
