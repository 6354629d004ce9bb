"""Jenkins job provisioning and build triggering.

One Jenkins job exists per (owner, repository, branch). The job is created on
the first matching push and its definition is fully overwritten on every later
one, so template changes roll out without manual edits.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

import requests

from github_jenkins_bridge.bridge.config import DEFAULT_PIPELINE_ENTRY_POINT
from github_jenkins_bridge.bridge.github.events import PushEvent
from github_jenkins_bridge.bridge.jenkins.client import (
    JenkinsClient,
    JenkinsError,
    JobNotFoundError,
)
from github_jenkins_bridge.bridge.jenkins.templates import (
    IDENTITY_MARKER_PREFIX,
    identity_marker,
    render_job_config,
    render_pipeline_script,
)

logger = logging.getLogger(__name__)

# Characters Jenkins rejects in item names.
_UNSAFE_JOB_NAME_CHARS = re.compile(r"[\s/\\?*%!@#$^&|<>\[\]:;]")


class JobAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


class JobLookupError(RuntimeError):
    """Raised when the existing job could not be looked up for a reason other than absence."""


class JobIdentityCollision(RuntimeError):
    """Raised when the job name is already owned by a different push target."""

    def __init__(self, *, job_name: str, expected: str, found: str) -> None:
        super().__init__(
            f"Jenkins job {job_name!r} belongs to {found!r}, "
            f"refusing to overwrite it for {expected!r}"
        )
        self.job_name = job_name
        self.expected = expected
        self.found = found


def job_identity(owner: str, repo: str, branch: str) -> str:
    """Return the Jenkins job name for a repository branch.

    The name is `{owner}_{repo}_{branch}` with characters Jenkins forbids in
    job names replaced by `_`, so `feature/login` becomes `feature_login`.
    """

    return _UNSAFE_JOB_NAME_CHARS.sub("_", f"{owner}_{repo}_{branch}")


def _marker_from_description(description: str) -> str | None:
    for line in description.splitlines():
        line = line.strip()
        if line.startswith(IDENTITY_MARKER_PREFIX):
            return line
    return None


class JobProvisioner:
    """Creates/updates per-branch pipeline jobs and enqueues their builds."""

    def __init__(
        self,
        *,
        jenkins: JenkinsClient,
        entry_point: str = DEFAULT_PIPELINE_ENTRY_POINT,
    ) -> None:
        self._jenkins = jenkins
        self._entry_point = entry_point

    def render_pipeline(self, owner: str, repo: str, branch: str) -> str:
        return render_pipeline_script(owner, repo, branch, self._entry_point)

    def render_job(self, owner: str, repo: str, branch: str) -> str:
        """Render the full config.xml for the branch's job."""

        marker = identity_marker(owner, repo, branch)
        description = f"Managed by github-jenkins-bridge.\n{marker}"
        return render_job_config(self.render_pipeline(owner, repo, branch), description)

    def ensure_job(self, owner: str, repo: str, branch: str) -> JobAction:
        """Make sure the branch's job exists with the current definition.

        Raises:
            JobLookupError: if the lookup fails for any reason but "not found".
            JobIdentityCollision: if the name is owned by another (owner, repo, branch).
            JenkinsError: if creating or updating the job fails.
        """

        name = job_identity(owner, repo, branch)
        config_xml = self.render_job(owner, repo, branch)

        try:
            existing = self._jenkins.get_job(name)
        except JobNotFoundError:
            self._jenkins.create_job(name, config_xml)
            logger.info("Created Jenkins job", extra={"job": name})
            return JobAction.CREATED
        except (JenkinsError, requests.RequestException) as e:
            raise JobLookupError(f"Could not look up Jenkins job {name}: {e}") from e

        expected = identity_marker(owner, repo, branch)
        found = _marker_from_description(existing.description)
        if found is not None and found != expected:
            raise JobIdentityCollision(job_name=name, expected=expected, found=found)

        self._jenkins.update_job(name, config_xml)
        logger.info("Updated Jenkins job", extra={"job": name})
        return JobAction.UPDATED

    def build_parameters(
        self, owner: str, repo: str, branch: str, event: PushEvent
    ) -> dict[str, str]:
        return {
            "REPO_OWNER": owner,
            "REPO_NAME": repo,
            "BRANCH_NAME": branch,
            "COMMIT_SHA": event.after,
            "COMMIT_MESSAGE": event.first_commit_message,
            "JENKINSFILE": self.render_pipeline(owner, repo, branch),
        }

    def trigger_build(self, owner: str, repo: str, branch: str, event: PushEvent) -> None:
        name = job_identity(owner, repo, branch)
        queue_url = self._jenkins.build_job(
            name, self.build_parameters(owner, repo, branch, event)
        )
        logger.info(
            "Triggered Jenkins build",
            extra={"job": name, "commit": event.after, "queue_url": queue_url},
        )
