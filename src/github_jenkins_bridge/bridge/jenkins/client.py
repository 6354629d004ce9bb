"""Jenkins remote access API client.

Only the four job operations the bridge needs are wrapped:
get, create, replace config, and build with parameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

_XML_HEADERS = {"Content-Type": "application/xml; charset=utf-8"}


class JenkinsError(RuntimeError):
    """Raised when Jenkins answers with an unexpected status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class JobNotFoundError(JenkinsError):
    """Raised when the requested job does not exist."""


@dataclass(frozen=True, slots=True)
class JobInfo:
    """Minimal job metadata returned by Jenkins."""

    name: str
    url: str
    description: str


class JenkinsClient:
    """Small wrapper around the Jenkins JSON/XML endpoints."""

    def __init__(
        self,
        *,
        base_url: str,
        auth: tuple[str, str] | None = None,
        use_crumb: bool = False,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url.strip():
            raise ValueError("Jenkins base URL is required")

        self._base_url = base_url.rstrip("/")
        self._use_crumb = use_crumb
        self._timeout = timeout
        self._crumb: dict[str, str] | None = None

        self._session = session or requests.Session()
        if auth is not None:
            self._session.auth = auth
        self._session.headers.update({"User-Agent": "github-jenkins-bridge"})

    def _job_url(self, name: str, suffix: str = "") -> str:
        if not name.strip():
            raise ValueError("job name is required")
        if suffix and not suffix.startswith("/"):
            suffix = "/" + suffix
        return f"{self._base_url}/job/{quote(name, safe='')}{suffix}"

    def _crumb_headers(self) -> dict[str, str]:
        if not self._use_crumb:
            return {}
        if self._crumb is None:
            resp = self._session.get(
                f"{self._base_url}/crumbIssuer/api/json", timeout=self._timeout
            )
            self._raise_for_status(resp, action="fetch crumb")
            data: dict[str, Any] = resp.json()
            field = data.get("crumbRequestField")
            crumb = data.get("crumb")
            if not isinstance(field, str) or not isinstance(crumb, str):
                raise JenkinsError("Unexpected crumb issuer response")
            self._crumb = {field: crumb}
        return dict(self._crumb)

    @staticmethod
    def _raise_for_status(resp: requests.Response, *, action: str) -> None:
        if resp.status_code < 400:
            return
        raise JenkinsError(
            f"Jenkins {action} failed with {resp.status_code}: {resp.text[:500]}",
            status_code=resp.status_code,
        )

    def _post(
        self,
        url: str,
        *,
        action: str,
        params: dict[str, str] | None = None,
        data: bytes | dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        merged = {**self._crumb_headers(), **(headers or {})}
        resp = self._session.post(
            url, params=params, data=data, headers=merged, timeout=self._timeout
        )
        self._raise_for_status(resp, action=action)
        return resp

    def get_job(self, name: str) -> JobInfo:
        """Fetch a job by name.

        Raises:
            JobNotFoundError: if no job has that name.
            JenkinsError: for any other failure.
        """

        url = self._job_url(name, "api/json")
        resp = self._session.get(
            url, params={"tree": "name,url,description"}, timeout=self._timeout
        )
        if resp.status_code == 404:
            raise JobNotFoundError(f"Jenkins job not found: {name}", status_code=404)
        self._raise_for_status(resp, action=f"get job {name}")
        data: dict[str, Any] = resp.json()
        description = data.get("description")
        return JobInfo(
            name=str(data.get("name") or name),
            url=str(data.get("url") or ""),
            description=description if isinstance(description, str) else "",
        )

    def create_job(self, name: str, config_xml: str) -> None:
        logger.debug("Creating Jenkins job", extra={"job": name})
        self._post(
            f"{self._base_url}/createItem",
            action=f"create job {name}",
            params={"name": name},
            data=config_xml.encode("utf-8"),
            headers=_XML_HEADERS,
        )

    def update_job(self, name: str, config_xml: str) -> None:
        """Replace the job's config.xml (full overwrite)."""

        logger.debug("Replacing Jenkins job config", extra={"job": name})
        self._post(
            self._job_url(name, "config.xml"),
            action=f"update job {name}",
            data=config_xml.encode("utf-8"),
            headers=_XML_HEADERS,
        )

    def build_job(self, name: str, parameters: dict[str, str]) -> str | None:
        """Enqueue a parameterised build.

        Returns:
            The queue item URL from the Location header, when Jenkins sends one.
        """

        resp = self._post(
            self._job_url(name, "buildWithParameters"),
            action=f"build job {name}",
            data=parameters,
        )
        return resp.headers.get("Location")

    def close(self) -> None:
        self._session.close()
