"""GitHub contents API client.

This intentionally wraps PyGithub to keep GitHub calls out of the event handler
and make tests easy: inject `github_api` to avoid any network access.
"""

from __future__ import annotations

import base64
import binascii
import logging
import math

from github import Auth, Github, UnknownObjectException

logger = logging.getLogger(__name__)


class GitHubClient:
    """Reads workflow files from repositories at a given commit."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        if github_api is not None:
            self._github = github_api
            logger.debug("Using injected Github instance")
            return

        auth = Auth.Token(token)
        # PyGithub only accepts whole seconds.
        self._github = Github(
            auth=auth, base_url=base_url.rstrip("/"), timeout=math.ceil(timeout)
        )

    def get_text_file(self, *, owner: str, repo: str, path: str, ref: str) -> str:
        """Return the decoded text of `path` in `owner/repo` at `ref`.

        Raises:
            FileNotFoundError: if the file does not exist at that ref.
            ValueError: if the path is a directory or the content cannot be decoded.
            github.GithubException: for any other API failure.
        """

        full_name = f"{owner}/{repo}"
        norm = path.lstrip("/")
        logger.debug(
            "Fetching file contents", extra={"repo": full_name, "path": norm, "ref": ref}
        )

        repository = self._github.get_repo(full_name, lazy=True)
        try:
            contents = repository.get_contents(norm, ref=ref)
        except UnknownObjectException as e:
            raise FileNotFoundError(f"File not found: {full_name}/{norm}@{ref}") from e

        if isinstance(contents, list):
            raise ValueError(f"Expected a file but found a directory: {norm}")

        raw = contents.content
        if not isinstance(raw, str):
            raise ValueError(f"Unexpected contents response for {norm}: missing content")
        if contents.encoding not in (None, "base64"):
            raise ValueError(f"Unsupported content encoding for {norm}: {contents.encoding}")

        try:
            return base64.b64decode(raw.encode("utf-8")).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"Could not decode {norm}: {e}") from e

    def close(self) -> None:
        """Close the underlying PyGithub connection."""
        self._github.close()
