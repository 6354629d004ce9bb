"""GitHub `push` webhook payload schema.

Only the subset of fields the bridge reads is modelled; everything else in the
payload is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

BRANCH_REF_PREFIX = "refs/heads/"
NULL_SHA = "0" * 40


class GitHubOwner(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str


class GitHubRepository(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    owner: GitHubOwner


class PushCommit(BaseModel):
    """One commit summary from a push payload."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    message: str = ""
    added: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)


class PushEvent(BaseModel):
    """GitHub `push` webhook event (minimal structure)."""

    model_config = ConfigDict(extra="ignore")

    ref: str
    before: str = ""
    after: str
    deleted: bool = False
    repository: GitHubRepository
    commits: list[PushCommit] = Field(default_factory=list)

    @property
    def owner(self) -> str:
        return self.repository.owner.login

    @property
    def repo(self) -> str:
        return self.repository.name

    @property
    def is_branch_push(self) -> bool:
        return self.ref.startswith(BRANCH_REF_PREFIX)

    @property
    def is_branch_deletion(self) -> bool:
        return self.deleted or self.after == NULL_SHA

    @property
    def branch(self) -> str:
        """Branch name with the `refs/heads/` prefix removed."""

        return self.ref.removeprefix(BRANCH_REF_PREFIX)

    @property
    def first_commit_message(self) -> str:
        if not self.commits:
            return ""
        return self.commits[0].message
