"""Push trigger evaluation.

Decides, for one push event, whether the repository's workflow trigger
configuration (the `on:` block of a GitHub Actions style workflow) asks for a
build. Only `on.push.branches` and `on.push.paths` are interpreted.

Everything here is pure: no I/O, no network, parsed structures are frozen.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

import yaml

from github_jenkins_bridge.bridge.github.events import PushEvent

logger = logging.getLogger(__name__)

PUSH_EVENT = "push"


class TriggerConfigError(ValueError):
    """Raised when a workflow file cannot be parsed as YAML."""


class BranchFilterKind(str, Enum):
    NONE = "none"
    EXACT_LIST = "exact_list"
    PATTERN_MAP = "pattern_map"


@dataclass(frozen=True, slots=True)
class BranchFilter:
    """Branch filter of a push rule.

    - NONE: every branch passes.
    - EXACT_LIST: the branch must equal one of `names`.
    - PATTERN_MAP: mapping shaped filter with `include`/`exclude` glob lists.
      A mapping without either key passes every branch.
    """

    kind: BranchFilterKind = BranchFilterKind.NONE
    names: tuple[str, ...] = ()
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    def accepts(self, branch: str) -> bool:
        if self.kind is BranchFilterKind.EXACT_LIST:
            return branch in self.names
        if self.kind is BranchFilterKind.PATTERN_MAP:
            if self.include and not any(glob_matches(branch, p) for p in self.include):
                return False
            return not any(glob_matches(branch, p) for p in self.exclude)
        return True


@dataclass(frozen=True, slots=True)
class PushRule:
    branch_filter: BranchFilter = field(default_factory=BranchFilter)
    # None means "no path filter"; an empty tuple is a filter nothing satisfies.
    path_patterns: tuple[str, ...] | None = None

    def accepts_paths(self, changed: Iterable[str]) -> bool:
        if self.path_patterns is None:
            return True
        patterns = self.path_patterns
        return any(path_matches(path, pattern) for path in changed for pattern in patterns)


@dataclass(frozen=True, slots=True)
class TriggerConfig:
    push: PushRule | None = None


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    # Runs of `*` match any sequence; every other character is literal.
    pieces = re.split(r"\*+", pattern)
    return re.compile(".*".join(re.escape(piece) for piece in pieces))


def glob_matches(value: str, pattern: str) -> bool:
    """Anchored wildcard match where `*` stands for any sequence of characters."""

    if "*" not in pattern:
        return value == pattern
    return _compile_glob(pattern).fullmatch(value) is not None


def path_matches(path: str, pattern: str) -> bool:
    """Match one changed file path against one `paths` pattern.

    - `dir/**` matches anything under `dir/`. The prefix keeps its `/`, so
      `src/**` does not match `srcfoo/a.js` even though a plain "text before
      `/**`" prefix test would
    - `*` elsewhere matches any sequence of characters, anchored at both ends,
      so `*.md` matches `readme.md` but not `readme.mdx`
    - a pattern without `*` must equal the path
    """

    if pattern.endswith("/**"):
        return path.startswith(pattern[:-2])
    return glob_matches(path, pattern)


def changed_files(event: PushEvent) -> list[str]:
    """Files touched by the pushed commits, as reported in the payload.

    This is not a diff: a file added then removed in the same push is listed
    twice, and nothing outside the commit summaries is considered.
    """

    files: list[str] = []
    for commit in event.commits:
        files.extend(commit.added)
        files.extend(commit.modified)
        files.extend(commit.removed)
    return files


def _string_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        return tuple(str(item) for item in value)
    return ()


def _parse_branch_filter(raw: object) -> BranchFilter:
    if raw is None:
        return BranchFilter()
    if isinstance(raw, list):
        return BranchFilter(
            kind=BranchFilterKind.EXACT_LIST, names=tuple(str(name) for name in raw)
        )
    if isinstance(raw, Mapping):
        include = _string_tuple(raw.get("include"))
        exclude = _string_tuple(raw.get("exclude"))
        if not include and not exclude:
            logger.warning(
                "Branch filter mapping has no include/exclude patterns; accepting all branches",
                extra={"keys": sorted(str(k) for k in raw)},
            )
        return BranchFilter(kind=BranchFilterKind.PATTERN_MAP, include=include, exclude=exclude)

    logger.warning(
        "Ignoring branch filter that is not a list",
        extra={"type": type(raw).__name__},
    )
    return BranchFilter()


def _parse_path_patterns(raw: object) -> tuple[str, ...] | None:
    if raw is None:
        return None
    if isinstance(raw, list):
        return tuple(str(pattern) for pattern in raw)

    logger.warning(
        "Ignoring paths filter that is not a list",
        extra={"type": type(raw).__name__},
    )
    return None


def _parse_push_rule(body: object) -> PushRule | None:
    # `push:` with no body, `false`, `0` or `""` is no rule; `push: {}` is every push.
    if body is None or (not isinstance(body, (Mapping, list)) and not body):
        return None
    if not isinstance(body, Mapping):
        return PushRule()
    return PushRule(
        branch_filter=_parse_branch_filter(body.get("branches")),
        path_patterns=_parse_path_patterns(body.get("paths")),
    )


def _on_block(document: Mapping[object, object]) -> object:
    # YAML 1.1 loads a bare `on` key as boolean True.
    if "on" in document:
        return document["on"]
    return document.get(True)


def parse_trigger_config(document: object) -> TriggerConfig:
    """Build a TriggerConfig from a parsed workflow document of any shape.

    Malformed shapes degrade to "not configured" instead of raising.
    """

    if not isinstance(document, Mapping):
        return TriggerConfig()

    on = _on_block(document)
    if isinstance(on, str):
        # A bare event name carries no `push` entry to read filters from.
        return TriggerConfig()
    if isinstance(on, list):
        return TriggerConfig(push=PushRule() if PUSH_EVENT in on else None)
    if isinstance(on, Mapping) and PUSH_EVENT in on:
        return TriggerConfig(push=_parse_push_rule(on[PUSH_EVENT]))
    return TriggerConfig()


def load_trigger_config(text: str) -> TriggerConfig:
    """Parse workflow YAML text into a TriggerConfig.

    Raises:
        TriggerConfigError: if the text is not valid YAML.
    """

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise TriggerConfigError(f"Workflow file is not valid YAML: {e}") from e
    return parse_trigger_config(document)


def should_trigger(config: TriggerConfig, branch: str, event: PushEvent) -> bool:
    """Return True when the push satisfies the configured push trigger."""

    rule = config.push
    if rule is None:
        return False
    if not rule.branch_filter.accepts(branch):
        return False
    return rule.accepts_paths(changed_files(event))
