"""Unit tests for push trigger evaluation."""

from __future__ import annotations

import pytest

from github_jenkins_bridge.bridge.triggers import (
    BranchFilter,
    BranchFilterKind,
    PushRule,
    TriggerConfig,
    TriggerConfigError,
    changed_files,
    load_trigger_config,
    parse_trigger_config,
    path_matches,
    should_trigger,
)


def _commit(*, added=(), modified=(), removed=(), message="change") -> dict[str, object]:
    return {
        "id": "c0ffee",
        "message": message,
        "added": list(added),
        "modified": list(modified),
        "removed": list(removed),
    }


def test_no_push_rule_never_triggers(make_event) -> None:
    event = make_event()
    for document in (
        {},
        {"on": {"pull_request": {}}},
        {"name": "ci"},
        None,
        "push",
        [],
        {"on": "push"},
        {"on": {"push": None}},
        {"on": {"push": ""}},
    ):
        config = parse_trigger_config(document)
        assert config.push is None
        assert should_trigger(config, "main", event) is False


def test_exact_branch_list(make_event) -> None:
    config = parse_trigger_config({"on": {"push": {"branches": ["main"]}}})

    assert config.push is not None
    assert config.push.branch_filter.kind is BranchFilterKind.EXACT_LIST
    assert should_trigger(config, "main", make_event()) is True
    assert should_trigger(config, "dev", make_event(ref="refs/heads/dev")) is False


def test_exact_branch_list_does_not_glob(make_event) -> None:
    config = parse_trigger_config({"on": {"push": {"branches": ["release/*"]}}})

    assert should_trigger(config, "release/1.0", make_event(ref="refs/heads/release/1.0")) is False
    assert should_trigger(config, "release/*", make_event(ref="refs/heads/release/*")) is True


def test_empty_branch_list_matches_nothing(make_event) -> None:
    config = parse_trigger_config({"on": {"push": {"branches": []}}})

    assert should_trigger(config, "main", make_event()) is False


def test_paths_prefix_pattern(make_event) -> None:
    config = parse_trigger_config({"on": {"push": {"paths": ["src/**"]}}})

    assert should_trigger(config, "main", make_event(commits=[_commit(modified=["src/a.js"])]))
    assert not should_trigger(
        config, "main", make_event(commits=[_commit(modified=["docs/a.md"])])
    )


def test_paths_prefix_pattern_requires_directory_boundary() -> None:
    assert path_matches("src/a.js", "src/**") is True
    assert path_matches("src/nested/deep/a.js", "src/**") is True
    assert path_matches("srcfoo/a.js", "src/**") is False
    assert path_matches("src", "src/**") is False


def test_wildcard_pattern_is_anchored() -> None:
    assert path_matches("readme.md", "*.md") is True
    assert path_matches("readme.mdx", "*.md") is False
    # `*` matches any sequence of characters, slashes included.
    assert path_matches("docs/guide/readme.md", "*.md") is True
    assert path_matches("docs/index.html", "docs/*.html") is True


def test_wildcard_pattern_treats_regex_metacharacters_literally() -> None:
    assert path_matches("a+b.txt", "a+b.*") is True
    assert path_matches("aab.txt", "a+b.*") is False
    assert path_matches("fileXtxt", "file*.txt") is False
    assert path_matches("lib/(core).py", "lib/(*).py") is True
    assert path_matches("file?.py", "file?.py") is True
    assert path_matches("fileA.py", "file?.py") is False


def test_double_star_inside_pattern() -> None:
    assert path_matches("packages/web/src/index.ts", "packages/**/index.ts") is True
    assert path_matches("packages/web/src/index.tsx", "packages/**/index.ts") is False


def test_pattern_without_wildcard_requires_exact_match() -> None:
    assert path_matches("Makefile", "Makefile") is True
    assert path_matches("src/Makefile", "Makefile") is False


def test_changed_files_unions_all_commits(make_event) -> None:
    event = make_event(
        commits=[
            _commit(added=["a.txt"], modified=["b.txt"]),
            _commit(removed=["c.txt"], modified=["b.txt"]),
        ]
    )

    files = changed_files(event)

    assert sorted(files) == ["a.txt", "b.txt", "b.txt", "c.txt"]


def test_paths_filter_with_no_commits_skips(make_event) -> None:
    config = parse_trigger_config({"on": {"push": {"paths": ["src/**"]}}})

    assert should_trigger(config, "main", make_event(commits=[])) is False


def test_branch_and_paths_must_both_pass(make_event) -> None:
    config = parse_trigger_config(
        {"on": {"push": {"branches": ["main"], "paths": ["src/**"]}}}
    )
    src_change = [_commit(modified=["src/app.js"])]

    assert should_trigger(config, "main", make_event(commits=src_change)) is True
    assert should_trigger(config, "dev", make_event(commits=src_change)) is False
    assert (
        should_trigger(config, "main", make_event(commits=[_commit(added=["README.md"])]))
        is False
    )


def test_push_without_filters_always_triggers(make_event) -> None:
    for document in (
        {"on": {"push": {}}},
        {"on": ["push", "pull_request"]},
    ):
        config = parse_trigger_config(document)
        assert should_trigger(config, "anything", make_event(commits=[])) is True


def test_bare_push_key_in_yaml_is_no_rule(make_event) -> None:
    for text in ("on: push\n", "on:\n  push:\n  pull_request:\n"):
        config = load_trigger_config(text)
        assert config.push is None
        assert should_trigger(config, "main", make_event()) is False

    assert load_trigger_config("on:\n  push: {}\n").push == PushRule()


def test_yaml_on_key_loaded_as_boolean_true(make_event) -> None:
    config = load_trigger_config(
        "name: CI\n"
        "on:\n"
        "  push:\n"
        "    branches: [main]\n"
        "    paths:\n"
        "      - 'src/**'\n"
        "jobs: {}\n"
    )

    assert config.push == PushRule(
        branch_filter=BranchFilter(kind=BranchFilterKind.EXACT_LIST, names=("main",)),
        path_patterns=("src/**",),
    )
    assert should_trigger(config, "main", make_event()) is True


def test_non_list_branch_filter_is_treated_as_unconfigured(make_event) -> None:
    config = parse_trigger_config({"on": {"push": {"branches": "main"}}})

    assert config.push is not None
    assert config.push.branch_filter.kind is BranchFilterKind.NONE
    assert should_trigger(config, "dev", make_event(ref="refs/heads/dev")) is True


def test_non_list_paths_filter_is_treated_as_unconfigured(make_event) -> None:
    config = parse_trigger_config({"on": {"push": {"paths": "src/**"}}})

    assert config.push is not None
    assert config.push.path_patterns is None
    assert should_trigger(config, "main", make_event(commits=[_commit(added=["x"])])) is True


def test_mapping_branch_filter_with_include_exclude(make_event) -> None:
    config = parse_trigger_config(
        {
            "on": {
                "push": {
                    "branches": {"include": ["release/*", "main"], "exclude": ["release/old*"]}
                }
            }
        }
    )
    event = make_event()

    assert config.push is not None
    assert config.push.branch_filter.kind is BranchFilterKind.PATTERN_MAP
    assert should_trigger(config, "main", event) is True
    assert should_trigger(config, "release/2.0", event) is True
    assert should_trigger(config, "release/old-1", event) is False
    assert should_trigger(config, "feature/x", event) is False


def test_unrecognised_mapping_branch_filter_passes_through(
    make_event, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level("WARNING"):
        config = parse_trigger_config({"on": {"push": {"branches": {"pattern": "*"}}}})

    assert should_trigger(config, "any-branch", make_event()) is True
    assert "accepting all branches" in caplog.text


def test_push_false_disables_rule(make_event) -> None:
    config = parse_trigger_config({"on": {"push": False}})

    assert should_trigger(config, "main", make_event()) is False


def test_invalid_yaml_raises_trigger_config_error() -> None:
    with pytest.raises(TriggerConfigError):
        load_trigger_config("on: [push\n")


def test_trigger_config_is_immutable() -> None:
    config = TriggerConfig(push=PushRule())

    with pytest.raises(AttributeError):
        config.push = None  # type: ignore[misc]
