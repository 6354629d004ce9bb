#!/usr/bin/env python3
"""Programmatic push handling example.

This demonstrates using the bridge components directly:

* parse a workflow file's `on.push` trigger
* evaluate it against a push payload saved from a GitHub webhook delivery
* with `--live`, provision the branch's Jenkins job and enqueue a build

Credentials for `--live` are read from `.env` (see `BridgeSettings`).
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Sequence

from github_jenkins_bridge.bridge.config import BridgeSettings
from github_jenkins_bridge.bridge.github.events import PushEvent
from github_jenkins_bridge.bridge.handler import build_push_handler, log_result
from github_jenkins_bridge.bridge.logging import configure_logging
from github_jenkins_bridge.bridge.provisioner import job_identity
from github_jenkins_bridge.bridge.triggers import load_trigger_config, should_trigger


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate (and optionally run) a push event.")
    parser.add_argument("--workflow", required=True, help="Local copy of the workflow YAML")
    parser.add_argument("--event", required=True, help="Push event JSON payload")
    parser.add_argument(
        "--live",
        action="store_true",
        help="Fetch the workflow from GitHub and talk to Jenkins instead of only evaluating",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    event = PushEvent.model_validate(json.loads(Path(args.event).read_text(encoding="utf-8")))
    config = load_trigger_config(Path(args.workflow).read_text(encoding="utf-8"))

    matched = should_trigger(config, event.branch, event)
    print(f"Job: {job_identity(event.owner, event.repo, event.branch)}")
    print(f"Trigger matched: {matched}")

    if not args.live:
        return 0

    settings = BridgeSettings()
    configure_logging(settings.log_level)

    result = build_push_handler(settings).handle(event)
    log_result(result)
    print(f"Outcome: {result.outcome.value} ({result.message})")
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
