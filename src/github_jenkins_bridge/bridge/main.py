"""CLI entrypoint for the push bridge.

`evaluate` and `render-job` work offline; `handle-event` and `serve` need
GitHub and Jenkins credentials.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from github_jenkins_bridge import __version__
from github_jenkins_bridge.bridge.config import DEFAULT_PIPELINE_ENTRY_POINT, BridgeSettings
from github_jenkins_bridge.bridge.github.events import PushEvent
from github_jenkins_bridge.bridge.handler import build_push_handler, log_result
from github_jenkins_bridge.bridge.jenkins.templates import render_job_config, render_pipeline_script
from github_jenkins_bridge.bridge.logging import configure_logging
from github_jenkins_bridge.bridge.provisioner import job_identity
from github_jenkins_bridge.bridge.triggers import (
    TriggerConfigError,
    changed_files,
    load_trigger_config,
    should_trigger,
)
from github_jenkins_bridge.server.app import create_app
from github_jenkins_bridge.server.config import ServerSettings

logger = logging.getLogger(__name__)


def _load_event(path: str) -> PushEvent:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return PushEvent.model_validate(raw)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bridge",
        description="Trigger Jenkins pipeline builds from GitHub push events",
    )
    parser.add_argument(
        "--version", action="version", version=f"github-jenkins-bridge {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the webhook server")
    serve.add_argument("--host", default=None, help="Bind address (defaults to BRIDGE_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Port (defaults to BRIDGE_PORT)")

    evaluate = subparsers.add_parser(
        "evaluate",
        help="Check whether a push event payload satisfies a workflow file's push trigger",
    )
    evaluate.add_argument("--workflow", required=True, help="Path to the workflow YAML file")
    evaluate.add_argument("--event", required=True, help="Path to a push event JSON payload")
    evaluate.add_argument("--log-level", default="WARNING", help="Logging level")

    render_job = subparsers.add_parser(
        "render-job", help="Print the Jenkins job name and config.xml for a branch"
    )
    render_job.add_argument("--owner", required=True, help="Repository owner")
    render_job.add_argument("--repo", required=True, help="Repository name")
    render_job.add_argument("--branch", required=True, help="Branch name")
    render_job.add_argument(
        "--entry-point",
        default=DEFAULT_PIPELINE_ENTRY_POINT,
        help="Shared library step called by the pipeline",
    )

    handle_event = subparsers.add_parser(
        "handle-event",
        help="Process a push event payload from a file against live GitHub and Jenkins",
    )
    handle_event.add_argument("--event", required=True, help="Path to a push event JSON payload")

    return parser


def _evaluate(args: argparse.Namespace) -> int:
    configure_logging(args.log_level)
    try:
        config = load_trigger_config(Path(args.workflow).read_text(encoding="utf-8"))
    except TriggerConfigError as e:
        print(str(e), file=sys.stderr)
        return 2
    event = _load_event(args.event)

    matched = should_trigger(config, event.branch, event)
    files = changed_files(event)
    print(
        f"{event.owner}/{event.repo}:{event.branch} "
        f"({len(files)} changed files) -> {'trigger' if matched else 'skip'}"
    )
    return 0 if matched else 1


def _render_job(args: argparse.Namespace) -> int:
    script = render_pipeline_script(args.owner, args.repo, args.branch, args.entry_point)
    print(f"# job: {job_identity(args.owner, args.repo, args.branch)}")
    print(render_job_config(script), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "evaluate":
        return _evaluate(args)
    if args.command == "render-job":
        return _render_job(args)

    try:
        if args.command == "serve":
            settings: BridgeSettings = ServerSettings()
        else:
            settings = BridgeSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "serve":
        import uvicorn

        assert isinstance(settings, ServerSettings)
        uvicorn.run(
            create_app(settings),
            host=args.host or settings.host,
            port=args.port or settings.port,
            log_config=None,
        )
        return 0

    if args.command == "handle-event":
        handler = build_push_handler(settings)
        result = handler.handle(_load_event(args.event))
        log_result(result)
        print(f"{result.outcome.value}: {result.message}")
        return 0 if result.ok else 1

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
