"""FastAPI server adapter for github-jenkins-bridge.

This module exposes the GitHub webhook endpoint over the bridge services.

Design intent:
- Keep push handling in `github_jenkins_bridge.bridge.*`
- Keep server-specific concerns (routing, signatures) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from github_jenkins_bridge.server.app import create_app
