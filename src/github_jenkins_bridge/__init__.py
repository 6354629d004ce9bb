"""GitHub to Jenkins push bridge.

Receives GitHub push webhooks and, when the repository's workflow trigger
configuration matches the push:
- provisions a Jenkins pipeline job for the repository/branch
- enqueues a parameterised build for the pushed commit
"""

__version__ = "0.1.0"

from github_jenkins_bridge.bridge.config import BridgeSettings

__all__ = ["__version__", "BridgeSettings"]
