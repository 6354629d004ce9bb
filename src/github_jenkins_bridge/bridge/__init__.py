"""Push-to-build bridge components.

- Settings loaded from .env
- Structured logging
- Trigger evaluation against the repository's workflow file
- Jenkins job provisioning and build triggering
"""
