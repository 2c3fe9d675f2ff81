"""CLI command modules.

Commands:
- install / status / teardown / ui: Flyte stack lifecycle (stack.py)
- secrets: Database password management in AWS Secrets Manager
"""

from .secrets import secrets_app
from .stack import install, status, teardown, ui

__all__ = [
    "install",
    "status",
    "teardown",
    "ui",
    "secrets_app",
]
