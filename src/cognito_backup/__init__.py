"""Encrypted S3 backups of a Cognito user pool."""

from __future__ import annotations

from .config import BackupConfig, ConfigurationError, resolve_config  # noqa: F401
from .handler import invoke, lambda_handler  # noqa: F401
from .orchestrator import BackupOrchestrator  # noqa: F401
