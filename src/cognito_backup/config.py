from __future__ import annotations

import logging
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from .events import BackupEvent

LOG = logging.getLogger(__name__)

_TRUE_LITERALS = {"1", "t", "true"}
_FALSE_LITERALS = {"0", "f", "false"}


class ConfigurationError(Exception):
    """Raised when the backup configuration is missing or invalid."""


class BackupConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    cognito_user_pool_id: str
    cognito_region: str
    s3_bucket_name: str
    s3_bucket_region: str
    kms_key_id: str
    kms_region: str
    backup_prefix: str = ""
    rotation_enabled: bool = False
    rotation_days_limit: Optional[int] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "BackupConfig":
        for name in (
            "aws_region",
            "cognito_user_pool_id",
            "cognito_region",
            "s3_bucket_name",
            "s3_bucket_region",
            "kms_key_id",
            "kms_region",
        ):
            if not getattr(self, name):
                raise ValueError(f"{name} must not be empty")
        if self.rotation_enabled and (self.rotation_days_limit is None or self.rotation_days_limit <= 0):
            raise ValueError("rotation_days_limit must be a positive integer when rotation is enabled")
        return self


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_LITERALS:
        return True
    if lowered in _FALSE_LITERALS:
        return False
    raise ValueError(f"invalid boolean literal {value!r}")


class _Resolver:
    """Merges environment and event values field by field, logging every gap."""

    def __init__(self, event: Optional[BackupEvent], env: Mapping[str, str], logger: logging.Logger) -> None:
        self._event = event
        self._env = env
        self._log = logger

    def string(self, attr: str, env_name: str, *, required: bool = True) -> str:
        alias = BackupEvent.alias_for(attr)
        value = self._env.get(env_name, "")
        if not value:
            self._log.warning("Environment variable '%s' is empty", env_name)

        if self._event is not None:
            event_value = getattr(self._event, attr) or ""
            if event_value:
                value = event_value
            else:
                self._log.warning("Event contains empty %s variable", alias)

        if required and not value:
            raise ConfigurationError(
                f"{alias} is empty; configure it via '{env_name}' env variable OR pass in event body"
            )
        return value

    def rotation_enabled(self) -> bool:
        enabled: Optional[bool] = None
        raw = self._env.get("ROTATION_ENABLED", "")
        if raw:
            try:
                enabled = parse_bool(raw)
            except ValueError as exc:
                raise ConfigurationError(f"Could not parse 'ROTATION_ENABLED' variable: {exc}") from exc
        else:
            self._log.warning("Environment variable 'ROTATION_ENABLED' is empty")

        if self._event is not None:
            if self._event.rotation_enabled is not None:
                enabled = self._event.rotation_enabled
            else:
                self._log.warning("Event contains empty rotationEnabled variable")

        if enabled is None:
            self._log.warning("rotationEnabled is not specified; rotation will be disabled")
            return False
        return enabled

    def rotation_days_limit(self) -> int:
        limit: Optional[int] = None
        raw = self._env.get("ROTATION_DAYS_LIMIT", "")
        if raw:
            try:
                limit = int(raw.strip())
            except ValueError as exc:
                raise ConfigurationError(f"Could not parse 'ROTATION_DAYS_LIMIT' variable: {exc}") from exc
        else:
            self._log.warning("Environment variable 'ROTATION_DAYS_LIMIT' is empty")

        if self._event is not None:
            if self._event.rotation_days_limit is not None:
                limit = self._event.rotation_days_limit
            else:
                self._log.warning("Event contains empty rotationDaysLimit variable")

        if limit is None or limit <= 0:
            raise ConfigurationError(
                "rotationDaysLimit should be greater than 0; configure it via 'ROTATION_DAYS_LIMIT' "
                "env variable OR pass in event body"
            )
        return limit


def resolve_config(
    event: Optional[BackupEvent],
    env: Mapping[str, str],
    logger: Optional[logging.Logger] = None,
) -> BackupConfig:
    """Build the configuration for one invocation.

    A non-empty event field wins over the environment; an empty or missing one
    falls back to it. The first required field left empty by both sources
    raises ``ConfigurationError``.
    """
    resolver = _Resolver(event, env, logger or LOG)

    values = {
        "aws_region": resolver.string("aws_region", "AWS_REGION"),
        "cognito_user_pool_id": resolver.string("cognito_user_pool_id", "COGNITO_USER_POOL_ID"),
        "cognito_region": resolver.string("cognito_region", "COGNITO_REGION"),
        "s3_bucket_name": resolver.string("s3_bucket_name", "S3_BUCKET_NAME"),
        "s3_bucket_region": resolver.string("s3_bucket_region", "S3_BUCKET_REGION"),
        "backup_prefix": resolver.string("backup_prefix", "BACKUP_PREFIX", required=False),
    }

    rotation_enabled = resolver.rotation_enabled()
    values["rotation_enabled"] = rotation_enabled
    if rotation_enabled:
        values["rotation_days_limit"] = resolver.rotation_days_limit()

    values["kms_key_id"] = resolver.string("kms_key_id", "KMS_KEY_NAME")
    values["kms_region"] = resolver.string("kms_region", "KMS_REGION")

    return BackupConfig(**values)
