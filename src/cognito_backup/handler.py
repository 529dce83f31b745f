from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from .clients import ClientFactory, create_clients
from .config import ConfigurationError, resolve_config
from .errors import BackupError
from .events import BackupEvent, BackupResponse
from .logger import LoggingOptions, configure_logging, get_logger
from .orchestrator import BackupOrchestrator, BackupResult, Clock, utc_now

CONFIG_FAILED_MESSAGE = "Backup configuration failed."
FAILED_MESSAGE = "Backup failed."
SUCCEEDED_MESSAGE = "Backup succeeded."

_logging_configured = False


@dataclass
class Invocation:
    response: BackupResponse
    error: Optional[Exception] = None
    result: Optional[BackupResult] = None

    @property
    def success(self) -> bool:
        return self.error is None


def parse_event(payload: Optional[Any]) -> Optional[BackupEvent]:
    if payload is None:
        return None
    if isinstance(payload, BackupEvent):
        return payload
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Event body must be an object, got {type(payload).__name__}")
    try:
        return BackupEvent.model_validate(dict(payload))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid event body: {exc}") from exc


def invoke(
    payload: Optional[Any],
    env: Mapping[str, str],
    *,
    client_factory: ClientFactory = create_clients,
    logger: Optional[logging.Logger] = None,
    clock: Clock = utc_now,
) -> Invocation:
    """Run one backup and report its outcome instead of raising."""
    log = logger or get_logger()
    log.info("Handling backup invocation for event: %s", payload)

    try:
        config = resolve_config(parse_event(payload), env, log)
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)
        return Invocation(response=BackupResponse(message=CONFIG_FAILED_MESSAGE), error=exc)

    try:
        clients = client_factory(config)
        orchestrator = BackupOrchestrator.from_clients(clients, config, logger=log, clock=clock)
        result = orchestrator.run(config)
    except BackupError as exc:
        log.error("Backup failed: %s", exc)
        return Invocation(response=BackupResponse(message=FAILED_MESSAGE), error=exc)

    log.info("Backup %s completed: %s", result.timestamp, ", ".join(result.written_keys))
    return Invocation(response=BackupResponse(message=SUCCEEDED_MESSAGE), result=result)


def lambda_handler(event: Optional[Any], context: Any) -> Dict[str, Any]:  # noqa: ARG001
    """AWS Lambda entrypoint.

    A failed invocation re-raises its cause so the platform records the error.
    """
    global _logging_configured
    if not _logging_configured:
        configure_logging(LoggingOptions.from_env(os.environ))
        _logging_configured = True

    invocation = invoke(event, os.environ)
    if invocation.error is not None:
        raise invocation.error
    return invocation.response.to_payload()
