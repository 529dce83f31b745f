from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .clients import AWSClients
from .config import BackupConfig
from .directory import RESOURCE_KINDS, CognitoDirectory
from .encryption import KmsEncryptor, serialize_snapshot
from .errors import (
    DirectoryListingError,
    EncryptionError,
    RetentionError,
    SerializationError,
    UploadError,
    aws_error_code,
)
from .retention import enforce_retention
from .storage import S3BackupStore, get_key_name

LOG = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render an RFC3339 timestamp with second precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class BackupResult:
    timestamp: str
    written_keys: List[str] = field(default_factory=list)
    deleted_keys: List[str] = field(default_factory=list)


class BackupOrchestrator:
    """Backs up users then groups, and rotates old backups when enabled."""

    def __init__(
        self,
        directory: CognitoDirectory,
        encryptor: KmsEncryptor,
        store: S3BackupStore,
        logger: Optional[logging.Logger] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._directory = directory
        self._encryptor = encryptor
        self._store = store
        self._log = logger or LOG
        self._clock = clock

    @classmethod
    def from_clients(
        cls,
        clients: AWSClients,
        config: BackupConfig,
        logger: Optional[logging.Logger] = None,
        clock: Clock = utc_now,
    ) -> "BackupOrchestrator":
        return cls(
            directory=CognitoDirectory(clients.cognito),
            encryptor=KmsEncryptor(clients.kms),
            store=S3BackupStore(client=clients.s3, bucket=config.s3_bucket_name),
            logger=logger,
            clock=clock,
        )

    def run(self, config: BackupConfig) -> BackupResult:
        result = BackupResult(timestamp=format_timestamp(self._clock()))

        for kind in RESOURCE_KINDS:
            key = self._backup(kind, config, result.timestamp)
            result.written_keys.append(key)

        if config.rotation_enabled:
            result.deleted_keys = self._rotate(config)
        else:
            self._log.warning(
                "Rotation is disabled; enable it via the ROTATION_ENABLED env variable or the event body"
            )
        return result

    def _backup(self, kind: str, config: BackupConfig, timestamp: str) -> str:
        try:
            listing = self._directory.list(kind, config.cognito_user_pool_id)
        except Exception as exc:  # noqa: BLE001
            raise DirectoryListingError(f"Failed to get list of cognito {kind}: {exc}") from exc

        try:
            payload = serialize_snapshot(listing)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Failed to serialize cognito {kind}: {exc}") from exc

        try:
            ciphertext = self._encryptor.encrypt(config.kms_key_id, payload)
        except Exception as exc:  # noqa: BLE001
            code = aws_error_code(exc)
            self._log.error("KMS encryption of cognito %s failed: %s", kind, exc)
            raise EncryptionError(f"Failed to encrypt cognito {kind}: {exc}", code=code) from exc

        key = get_key_name(config.backup_prefix, timestamp, f"{kind}.json")
        try:
            self._store.put_backup(key, ciphertext)
        except Exception as exc:  # noqa: BLE001
            raise UploadError(f"Failed to upload cognito {kind} backup to S3: {exc}") from exc

        self._log.info("Cognito %s backed up to s3://%s/%s", kind, self._store.bucket, key)
        return key

    def _rotate(self, config: BackupConfig) -> List[str]:
        limit = config.rotation_days_limit or 0
        try:
            return enforce_retention(self._store, limit, now=self._clock(), logger=self._log)
        except Exception as exc:  # noqa: BLE001
            raise RetentionError(f"Rotation has failed: {exc}") from exc
