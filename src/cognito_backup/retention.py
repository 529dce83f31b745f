from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from .storage import S3BackupStore

LOG = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def age_in_days(last_modified: datetime, now: datetime) -> int:
    if last_modified.tzinfo is None:
        last_modified = last_modified.replace(tzinfo=timezone.utc)
    return int((now - last_modified).total_seconds() // SECONDS_PER_DAY)


def enforce_retention(
    store: S3BackupStore,
    rotation_days_limit: int,
    *,
    now: Optional[datetime] = None,
    logger: Optional[logging.Logger] = None,
) -> List[str]:
    """Delete every object in the bucket that is at least ``rotation_days_limit`` days old.

    The whole bucket is scanned, not only the configured backup prefix. A
    failed listing propagates; a failed delete is logged and skipped.
    Returns the keys that were deleted.
    """
    log = logger or LOG
    now = now or datetime.now(timezone.utc)
    deleted: List[str] = []

    for obj in store.list_objects():
        age = age_in_days(obj.last_modified, now)
        if age < rotation_days_limit:
            log.debug(
                "Object %s is %d days old, below the rotation limit of %d days; keeping it",
                obj.key,
                age,
                rotation_days_limit,
            )
            continue

        log.info(
            "Object %s is %d days old, at or above the rotation limit of %d days; deleting it",
            obj.key,
            age,
            rotation_days_limit,
        )
        try:
            store.delete_object(obj.key)
        except Exception as exc:  # noqa: BLE001
            log.warning("Failed to delete %s from bucket %s: %s", obj.key, store.bucket, exc)
            continue
        log.debug("Object %s deleted from bucket %s", obj.key, store.bucket)
        deleted.append(obj.key)

    return deleted
