from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List

PRODUCER_TAG = "cognito-backup"


@dataclass(frozen=True)
class StoredObject:
    key: str
    last_modified: datetime


@dataclass
class S3BackupStore:
    """Stores encrypted snapshots in an S3 bucket."""

    client: Any
    bucket: str

    def put_backup(self, key: str, body: bytes) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            ACL="private",
            Body=body,
            ContentDisposition="attachment",
            ServerSideEncryption="AES256",
            Tagging=f"producer={PRODUCER_TAG}",
        )

    def list_objects(self) -> List[StoredObject]:
        paginator = self.client.get_paginator("list_objects_v2")
        objects: List[StoredObject] = []
        for page in paginator.paginate(Bucket=self.bucket):
            for item in page.get("Contents", []):
                objects.append(StoredObject(key=item["Key"], last_modified=item["LastModified"]))
        return objects

    def delete_object(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)


def get_key_name(prefix: str, timestamp: str, name: str) -> str:
    if not prefix:
        return f"{timestamp}/{name}"
    return f"{prefix}/{timestamp}/{name}"
