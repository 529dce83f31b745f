from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any


class KmsEncryptor:
    """Encrypts snapshot payloads with a KMS key."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def encrypt(self, key_id: str, plaintext: bytes) -> bytes:
        response = self._client.encrypt(KeyId=key_id, Plaintext=plaintext)
        return response["CiphertextBlob"]


def serialize_snapshot(listing: Any) -> bytes:
    """Encode a directory listing as UTF-8 JSON.

    Cognito returns ``datetime`` values for creation and modification dates;
    these are written as ISO-8601 strings. Anything else that JSON cannot
    represent raises ``TypeError``.
    """
    return json.dumps(listing, default=_json_default, ensure_ascii=False).encode("utf-8")


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
