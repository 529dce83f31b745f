from __future__ import annotations

from typing import Optional

from botocore.exceptions import ClientError


class BackupError(Exception):
    """Raised by backup steps to signal a failed invocation."""


class ClientCreationError(BackupError):
    """Raised when the AWS service clients cannot be built."""


class DirectoryListingError(BackupError):
    """Raised when users or groups cannot be listed from the user pool."""


class SerializationError(BackupError):
    """Raised when a directory listing cannot be encoded as JSON."""


class EncryptionError(BackupError):
    """Raised when KMS refuses to encrypt a snapshot."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        if code:
            message = f"{message} (code: {code})"
        super().__init__(message)
        self.code = code


class UploadError(BackupError):
    """Raised when an encrypted snapshot cannot be written to S3."""


class RetentionError(BackupError):
    """Raised when the backup bucket cannot be listed for rotation."""


def aws_error_code(exc: BaseException) -> Optional[str]:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None
