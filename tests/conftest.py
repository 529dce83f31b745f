from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cognito_backup.clients import AWSClients

FIXED_NOW = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


def client_error(code: str, operation: str = "Operation", message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def paginating_client(pages_by_operation: Dict[str, List[Dict[str, Any]]]) -> MagicMock:
    """Mock boto3 client whose paginators yield the given pages per operation."""
    client = MagicMock()

    def _get_paginator(operation: str) -> MagicMock:
        paginator = MagicMock()
        paginator.paginate.return_value = iter(pages_by_operation.get(operation, []))
        return paginator

    client.get_paginator.side_effect = _get_paginator
    return client


@pytest.fixture
def base_env() -> Dict[str, str]:
    return {
        "AWS_REGION": "eu-west-1",
        "COGNITO_USER_POOL_ID": "eu-west-1_pool",
        "COGNITO_REGION": "eu-west-1",
        "S3_BUCKET_NAME": "backups",
        "S3_BUCKET_REGION": "eu-west-1",
        "KMS_KEY_NAME": "alias/backup",
        "KMS_REGION": "eu-west-1",
    }


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("backup_tests")


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def aws_clients() -> AWSClients:
    cognito = paginating_client(
        {
            "list_users": [
                {"Users": [{"Username": "alice", "UserCreateDate": FIXED_NOW}]},
                {"Users": [{"Username": "bob", "UserCreateDate": FIXED_NOW}]},
            ],
            "list_groups": [{"Groups": [{"GroupName": "admins"}]}],
        }
    )
    kms = MagicMock()
    kms.encrypt.side_effect = lambda KeyId, Plaintext: {"CiphertextBlob": b"enc:" + Plaintext}
    s3 = paginating_client({"list_objects_v2": []})
    return AWSClients(cognito=cognito, kms=kms, s3=s3)
