from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import BackupConfig
from .errors import ClientCreationError

LOG = logging.getLogger(__name__)

# Retrying is left to the platform's redrive policy.
_BOTO_CONFIG = BotoConfig(retries={"total_max_attempts": 1, "mode": "standard"})


@dataclass
class AWSClients:
    cognito: Any
    kms: Any
    s3: Any


ClientFactory = Callable[[BackupConfig], AWSClients]


def create_clients(config: BackupConfig, session: Optional[boto3.session.Session] = None) -> AWSClients:
    """Build Cognito, KMS and S3 clients, each bound to its configured region."""
    session = session or boto3.session.Session()
    try:
        clients = AWSClients(
            cognito=session.client("cognito-idp", region_name=config.cognito_region, config=_BOTO_CONFIG),
            kms=session.client("kms", region_name=config.kms_region, config=_BOTO_CONFIG),
            s3=session.client("s3", region_name=config.s3_bucket_region, config=_BOTO_CONFIG),
        )
    except (BotoCoreError, ClientError) as exc:
        raise ClientCreationError(f"Could not create AWS client: {exc}") from exc

    LOG.debug(
        "AWS clients ready (cognito=%s, kms=%s, s3=%s)",
        config.cognito_region,
        config.kms_region,
        config.s3_bucket_region,
    )
    return clients
