"""Invocation payload and response models."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BackupEvent(BaseModel):
    """Optional per-invocation overrides for the environment configuration.

    Booleans and the day limit are tri-state: ``None`` means the caller did not
    provide a value, which is different from an explicit ``False`` or ``0``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    aws_region: Optional[str] = Field(default=None, alias="awsRegion")
    cognito_user_pool_id: Optional[str] = Field(default=None, alias="cognitoUserPoolID")
    cognito_region: Optional[str] = Field(default=None, alias="cognitoRegion")
    s3_bucket_name: Optional[str] = Field(default=None, alias="s3BucketName")
    s3_bucket_region: Optional[str] = Field(default=None, alias="s3BucketRegion")
    kms_key_id: Optional[str] = Field(default=None, alias="kmsKeyName")
    kms_region: Optional[str] = Field(default=None, alias="kmsRegion")
    backup_prefix: Optional[str] = Field(default=None, alias="backupPrefix")
    rotation_enabled: Optional[bool] = Field(default=None, alias="rotationEnabled")
    rotation_days_limit: Optional[int] = Field(default=None, alias="rotationDaysLimit")

    @classmethod
    def alias_for(cls, attr: str) -> str:
        return cls.model_fields[attr].alias or attr


class BackupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    message: str = Field(alias="answer")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
