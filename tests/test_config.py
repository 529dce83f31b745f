import logging

import pytest

from cognito_backup.config import ConfigurationError, parse_bool, resolve_config
from cognito_backup.events import BackupEvent

REQUIRED = [
    ("AWS_REGION", "awsRegion"),
    ("COGNITO_USER_POOL_ID", "cognitoUserPoolID"),
    ("COGNITO_REGION", "cognitoRegion"),
    ("S3_BUCKET_NAME", "s3BucketName"),
    ("S3_BUCKET_REGION", "s3BucketRegion"),
    ("KMS_KEY_NAME", "kmsKeyName"),
    ("KMS_REGION", "kmsRegion"),
]


class TestRequiredFields:
    @pytest.mark.parametrize("env_name,alias", REQUIRED)
    def test_missing_field_is_named(self, base_env, logger, env_name, alias):
        del base_env[env_name]
        with pytest.raises(ConfigurationError) as excinfo:
            resolve_config(BackupEvent(), base_env, logger)
        message = str(excinfo.value)
        assert message.startswith(f"{alias} is empty")
        assert f"'{env_name}'" in message

    @pytest.mark.parametrize("env_name,alias", REQUIRED)
    def test_event_supplies_missing_field(self, base_env, logger, env_name, alias):
        del base_env[env_name]
        config = resolve_config(BackupEvent.model_validate({alias: "from-event"}), base_env, logger)
        assert "from-event" in config.model_dump().values()

    def test_env_only_without_event(self, base_env, logger):
        config = resolve_config(None, base_env, logger)
        assert config.aws_region == "eu-west-1"
        assert config.kms_key_id == "alias/backup"
        assert config.backup_prefix == ""

    def test_empty_env_value_counts_as_missing(self, base_env, logger):
        base_env["S3_BUCKET_NAME"] = ""
        with pytest.raises(ConfigurationError, match="s3BucketName is empty"):
            resolve_config(None, base_env, logger)


class TestPrecedence:
    def test_event_overrides_env(self, base_env, logger):
        event = BackupEvent.model_validate({"s3BucketName": "other-bucket", "backupPrefix": "platform"})
        config = resolve_config(event, base_env, logger)
        assert config.s3_bucket_name == "other-bucket"
        assert config.backup_prefix == "platform"

    def test_empty_event_value_falls_back_to_env(self, base_env, logger):
        base_env["BACKUP_PREFIX"] = "env-prefix"
        event = BackupEvent.model_validate({"s3BucketName": "", "backupPrefix": ""})
        config = resolve_config(event, base_env, logger)
        assert config.s3_bucket_name == "backups"
        assert config.backup_prefix == "env-prefix"

    def test_config_is_immutable(self, base_env, logger):
        config = resolve_config(None, base_env, logger)
        with pytest.raises(Exception):
            config.s3_bucket_name = "changed"


class TestWarnings:
    def test_warns_for_empty_env_and_event_values(self, base_env, caplog):
        logger = logging.getLogger("backup_tests.config")
        with caplog.at_level(logging.WARNING, logger=logger.name):
            resolve_config(BackupEvent(), base_env, logger)
        messages = [record.getMessage() for record in caplog.records]
        assert "Environment variable 'BACKUP_PREFIX' is empty" in messages
        assert "Event contains empty awsRegion variable" in messages
        assert "Event contains empty backupPrefix variable" in messages
        assert "rotationEnabled is not specified; rotation will be disabled" in messages

    def test_no_event_warnings_without_event(self, base_env, caplog):
        logger = logging.getLogger("backup_tests.config")
        with caplog.at_level(logging.WARNING, logger=logger.name):
            resolve_config(None, base_env, logger)
        assert not [r for r in caplog.records if r.getMessage().startswith("Event contains")]


class TestRotation:
    def test_disabled_when_unspecified(self, base_env, logger):
        config = resolve_config(BackupEvent(), base_env, logger)
        assert config.rotation_enabled is False
        assert config.rotation_days_limit is None

    def test_disabled_ignores_bad_day_limit(self, base_env, logger):
        base_env["ROTATION_ENABLED"] = "false"
        base_env["ROTATION_DAYS_LIMIT"] = "not-a-number"
        config = resolve_config(None, base_env, logger)
        assert config.rotation_enabled is False

    def test_enabled_from_env(self, base_env, logger):
        base_env["ROTATION_ENABLED"] = "true"
        base_env["ROTATION_DAYS_LIMIT"] = "30"
        config = resolve_config(None, base_env, logger)
        assert config.rotation_enabled is True
        assert config.rotation_days_limit == 30

    def test_event_false_overrides_env_true(self, base_env, logger):
        base_env["ROTATION_ENABLED"] = "true"
        event = BackupEvent.model_validate({"rotationEnabled": False})
        config = resolve_config(event, base_env, logger)
        assert config.rotation_enabled is False

    def test_event_day_limit_overrides_env(self, base_env, logger):
        base_env["ROTATION_ENABLED"] = "1"
        base_env["ROTATION_DAYS_LIMIT"] = "30"
        event = BackupEvent.model_validate({"rotationDaysLimit": 7})
        config = resolve_config(event, base_env, logger)
        assert config.rotation_days_limit == 7

    @pytest.mark.parametrize("limit", ["0", "-3", "seven", ""])
    def test_invalid_env_day_limit(self, base_env, logger, limit):
        base_env["ROTATION_ENABLED"] = "true"
        base_env["ROTATION_DAYS_LIMIT"] = limit
        with pytest.raises(ConfigurationError):
            resolve_config(None, base_env, logger)

    def test_explicit_zero_from_event_is_rejected(self, base_env, logger):
        base_env["ROTATION_DAYS_LIMIT"] = "30"
        event = BackupEvent.model_validate({"rotationEnabled": True, "rotationDaysLimit": 0})
        with pytest.raises(ConfigurationError, match="rotationDaysLimit"):
            resolve_config(event, base_env, logger)

    def test_unparsable_rotation_flag(self, base_env, logger):
        base_env["ROTATION_ENABLED"] = "yes please"
        with pytest.raises(ConfigurationError, match="ROTATION_ENABLED"):
            resolve_config(None, base_env, logger)


class TestParseBool:
    @pytest.mark.parametrize("value", ["1", "t", "T", "true", "TRUE", "True"])
    def test_true_literals(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "f", "F", "false", "FALSE", "False"])
    def test_false_literals(self, value):
        assert parse_bool(value) is False

    def test_rejects_other_values(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")
