"""Configuration management via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from s3_stage.exceptions import ConfigurationError
from s3_stage.models import ACL, Region

REQUIRED_FIELDS = ("access_key", "secret_key", "region", "bucket", "acl")


class StageConfig(BaseSettings):
    """Settings for the S3 put stage, loaded from S3_STAGE_* variables.

    Required fields default to empty so that :func:`check_config` can report
    every missing value at once when the stage starts.
    """

    model_config = SettingsConfigDict(env_prefix="S3_STAGE_", frozen=True)

    access_key: str = ""
    secret_key: str = ""
    region: Region | None = None
    bucket: str = ""
    acl: ACL | None = None
    endpoint_url: str | None = None
    log_level: str = "INFO"


def missing_fields(config: StageConfig) -> list[str]:
    """Return the names of unset required fields in declared order."""
    missing = []
    for field in REQUIRED_FIELDS:
        value = getattr(config, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


def check_config(config: StageConfig) -> None:
    """Validate that every required field is populated.

    Raises:
        ConfigurationError: Listing all missing fields, comma-separated.
    """
    missing = missing_fields(config)
    if missing:
        raise ConfigurationError(missing)
