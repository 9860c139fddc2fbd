"""AWS client configuration.

Field names line up with the environment variables boto3 itself reads
(``AWS_REGION``, ``AWS_PROFILE``, ``AWS_ENDPOINT_URL``, ``AWS_MAX_ATTEMPTS``,
``AWS_RETRY_MODE``) so that one environment drives both. Credentials are
never modelled here; boto3 resolves them through its default chain.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSSettings(BaseSettings):
    """AWS SDK configuration from environment variables.

    Environment Variables:
        AWS_REGION: Region for regional clients (default: us-east-1)
        AWS_PROFILE: Named profile from the shared credentials file
        AWS_ENDPOINT_URL: Override endpoint (e.g. a local emulator)
        AWS_MAX_ATTEMPTS: Total attempts per call including retries (default: 5)
        AWS_RETRY_MODE: botocore retry mode (default: standard)

    Example:
        >>> settings = AWSSettings()
        >>> settings.region
        'us-east-1'
    """

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # CloudFront viewer certificates must live in us-east-1
    region: str = Field(default="us-east-1", description="AWS region")
    profile: str | None = Field(default=None, description="Named credentials profile")
    endpoint_url: str | None = Field(default=None, description="Endpoint override")
    max_attempts: int = Field(
        default=5, ge=1, le=20, description="Total attempts per call including retries"
    )
    retry_mode: str = Field(
        default="standard",
        pattern="^(legacy|standard|adaptive)$",
        description="botocore retry mode",
    )


@lru_cache(maxsize=1)
def get_aws_settings() -> AWSSettings:
    """Get cached AWSSettings instance.

    Clear cache with ``get_aws_settings.cache_clear()`` for testing.
    """
    return AWSSettings()
