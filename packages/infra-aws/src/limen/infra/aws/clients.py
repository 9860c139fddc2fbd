"""boto3 client factories.

Clients are created once per process and shared; boto3 clients are
thread-safe, unlike sessions and resources.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import boto3
from botocore.config import Config

from limen.infra.aws.settings import AWSSettings, get_aws_settings


def create_client(service_name: str, settings: AWSSettings | None = None) -> Any:
    """Create a boto3 client with retry configuration applied.

    Args:
        service_name: boto3 service name (e.g. ``"cloudfront"``).
        settings: Optional AWSSettings. If None, loads from environment.

    Returns:
        A low-level boto3 client.
    """
    if settings is None:
        settings = get_aws_settings()
    session = boto3.session.Session(
        region_name=settings.region,
        profile_name=settings.profile,
    )
    return session.client(
        service_name,
        endpoint_url=settings.endpoint_url,
        config=Config(
            retries={"max_attempts": settings.max_attempts, "mode": settings.retry_mode},
        ),
    )


@lru_cache(maxsize=1)
def get_cloudfront_client() -> Any:
    """Process-wide CloudFront client."""
    return create_client("cloudfront")


@lru_cache(maxsize=1)
def get_route53_client() -> Any:
    """Process-wide Route 53 client."""
    return create_client("route53")
