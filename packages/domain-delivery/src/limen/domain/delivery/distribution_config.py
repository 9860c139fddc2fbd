"""CloudFront ``DistributionConfig`` builders for tenant distributions.

Each tenant gets a single S3 origin rooted at ``/tenants/{tenant_id}``.
Deployments live under ``deployments/{build_id}`` with ``deployments/current``
always pointing at the live build, which is why error responses and cache
invalidations target the ``current`` prefix.
"""

from __future__ import annotations

import copy
import secrets
import string
from typing import TYPE_CHECKING, Any

from limen.domain.delivery.ownership import ownership_comment, tenant_origin_path

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

CURRENT_INDEX_DOCUMENT = "/deployments/current/index.html"
ERROR_CACHING_MIN_TTL = 300
MIN_PROTOCOL_VERSION = "TLSv1.2_2021"

_BASE36 = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def _epoch_millis(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def caller_reference(tenant_id: str, now: datetime) -> str:
    return f"tenant-{tenant_id}-{_epoch_millis(now)}"


def unique_token(tenant_id: str, now: datetime) -> str:
    """Opaque per-distribution token ``{tenant[:8]}-{base36 millis}-{6 random}``."""
    random_part = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{tenant_id[:8]}-{_base36(_epoch_millis(now))}-{random_part}"


def _methods(*methods: str) -> dict[str, Any]:
    return {"Quantity": len(methods), "Items": list(methods)}


def _error_response(code: int) -> dict[str, Any]:
    return {
        "ErrorCode": code,
        "ResponsePagePath": CURRENT_INDEX_DOCUMENT,
        "ResponseCode": "200",
        "ErrorCachingMinTTL": ERROR_CACHING_MIN_TTL,
    }


def build_distribution_config(
    tenant_id: str,
    *,
    origin_bucket: str,
    price_class: str,
    caller_ref: str,
) -> dict[str, Any]:
    """Alias-less distribution config for ``tenant_id``.

    Args:
        tenant_id: Owning tenant.
        origin_bucket: S3 bucket holding tenant content.
        price_class: CloudFront price class.
        caller_ref: Idempotency token for the create call.

    Returns:
        A ``DistributionConfig`` mapping.
    """
    origin_id = f"{tenant_id}-s3-origin"
    return {
        "CallerReference": caller_ref,
        "Comment": ownership_comment(tenant_id),
        "Enabled": True,
        "PriceClass": price_class,
        "Aliases": {"Quantity": 0},
        "Origins": {
            "Quantity": 1,
            "Items": [
                {
                    "Id": origin_id,
                    "DomainName": f"{origin_bucket}.s3.amazonaws.com",
                    "OriginPath": tenant_origin_path(tenant_id),
                    "CustomOriginConfig": {
                        "HTTPPort": 80,
                        "HTTPSPort": 443,
                        "OriginProtocolPolicy": "https-only",
                        "OriginSslProtocols": _methods("TLSv1.2"),
                    },
                }
            ],
        },
        "DefaultCacheBehavior": {
            "TargetOriginId": origin_id,
            "ViewerProtocolPolicy": "redirect-to-https",
            "Compress": True,
            "MinTTL": 0,
            "DefaultTTL": 86400,
            "MaxTTL": 31536000,
            "AllowedMethods": {
                **_methods("GET", "HEAD"),
                "CachedMethods": _methods("GET", "HEAD"),
            },
            "ForwardedValues": {
                "QueryString": False,
                "Cookies": {"Forward": "none"},
            },
            "TrustedSigners": {"Enabled": False, "Quantity": 0},
        },
        "CustomErrorResponses": {
            "Quantity": 2,
            "Items": [_error_response(404), _error_response(403)],
        },
        "ViewerCertificate": {"CloudFrontDefaultCertificate": True},
    }


def with_alias(
    config: Mapping[str, Any], alias: str, certificate_arn: str
) -> dict[str, Any]:
    """Copy of ``config`` bound to ``alias`` with an SNI ACM certificate."""
    updated = copy.deepcopy(dict(config))
    updated["Aliases"] = {"Quantity": 1, "Items": [alias]}
    updated["ViewerCertificate"] = {
        "ACMCertificateArn": certificate_arn,
        "SSLSupportMethod": "sni-only",
        "MinimumProtocolVersion": MIN_PROTOCOL_VERSION,
    }
    return updated


def with_enabled(config: Mapping[str, Any], enabled: bool) -> dict[str, Any]:
    updated = copy.deepcopy(dict(config))
    updated["Enabled"] = enabled
    return updated
