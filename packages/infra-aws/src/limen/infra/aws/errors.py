"""Translation of botocore failures into domain exceptions.

Adapters wrap every SDK call in :func:`translate_errors` so that domain
services only ever see ``DomainError`` subclasses:

- ``NotFoundError`` for missing distributions, zones and changes
- ``AliasRejectedError`` when CloudFront refuses an alternate domain name
- ``ProviderError`` for everything else, flagged transient when retrying
  the whole call is expected to help
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from limen.foundation.domain.exceptions import (
    AliasRejectedError,
    NotFoundError,
    ProviderError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

# Error code -> resource type reported by NotFoundError
NOT_FOUND_CODES: dict[str, str] = {
    "NoSuchDistribution": "Distribution",
    "NoSuchResource": "Distribution",
    "NoSuchHostedZone": "HostedZone",
    "NoSuchChange": "DNSChange",
}

ALIAS_REJECTED_CODES: frozenset[str] = frozenset(
    {
        "CNAMEAlreadyExists",
        "InvalidViewerCertificate",
        "TooManyDistributionCNAMEs",
    }
)

# InvalidArgument is also returned for alias/DNS validation failures;
# only its message tells them apart.
_ALIAS_MESSAGE_MARKERS = ("cname", "alternate domain", "dns record")

TRANSIENT_CODES: frozenset[str] = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "PriorRequestNotComplete",
        "ServiceUnavailable",
        "InternalError",
        "InternalFailure",
        "TooManyInvalidationsInProgress",
    }
)


def translate_client_error(
    exc: ClientError,
    provider: str,
    operation: str,
    **context: Any,
) -> ProviderError | NotFoundError:
    """Map a ``ClientError`` onto the domain exception hierarchy.

    Args:
        exc: The botocore client error.
        provider: Logical provider name for diagnostics.
        operation: SDK operation that failed.
        **context: Identifiers to attach (e.g. distribution_id).

    Returns:
        The translated exception, ready to be raised.
    """
    error = exc.response.get("Error", {})
    code = error.get("Code", "ClientError")
    message = error.get("Message", str(exc))

    if code in NOT_FOUND_CODES:
        resource_id = next(iter(context.values()), "unknown")
        return NotFoundError(NOT_FOUND_CODES[code], str(resource_id), provider_code=code)

    is_alias_argument = code == "InvalidArgument" and any(
        marker in message.lower() for marker in _ALIAS_MESSAGE_MARKERS
    )
    if code in ALIAS_REJECTED_CODES or is_alias_argument:
        return AliasRejectedError(provider, operation, message, provider_code=code, **context)

    return ProviderError(
        provider,
        operation,
        message,
        provider_code=code,
        transient=code in TRANSIENT_CODES,
        **context,
    )


@contextmanager
def translate_errors(provider: str, operation: str, **context: Any) -> Iterator[None]:
    """Re-raise botocore errors raised in the block as domain exceptions.

    Example:
        >>> with translate_errors("cloudfront", "get_distribution", distribution_id="E1"):
        ...     client.get_distribution(Id="E1")
    """
    try:
        yield
    except ClientError as exc:
        raise translate_client_error(exc, provider, operation, **context) from exc
    except BotoCoreError as exc:
        # Connection failures, read timeouts and exhausted retries
        raise ProviderError(provider, operation, str(exc), transient=True, **context) from exc
