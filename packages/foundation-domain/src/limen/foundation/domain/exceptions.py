"""Domain exception hierarchy for type-safe error handling.

This module provides the base exception hierarchy for all domain errors.
Exceptions include structured error codes and context for consistent
API error handling and logging across bounded contexts.

Remote control plane failures (CDN, DNS) are surfaced as ``ProviderError``
so that domain services never depend on a vendor SDK's exception types.

Example:
    >>> from limen.foundation.domain.exceptions import NotFoundError
    >>> raise NotFoundError("Distribution", "E2QWRUHAPOMQZL")
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "AliasRejectedError",
    "DomainError",
    "NotFoundError",
    "ProviderError",
    "ProvisioningError",
    "ValidationError",
]


class DomainError(Exception):
    """Base class for all domain errors.

    Provides error code and structured context for debugging. All domain
    exceptions inherit from this class to enable consistent API error
    handling and logging.

    Attributes:
        error_code: Machine-readable error code for client handling.
        message: Human-readable error description.
        context: Structured debugging information (tenant ids, resource ids).

    Example:
        >>> raise DomainError("Operation failed", context={"tenant_id": "acme"})
        DomainError: Operation failed (tenant_id=acme)
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize domain error with message and optional context.

        Args:
            message: Human-readable error description.
            context: Structured debugging information. Keys should be snake_case.
                     Values are typically strings or primitive types.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation including context for logging."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist.

    Maps to HTTP 404 Not Found. Use when a record lookup fails or the
    provider reports that a remote resource is gone.

    Attributes:
        error_code: "RESOURCE_NOT_FOUND" (class constant).
        resource_type: Type of missing resource.
        resource_id: Identifier of missing resource.

    Example:
        >>> raise NotFoundError("Distribution", "E2QWRUHAPOMQZL")
        NotFoundError: Distribution not found: E2QWRUHAPOMQZL
    """

    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        **extra_context: Any,
    ) -> None:
        """Initialize not found error.

        Args:
            resource_type: Type of resource (e.g., "Distribution", "TenantDistribution").
            resource_id: Identifier of missing resource.
            **extra_context: Additional debugging context (e.g., tenant_id).
        """
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type} not found: {resource_id}"
        context = {
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            **extra_context,
        }
        super().__init__(message, context)


class ValidationError(DomainError):
    """Raised when input fails domain validation rules.

    Maps to HTTP 422 Unprocessable Entity.

    Attributes:
        error_code: "VALIDATION_ERROR" (class constant).
        field: Field path that failed validation.
        reason: Human-readable validation failure reason.

    Example:
        >>> raise ValidationError("tenant_id", "Label 'www' is reserved")
        ValidationError: Validation failed for 'tenant_id': Label 'www' is reserved
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        field: str,
        reason: str,
        **extra_context: Any,
    ) -> None:
        """Initialize validation error.

        Args:
            field: Field path that failed validation.
            reason: Human-readable validation failure reason.
            **extra_context: Additional debugging context.
        """
        self.field = field
        self.reason = reason
        message = f"Validation failed for '{field}': {reason}"
        context = {
            "field": field,
            "reason": reason,
            **extra_context,
        }
        super().__init__(message, context)


class ProviderError(DomainError):
    """Raised when a remote control plane call fails.

    Maps to HTTP 502 Bad Gateway. Adapters translate vendor SDK errors
    into this type, keeping the vendor error code for diagnostics.

    Attributes:
        error_code: "PROVIDER_ERROR" (class constant).
        provider: Logical provider name (e.g., "cloudfront", "route53").
        operation: Provider operation that failed (e.g., "create_distribution").
        provider_code: Vendor error code, if one was returned.
        transient: Whether retrying the whole call may succeed.

    Example:
        >>> raise ProviderError(
        ...     "cloudfront",
        ...     "list_distributions",
        ...     "Rate exceeded",
        ...     provider_code="Throttling",
        ...     transient=True,
        ... )
    """

    error_code: str = "PROVIDER_ERROR"

    def __init__(
        self,
        provider: str,
        operation: str,
        reason: str,
        *,
        provider_code: str | None = None,
        transient: bool = False,
        **extra_context: Any,
    ) -> None:
        """Initialize provider error.

        Args:
            provider: Logical provider name.
            operation: Operation that failed.
            reason: Human-readable failure description.
            provider_code: Vendor error code, if any.
            transient: Whether the failure is expected to be temporary.
            **extra_context: Additional debugging context (e.g., distribution_id).
        """
        self.provider = provider
        self.operation = operation
        self.reason = reason
        self.provider_code = provider_code
        self.transient = transient
        message = f"{provider} {operation} failed: {reason}"
        context: dict[str, Any] = {
            "provider": provider,
            "operation": operation,
            **extra_context,
        }
        if provider_code is not None:
            context["provider_code"] = provider_code
        super().__init__(message, context)


class AliasRejectedError(ProviderError):
    """Raised when the CDN refuses to bind a hostname alias.

    Covers an alias already claimed by another distribution, a certificate
    that does not cover the alias, and DNS validation mismatches. Callers
    treat this as recoverable by serving without the alias.

    Attributes:
        error_code: "ALIAS_REJECTED" (class constant).
    """

    error_code: str = "ALIAS_REJECTED"


class ProvisioningError(DomainError):
    """Raised when a tenant distribution could not be created.

    Maps to HTTP 502 Bad Gateway. Raised only for failures unrelated to
    aliasing; alias rejections degrade to serving on the CDN domain.

    Attributes:
        error_code: "PROVISIONING_FAILED" (class constant).
        tenant_id: Tenant whose provisioning failed.

    Example:
        >>> raise ProvisioningError("acme", "Access denied", strategy="cdn_domain_only")
        ProvisioningError: Failed to provision distribution for tenant 'acme': Access denied
    """

    error_code: str = "PROVISIONING_FAILED"

    def __init__(self, tenant_id: str, reason: str, **extra_context: Any) -> None:
        """Initialize provisioning error.

        Args:
            tenant_id: Tenant whose provisioning failed.
            reason: Underlying failure description.
            **extra_context: Additional debugging context (e.g., strategy, attempts).
        """
        self.tenant_id = tenant_id
        self.reason = reason
        message = f"Failed to provision distribution for tenant '{tenant_id}': {reason}"
        context = {"tenant_id": tenant_id, **extra_context}
        super().__init__(message, context)
