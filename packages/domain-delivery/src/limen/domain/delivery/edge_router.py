"""Viewer-request routing from hostname to tenant origin path.

Runs at the edge for every request, so it does no I/O and keeps no state.
``route_request`` and ``handle_viewer_request`` are total: any malformed
input routes to the tenant not-found document instead of raising.

Tenants are resolved from either:

- a subdomain of the base domain (``acme.example.com``), or
- a path prefix on the CloudFront domain
  (``d111.cloudfront.net/tenant-acme/about.html``).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from limen.domain.delivery.settings import get_delivery_settings

logger = logging.getLogger(__name__)

RESERVED_SUBDOMAINS = frozenset({"www", "api", "admin", "cdn", "mail"})
TENANT_LABEL_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")
TENANT_PATH_PATTERN = re.compile(r"^/tenant-([a-zA-Z0-9-]+)(/.*)?$")
MIN_LABEL_LENGTH = 3
MAX_LABEL_LENGTH = 63

PROVIDER_DOMAIN_SUFFIX = ".cloudfront.net"
NOT_FOUND_DOCUMENT = "/error/tenant-not-found.html"
TENANT_CACHE_CONTROL = "public, max-age=300"
BASE_DOMAIN_HEADER = "x-domain-base"


@dataclass(frozen=True, slots=True)
class RoutingDecision:
    """Where a viewer request goes.

    Attributes:
        tenant_id: Resolved tenant, or None for the not-found document.
        rewritten_path: Origin-relative URI.
        injected_headers: Headers to add, keyed by canonical header name.
    """

    tenant_id: str | None
    rewritten_path: str
    injected_headers: dict[str, str] = field(default_factory=dict)


def is_valid_tenant_label(label: str) -> bool:
    return (
        label not in RESERVED_SUBDOMAINS
        and MIN_LABEL_LENGTH <= len(label) <= MAX_LABEL_LENGTH
        and TENANT_LABEL_PATTERN.match(label) is not None
    )


def _normalize_host(host: Any) -> str:
    if not isinstance(host, str):
        return ""
    return host.strip().lower().split(":", 1)[0].rstrip(".")


def _normalize_uri(uri: str) -> str:
    if uri in ("", "/"):
        return "/index.html"
    if not uri.startswith("/"):
        return f"/{uri}"
    return uri


def route_request(host: Any, uri: Any, base_domain: str | None = None) -> RoutingDecision:
    """Map an inbound host and URI onto a tenant origin path.

    Args:
        host: ``Host`` header value.
        uri: Request URI (path only).
        base_domain: Base domain for subdomain routing.

    Returns:
        The routing decision.
    """
    hostname = _normalize_host(host)
    path = uri if isinstance(uri, str) else ""
    domain = base_domain.strip().strip(".").lower() if isinstance(base_domain, str) else ""

    tenant_id: str | None = None
    if domain and hostname.endswith(f".{domain}"):
        candidate = hostname[: -(len(domain) + 1)]
        if is_valid_tenant_label(candidate):
            tenant_id = candidate
    elif hostname.endswith(PROVIDER_DOMAIN_SUFFIX):
        match = TENANT_PATH_PATTERN.match(path)
        if match:
            candidate = match.group(1).lower()
            if is_valid_tenant_label(candidate):
                tenant_id = candidate
                path = match.group(2) or "/"

    if tenant_id is None:
        return RoutingDecision(tenant_id=None, rewritten_path=NOT_FOUND_DOCUMENT)

    path = _normalize_uri(path)
    return RoutingDecision(
        tenant_id=tenant_id,
        rewritten_path=f"/tenants/{tenant_id}/deployments/current{path}",
        injected_headers={
            "X-Tenant-Id": tenant_id,
            "X-Original-Host": hostname,
            "X-Original-Uri": path,
            "Cache-Control": TENANT_CACHE_CONTROL,
        },
    )


def _header_value(headers: Any, name: str) -> str | None:
    try:
        return headers[name][0]["value"]
    except (KeyError, IndexError, TypeError):
        return None


def _viewer_request(event: Any) -> dict[str, Any] | None:
    try:
        request = event["Records"][0]["cf"]["request"]
    except (KeyError, IndexError, TypeError):
        return None
    return request if isinstance(request, dict) else None


def handle_viewer_request(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """Lambda@Edge viewer-request handler.

    Rewrites ``uri`` and adds the routing headers in CloudFront's
    ``{"lowercase-name": [{"key": ..., "value": ...}]}`` shape. All other
    request fields pass through unchanged. An event without a request
    yields a bare request for the not-found document.

    Lambda@Edge functions get no environment variables, so at the edge the
    base domain comes only from the ``X-Domain-Base`` origin custom header.
    The ``DELIVERY_BASE_DOMAIN`` fallback applies when the handler runs
    elsewhere, such as in tests or a local viewer proxy.
    """
    request = _viewer_request(event)
    if request is None:
        logger.warning("edge_event_malformed")
        return {"uri": NOT_FOUND_DOCUMENT, "headers": {}}

    headers = request.get("headers")
    if not isinstance(headers, dict):
        headers = request["headers"] = {}

    base_domain = (
        _header_value(headers, BASE_DOMAIN_HEADER) or get_delivery_settings().base_domain
    )
    decision = route_request(
        _header_value(headers, "host"), request.get("uri", ""), base_domain
    )

    request["uri"] = decision.rewritten_path
    for name, value in decision.injected_headers.items():
        headers[name.lower()] = [{"key": name, "value": value}]

    if decision.tenant_id is None:
        logger.debug("edge_tenant_not_found", extra={"uri": decision.rewritten_path})
    return request
