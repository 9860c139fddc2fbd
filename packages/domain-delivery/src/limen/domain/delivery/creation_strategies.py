"""Bounded distribution creation.

Creation is expressed as a fixed sequence of named strategies tried in
order. Each returns a tagged ``CreationOutcome``:

- ``requested_alias``: create alias-less, upsert DNS, then bind the alias.
- ``cdn_domain_only``: serve on the provider domain, reusing the distribution
  an earlier strategy already created.

An alias rejection moves on to the next strategy; any other failure stops
the sequence. The sequence never exceeds ``MAX_CREATION_ATTEMPTS``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from limen.domain.delivery.distribution_config import (
    build_distribution_config,
    caller_reference,
    with_alias,
)
from limen.domain.delivery.ownership import ownership_tags
from limen.foundation.domain.exceptions import AliasRejectedError, ProviderError, ProvisioningError
from limen.infra.observability.instrumentation import start_span

if TYPE_CHECKING:
    from collections.abc import Callable

    from limen.domain.delivery.dns_orchestrator import DNSOrchestrator
    from limen.foundation.domain.delivery_value_objects import Distribution
    from limen.foundation.domain.ports import CDNControlPlanePort

logger = logging.getLogger(__name__)

MAX_CREATION_ATTEMPTS = 3


class CreationStrategyName(StrEnum):
    REQUESTED_ALIAS = "requested_alias"
    CDN_DOMAIN_ONLY = "cdn_domain_only"


class OutcomeKind(StrEnum):
    CREATED = "created"
    ALIAS_REJECTED = "alias_rejected"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CreationOutcome:
    """Tagged result of one creation strategy.

    Attributes:
        kind: What happened.
        strategy: Strategy that produced the outcome.
        distribution: Distribution created (or kept) so far.
        alias: Alias bound, when the strategy bound one.
        dns_change_ref: Change id of the DNS upsert, if any.
        error: Provider error behind a non-created outcome.
    """

    kind: OutcomeKind
    strategy: CreationStrategyName
    distribution: Distribution | None = None
    alias: str | None = None
    dns_change_ref: str | None = None
    error: ProviderError | None = None


@dataclass(slots=True)
class _Attempt:
    tenant_id: str
    alias: str | None
    distribution: Distribution | None = None


class DistributionCreator:
    """Creates a tenant distribution through the named strategy sequence.

    Args:
        cdn: CDN control plane.
        dns: DNS orchestrator used to point the alias at the new distribution.
        origin_bucket: S3 bucket holding tenant content.
        price_class: CloudFront price class.
        certificate_arn: ACM certificate for alias bindings; without one no
            alias is ever bound.
        clock: UTC clock, injected by tests.
    """

    def __init__(
        self,
        cdn: CDNControlPlanePort,
        dns: DNSOrchestrator,
        *,
        origin_bucket: str,
        price_class: str = "PriceClass_100",
        certificate_arn: str | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._cdn = cdn
        self._dns = dns
        self._origin_bucket = origin_bucket
        self._price_class = price_class
        self._certificate_arn = certificate_arn
        self._clock = clock
        self._strategies: dict[
            CreationStrategyName, Callable[[_Attempt], CreationOutcome]
        ] = {
            CreationStrategyName.REQUESTED_ALIAS: self._requested_alias,
            CreationStrategyName.CDN_DOMAIN_ONLY: self._cdn_domain_only,
        }

    @staticmethod
    def plan(alias: str | None) -> tuple[CreationStrategyName, ...]:
        """Strategies to try, in order, for a request with or without an alias."""
        if alias:
            return (CreationStrategyName.REQUESTED_ALIAS, CreationStrategyName.CDN_DOMAIN_ONLY)
        return (CreationStrategyName.CDN_DOMAIN_ONLY,)

    def create(self, tenant_id: str, alias: str | None) -> CreationOutcome:
        """Create a distribution for ``tenant_id``, binding ``alias`` if possible.

        Raises:
            ProvisioningError: When a strategy fails for a reason other than
                an alias rejection, or every strategy was exhausted.
        """
        plan = self.plan(alias)[:MAX_CREATION_ATTEMPTS]
        attempt = _Attempt(tenant_id=tenant_id, alias=alias)
        outcome: CreationOutcome | None = None

        for number, name in enumerate(plan, start=1):
            with start_span(
                "delivery.create_distribution",
                {
                    "tenant.id": tenant_id,
                    "delivery.strategy": str(name),
                    "delivery.attempt": number,
                },
            ):
                outcome = self._strategies[name](attempt)

            if outcome.kind is OutcomeKind.CREATED:
                return outcome
            if outcome.kind is OutcomeKind.FAILED:
                raise ProvisioningError(
                    tenant_id,
                    outcome.error.message if outcome.error else "distribution creation failed",
                    strategy=str(name),
                ) from outcome.error

            logger.warning(
                "distribution_alias_rejected",
                extra={
                    "tenant_id": tenant_id,
                    "alias": alias,
                    "strategy": str(name),
                    "attempt": number,
                    "error": outcome.error.message if outcome.error else None,
                },
            )

        raise ProvisioningError(
            tenant_id,
            "no creation strategy succeeded",
            strategy=str(outcome.strategy) if outcome else None,
        )

    def _create_alias_less(self, attempt: _Attempt) -> Distribution:
        if attempt.distribution is None:
            config = build_distribution_config(
                attempt.tenant_id,
                origin_bucket=self._origin_bucket,
                price_class=self._price_class,
                caller_ref=caller_reference(attempt.tenant_id, self._clock()),
            )
            attempt.distribution = self._cdn.create_distribution(
                config, ownership_tags(attempt.tenant_id)
            )
        return attempt.distribution

    def attach_alias(
        self, tenant_id: str, distribution: Distribution, alias: str | None
    ) -> CreationOutcome:
        """Point ``alias`` at an existing alias-less distribution and bind it.

        DNS is upserted first so the alias already resolves when CloudFront
        validates it. A rejected binding rolls the DNS record back.
        """
        name = CreationStrategyName.REQUESTED_ALIAS
        if not alias or not self._certificate_arn:
            return CreationOutcome(
                OutcomeKind.ALIAS_REJECTED,
                name,
                distribution=distribution,
                error=AliasRejectedError(
                    "cloudfront", "update_distribution", "no certificate configured for aliases"
                ),
            )

        change_ref = self._dns.upsert(tenant_id, distribution.domain_name, alias=alias)

        try:
            config, etag = self._cdn.get_distribution_config(distribution.id)
            bound = self._cdn.update_distribution(
                distribution.id, with_alias(config, alias, self._certificate_arn), etag
            )
        except AliasRejectedError as exc:
            if change_ref is not None:
                self._dns.delete(tenant_id, distribution.domain_name, alias=alias)
            return CreationOutcome(
                OutcomeKind.ALIAS_REJECTED, name, distribution=distribution, error=exc
            )
        except ProviderError as exc:
            return CreationOutcome(OutcomeKind.FAILED, name, distribution=distribution, error=exc)

        return CreationOutcome(
            OutcomeKind.CREATED, name, distribution=bound, alias=alias, dns_change_ref=change_ref
        )

    def _requested_alias(self, attempt: _Attempt) -> CreationOutcome:
        try:
            distribution = self._create_alias_less(attempt)
        except ProviderError as exc:
            return CreationOutcome(
                OutcomeKind.FAILED, CreationStrategyName.REQUESTED_ALIAS, error=exc
            )

        outcome = self.attach_alias(attempt.tenant_id, distribution, attempt.alias)
        if outcome.kind is OutcomeKind.CREATED:
            attempt.distribution = outcome.distribution
        return outcome

    def _cdn_domain_only(self, attempt: _Attempt) -> CreationOutcome:
        name = CreationStrategyName.CDN_DOMAIN_ONLY
        try:
            distribution = self._create_alias_less(attempt)
        except ProviderError as exc:
            return CreationOutcome(OutcomeKind.FAILED, name, error=exc)
        return CreationOutcome(OutcomeKind.CREATED, name, distribution=distribution)
