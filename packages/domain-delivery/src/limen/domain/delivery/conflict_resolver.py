"""Fleet-wide alias conflict detection and resolution.

A requested alias can only be bound to one distribution at a time. The
resolver inspects the whole fleet and picks the first applicable rung of a
fixed ladder:

1. ``no_conflict``: nobody binds the alias, keep it.
2. ``reuse_existing``: the binding distribution belongs to this tenant
   (a retried or duplicate request), reuse it.
3. ``alternative_alias``: try ``{segment}-v2``, ``-alt``, ``-new``, ``-app``,
   ``-site`` and then a single random suffix.
4. ``cdn_domain_only``: give up on an alias.
"""

from __future__ import annotations

import logging
import secrets
import string
from typing import TYPE_CHECKING

from limen.domain.delivery.ownership import owner_from_metadata, resolve_owner
from limen.foundation.domain.delivery_value_objects import (
    AliasConflict,
    ResolutionDecision,
    ResolutionStrategy,
)
from limen.foundation.domain.exceptions import ProviderError
from limen.infra.observability.instrumentation import start_span

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from limen.foundation.domain.delivery_value_objects import Distribution
    from limen.foundation.domain.ports import CDNControlPlanePort

logger = logging.getLogger(__name__)

ALTERNATIVE_SUFFIXES: tuple[str, ...] = ("v2", "alt", "new", "app", "site")
RANDOM_SUFFIX_LENGTH = 6
MAX_LABEL_LENGTH = 63

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def random_suffix(length: int = RANDOM_SUFFIX_LENGTH) -> str:
    """Random lowercase alphanumeric suffix for the last alternative alias."""
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


class ConflictResolver:
    """Detects and resolves alias collisions across the distribution fleet.

    Args:
        cdn: CDN control plane used to list distributions and read tags.
        suffix_source: Callable producing the random suffix of the last
            alternative candidate. Injected by tests.
    """

    def __init__(
        self,
        cdn: CDNControlPlanePort,
        *,
        suffix_source: Callable[[], str] = random_suffix,
    ) -> None:
        self._cdn = cdn
        self._suffix_source = suffix_source

    def check_alias_conflict(self, alias: str) -> AliasConflict:
        """Find the distribution binding ``alias``, if any.

        Provider errors propagate: an unreadable fleet is never reported as
        "no conflict".
        """
        wanted = alias.lower()
        for distribution in self._cdn.list_distributions():
            if any(bound.lower() == wanted for bound in distribution.aliases):
                logger.debug(
                    "alias_conflict_found",
                    extra={"alias": alias, "distribution_id": distribution.id},
                )
                return AliasConflict.with_distribution(alias, distribution)
        return AliasConflict.none(alias)

    def owner_of(self, distribution: Distribution) -> str | None:
        """Owning tenant of ``distribution``, tag first.

        A failed tag lookup falls back to the comment and origin path
        contract rather than failing resolution.
        """
        try:
            tags = self._cdn.get_tags(distribution.arn) if distribution.arn else None
        except ProviderError as exc:
            logger.warning(
                "distribution_tags_unavailable",
                extra={"distribution_id": distribution.id, "error": exc.message},
            )
            tags = None
        return resolve_owner(distribution, tags)

    def is_owned_by(self, distribution: Distribution, tenant_id: str) -> bool:
        return self.owner_of(distribution) == tenant_id

    def find_owned_distribution(self, tenant_id: str) -> Distribution | None:
        """First distribution in the fleet owned by ``tenant_id``.

        Used to adopt a distribution whose record write was lost. Candidates
        are pre-filtered on the comment and origin path so that tags are only
        fetched for plausible matches; the tag then has the final word.
        """
        for distribution in self._cdn.list_distributions():
            if owner_from_metadata(distribution) != tenant_id:
                continue
            if self.is_owned_by(distribution, tenant_id):
                logger.info(
                    "owned_distribution_found",
                    extra={"tenant_id": tenant_id, "distribution_id": distribution.id},
                )
                return distribution
        return None

    def resolve(self, tenant_id: str, alias: str, conflict: AliasConflict) -> ResolutionDecision:
        """Walk the resolution ladder for ``alias``.

        Args:
            tenant_id: Tenant requesting the alias.
            alias: Requested alias.
            conflict: Result of ``check_alias_conflict(alias)``.

        Returns:
            The decision of the first applicable rung.
        """
        with start_span(
            "delivery.resolve_alias", {"tenant.id": tenant_id, "delivery.alias": alias}
        ) as span:
            decision = self._resolve(tenant_id, alias, conflict)
            span.set_attribute("delivery.strategy", str(decision.strategy))

        logger.info(
            "alias_conflict_resolved",
            extra={
                "tenant_id": tenant_id,
                "alias": alias,
                "strategy": str(decision.strategy),
                "resulting_alias": decision.resulting_alias,
                "resulting_distribution_id": decision.resulting_distribution_id,
            },
        )
        return decision

    def _resolve(self, tenant_id: str, alias: str, conflict: AliasConflict) -> ResolutionDecision:
        if not conflict.has_conflict:
            return ResolutionDecision(ResolutionStrategy.NO_CONFLICT, resulting_alias=alias)

        if conflict.distribution is not None and self.is_owned_by(
            conflict.distribution, tenant_id
        ):
            return ResolutionDecision(
                ResolutionStrategy.REUSE_EXISTING,
                resulting_alias=alias,
                resulting_distribution_id=conflict.conflicting_distribution_id,
                resulting_domain=conflict.conflicting_domain,
            )

        for candidate in self._alternative_candidates(alias):
            if not self.check_alias_conflict(candidate).has_conflict:
                return ResolutionDecision(
                    ResolutionStrategy.ALTERNATIVE_ALIAS, resulting_alias=candidate
                )
            logger.debug(
                "alternative_alias_taken", extra={"tenant_id": tenant_id, "alias": candidate}
            )

        return ResolutionDecision(ResolutionStrategy.CDN_DOMAIN_ONLY)

    def _alternative_candidates(self, alias: str) -> Iterator[str]:
        """Fixed suffixes in order, then one random suffix.

        The random suffix is drawn lazily so it is only generated once every
        fixed candidate has been rejected.
        """
        segment, _, domain = alias.partition(".")
        suffixes = [*ALTERNATIVE_SUFFIXES, None]
        for suffix in suffixes:
            label = f"{segment}-{suffix if suffix is not None else self._suffix_source()}"
            if len(label) > MAX_LABEL_LENGTH:
                continue
            yield f"{label}.{domain}" if domain else label
