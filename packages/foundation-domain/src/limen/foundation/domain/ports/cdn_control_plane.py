"""Port interface for the CDN control plane.

This module defines the CDNControlPlanePort protocol used by the conflict
resolver and the distribution provisioner. Distribution configurations are
passed as mappings in the provider's configuration shape; everything the
domain reads back is normalized into ``Distribution`` value objects.

Example:
    >>> from limen.foundation.domain.ports import CDNControlPlanePort
    >>> def aliases_in_use(cdn: CDNControlPlanePort) -> set[str]:
    ...     return {a for d in cdn.list_distributions() for a in d.aliases}
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from limen.foundation.domain.delivery_value_objects import Distribution


@runtime_checkable
class CDNControlPlanePort(Protocol):
    """Port for CDN distribution management.

    Implementations raise ``NotFoundError`` when a distribution does not
    exist, ``AliasRejectedError`` when the provider refuses an alias
    binding, and ``ProviderError`` for any other remote failure.

    The protocol is runtime_checkable to enable isinstance() verification
    in tests and dependency injection validation.
    """

    def list_distributions(self) -> Iterator[Distribution]:
        """Iterate over every distribution in the account.

        Implementations follow provider pagination transparently; errors
        raised while fetching any page propagate to the caller.
        """
        ...

    def get_distribution(self, distribution_id: str) -> Distribution:
        """Fetch a single distribution.

        Args:
            distribution_id: Provider distribution identifier.

        Returns:
            The normalized distribution.

        Raises:
            NotFoundError: If the distribution does not exist.
        """
        ...

    def get_distribution_config(self, distribution_id: str) -> tuple[dict[str, Any], str]:
        """Fetch a distribution's configuration and its version tag.

        Returns:
            Tuple of (configuration mapping, ETag) where the ETag must be
            passed back as ``if_match`` on update and delete.
        """
        ...

    def create_distribution(
        self,
        config: Mapping[str, Any],
        tags: Mapping[str, str],
    ) -> Distribution:
        """Create a distribution with the given configuration and tags.

        Args:
            config: Provider distribution configuration.
            tags: Resource tags stamped atomically at creation.

        Returns:
            The newly created distribution.
        """
        ...

    def update_distribution(
        self,
        distribution_id: str,
        config: Mapping[str, Any],
        if_match: str,
    ) -> Distribution:
        """Replace a distribution's configuration.

        Args:
            distribution_id: Provider distribution identifier.
            config: Full replacement configuration.
            if_match: ETag from the matching ``get_distribution_config`` call.

        Raises:
            AliasRejectedError: If an alias in the configuration is refused.
        """
        ...

    def delete_distribution(self, distribution_id: str, if_match: str) -> None:
        """Permanently delete a disabled, deployed distribution."""
        ...

    def create_invalidation(
        self,
        distribution_id: str,
        paths: Sequence[str],
        caller_reference: str,
    ) -> str:
        """Invalidate cached objects under the given paths.

        Returns:
            Provider invalidation identifier.
        """
        ...

    def get_tags(self, arn: str) -> dict[str, str]:
        """Return the resource tags of a distribution keyed by tag name."""
        ...
