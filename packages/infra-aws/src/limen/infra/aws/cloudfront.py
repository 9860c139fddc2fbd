"""CloudFront adapter implementing ``CDNControlPlanePort``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opentelemetry.trace import SpanKind

from limen.foundation.domain.delivery_value_objects import Distribution
from limen.infra.aws.errors import translate_errors
from limen.infra.observability.instrumentation import traced_operation

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

logger = logging.getLogger(__name__)

PROVIDER = "cloudfront"


def _items(container: Mapping[str, Any] | None) -> list[Any]:
    """Unwrap CloudFront's ``{"Quantity": n, "Items": [...]}`` lists."""
    if not container:
        return []
    return list(container.get("Items") or [])


def to_distribution(payload: Mapping[str, Any]) -> Distribution:
    """Normalize a distribution summary or a full distribution response.

    List pages return summaries with configuration fields at the top level;
    get/create/update return them nested under ``DistributionConfig``.
    """
    config = payload.get("DistributionConfig", payload)
    return Distribution(
        id=payload["Id"],
        arn=payload.get("ARN", ""),
        domain_name=payload["DomainName"],
        status=payload.get("Status", ""),
        enabled=bool(config.get("Enabled", False)),
        aliases=tuple(_items(config.get("Aliases"))),
        comment=config.get("Comment", ""),
        origin_paths=tuple(
            origin.get("OriginPath", "") for origin in _items(config.get("Origins"))
        ),
    )


class CloudFrontControlPlane:
    """CDN control plane backed by a boto3 CloudFront client.

    Args:
        client: A boto3 ``cloudfront`` client.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @traced_operation("cloudfront.list_distributions", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def list_distributions(self) -> Iterator[Distribution]:
        # Materialized inside the span so page errors are attributed to it.
        distributions: list[Distribution] = []
        with translate_errors(PROVIDER, "list_distributions"):
            paginator = self._client.get_paginator("list_distributions")
            for page in paginator.paginate():
                distributions.extend(
                    to_distribution(item) for item in _items(page.get("DistributionList"))
                )
        logger.debug("distributions_listed", extra={"count": len(distributions)})
        return iter(distributions)

    @traced_operation("cloudfront.get_distribution", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def get_distribution(self, distribution_id: str) -> Distribution:
        with translate_errors(PROVIDER, "get_distribution", distribution_id=distribution_id):
            response = self._client.get_distribution(Id=distribution_id)
        return to_distribution(response["Distribution"])

    @traced_operation(
        "cloudfront.get_distribution_config", kind=SpanKind.CLIENT, rpc_system="aws-api"
    )
    def get_distribution_config(self, distribution_id: str) -> tuple[dict[str, Any], str]:
        with translate_errors(
            PROVIDER, "get_distribution_config", distribution_id=distribution_id
        ):
            response = self._client.get_distribution_config(Id=distribution_id)
        return response["DistributionConfig"], response["ETag"]

    @traced_operation("cloudfront.create_distribution", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def create_distribution(
        self,
        config: Mapping[str, Any],
        tags: Mapping[str, str],
    ) -> Distribution:
        caller_reference = config.get("CallerReference")
        with translate_errors(
            PROVIDER, "create_distribution", caller_reference=caller_reference
        ):
            response = self._client.create_distribution_with_tags(
                DistributionConfigWithTags={
                    "DistributionConfig": dict(config),
                    "Tags": {
                        "Items": [{"Key": key, "Value": value} for key, value in tags.items()]
                    },
                }
            )
        distribution = to_distribution(response["Distribution"])
        logger.info(
            "cloudfront_distribution_created",
            extra={
                "distribution_id": distribution.id,
                "domain_name": distribution.domain_name,
                "caller_reference": caller_reference,
            },
        )
        return distribution

    @traced_operation("cloudfront.update_distribution", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def update_distribution(
        self,
        distribution_id: str,
        config: Mapping[str, Any],
        if_match: str,
    ) -> Distribution:
        with translate_errors(PROVIDER, "update_distribution", distribution_id=distribution_id):
            response = self._client.update_distribution(
                Id=distribution_id,
                DistributionConfig=dict(config),
                IfMatch=if_match,
            )
        return to_distribution(response["Distribution"])

    @traced_operation("cloudfront.delete_distribution", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def delete_distribution(self, distribution_id: str, if_match: str) -> None:
        with translate_errors(PROVIDER, "delete_distribution", distribution_id=distribution_id):
            self._client.delete_distribution(Id=distribution_id, IfMatch=if_match)

    @traced_operation("cloudfront.create_invalidation", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def create_invalidation(
        self,
        distribution_id: str,
        paths: Sequence[str],
        caller_reference: str,
    ) -> str:
        with translate_errors(PROVIDER, "create_invalidation", distribution_id=distribution_id):
            response = self._client.create_invalidation(
                DistributionId=distribution_id,
                InvalidationBatch={
                    "Paths": {"Quantity": len(paths), "Items": list(paths)},
                    "CallerReference": caller_reference,
                },
            )
        return response["Invalidation"]["Id"]

    @traced_operation("cloudfront.get_tags", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def get_tags(self, arn: str) -> dict[str, str]:
        with translate_errors(PROVIDER, "list_tags_for_resource", arn=arn):
            response = self._client.list_tags_for_resource(Resource=arn)
        return {tag["Key"]: tag["Value"] for tag in _items(response.get("Tags"))}
