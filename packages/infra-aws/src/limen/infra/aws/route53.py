"""Route 53 adapter implementing ``DNSControlPlanePort``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry.trace import SpanKind

from limen.foundation.domain.delivery_value_objects import DNSRecord
from limen.infra.aws.errors import translate_errors
from limen.infra.observability.instrumentation import traced_operation

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from limen.foundation.domain.delivery_value_objects import DNSChange

PROVIDER = "route53"

_CHANGE_PREFIX = "/change/"


def _fqdn(name: str) -> str:
    return name if name.endswith(".") else f"{name}."


def to_record(payload: Mapping[str, Any]) -> DNSRecord:
    """Normalize a ``ResourceRecordSet`` into a ``DNSRecord``.

    Alias records carry their target in ``AliasTarget`` and have no TTL.
    """
    values = [item["Value"] for item in payload.get("ResourceRecords", [])]
    if values:
        target = values[0]
    else:
        target = payload.get("AliasTarget", {}).get("DNSName", "")
    return DNSRecord(
        name=payload["Name"].rstrip("."),
        target=target.rstrip("."),
        ttl=int(payload.get("TTL", 300)),
        type=payload["Type"],
    )


class Route53ControlPlane:
    """DNS control plane backed by a boto3 Route 53 client.

    Args:
        client: A boto3 ``route53`` client.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @traced_operation("route53.change_record_sets", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def change_record_sets(
        self,
        zone_id: str,
        changes: Sequence[DNSChange],
        comment: str,
    ) -> str:
        batch = {
            "Comment": comment,
            "Changes": [
                {
                    "Action": str(change.action),
                    "ResourceRecordSet": {
                        "Name": _fqdn(change.record.name),
                        "Type": change.record.type,
                        "TTL": change.record.ttl,
                        "ResourceRecords": [{"Value": change.record.target}],
                    },
                }
                for change in changes
            ],
        }
        with translate_errors(PROVIDER, "change_resource_record_sets", zone_id=zone_id):
            response = self._client.change_resource_record_sets(
                HostedZoneId=zone_id,
                ChangeBatch=batch,
            )
        return response["ChangeInfo"]["Id"].removeprefix(_CHANGE_PREFIX)

    @traced_operation("route53.get_change", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def get_change(self, change_id: str) -> str:
        with translate_errors(PROVIDER, "get_change", change_id=change_id):
            response = self._client.get_change(Id=change_id)
        return response["ChangeInfo"]["Status"]

    @traced_operation("route53.list_record_sets", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def list_record_sets(
        self,
        zone_id: str,
        start_name: str | None = None,
        start_type: str | None = None,
        max_items: int | None = None,
    ) -> list[DNSRecord]:
        params: dict[str, Any] = {"HostedZoneId": zone_id}
        if start_name is not None:
            params["StartRecordName"] = _fqdn(start_name)
        if start_type is not None:
            params["StartRecordType"] = start_type

        with translate_errors(PROVIDER, "list_resource_record_sets", zone_id=zone_id):
            if max_items is not None:
                response = self._client.list_resource_record_sets(
                    MaxItems=str(max_items), **params
                )
                return [to_record(item) for item in response.get("ResourceRecordSets", [])]

            paginator = self._client.get_paginator("list_resource_record_sets")
            return [
                to_record(item)
                for page in paginator.paginate(**params)
                for item in page.get("ResourceRecordSets", [])
            ]

    @traced_operation("route53.get_hosted_zone", kind=SpanKind.CLIENT, rpc_system="aws-api")
    def get_hosted_zone(self, zone_id: str) -> str:
        with translate_errors(PROVIDER, "get_hosted_zone", zone_id=zone_id):
            response = self._client.get_hosted_zone(Id=zone_id)
        return response["HostedZone"]["Name"].rstrip(".")
