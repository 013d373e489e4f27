"""
Failover routing records.

One DNS record per region shares the domain name. Each carries the region,
a set-identifier derived from the region, and a reference to the same
region's health check, so the resolver leaves a region out of answers
while its check reports UNHEALTHY.
"""

from typing import Mapping

from .enums import HealthStatus, InputValidationErrorCode, Region, ResourceKind
from .exceptions import ConfigurationError
from .models import DomainBinding, FailoverRecord, HealthCheck, ResourceKey


def set_identifier_for(region: Region) -> str:
    """Deterministic set-identifier of a region's record (e.g. 'eu-west-1Api')."""
    return f"{region.value}Api"


def create_failover_record(
    domain_binding: DomainBinding,
    health_check: HealthCheck,
) -> FailoverRecord:
    """
    Compose the failover record of one region.

    Args:
        domain_binding: The region's domain binding (alias target)
        health_check: The same region's health check

    Returns:
        FailoverRecord for the region

    Raises:
        ConfigurationError: If the health check belongs to another region
    """
    region = domain_binding.region
    if health_check.region is not region:
        raise ConfigurationError(
            code=InputValidationErrorCode.REGION_MISMATCH.value,
            message=(
                f"Failover record for {region.value} cannot reference the "
                f"health check of {health_check.region.value}"
            ),
            details={
                "record_region": region.value,
                "health_check_region": health_check.region.value,
            },
        )

    return FailoverRecord(
        key=ResourceKey(region=region, kind=ResourceKind.RECORD_SET),
        domain_name=domain_binding.domain_name,
        hosted_zone_id=domain_binding.hosted_zone_id,
        set_identifier=set_identifier_for(region),
        health_check_key=health_check.key,
        alias_target_key=domain_binding.domain.key,
    )


def resolve_dns_answers(
    records: list[FailoverRecord],
    statuses: Mapping[ResourceKey, HealthStatus],
) -> list[FailoverRecord]:
    """
    Records eligible to answer queries for the domain.

    Only records whose health check is UNHEALTHY are excluded. Checks that
    have not reported yet count as eligible. Choosing among the eligible
    records (latency, weight, geography) is left to the DNS provider.

    Args:
        records: All records sharing the domain name
        statuses: Current status per health check key

    Returns:
        Eligible records in input order
    """
    return [
        record for record in records
        if statuses.get(record.health_check_key, HealthStatus.UNKNOWN)
        is not HealthStatus.UNHEALTHY
    ]
