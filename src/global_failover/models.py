"""
Data models for the global failover topology.

This module defines the entity descriptions emitted by topology composition:
table bindings, regional endpoints, certificate and domain bindings, health
checks and failover records, plus the structured keys that identify them.
All entities are immutable once composed.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .enums import (
    HealthCheckProtocol,
    Region,
    RegionRole,
    ResourceKind,
    RoutingPolicy,
)


@dataclass(frozen=True)
class ResourceKey:
    """
    Structured identity of a regional resource.

    The same domain name is reused in every region, so identity is the pair
    of region and resource kind. It is formatted to a string only when a
    template is rendered or a resource is handed to a provisioner.
    """

    region: Region
    kind: ResourceKind

    def logical_id(self) -> str:
        """Format as an alphanumeric logical id (e.g. 'UsEast1Certificate')."""
        region_part = "".join(part.capitalize() for part in self.region.value.split("-"))
        return f"{region_part}{self.kind.value}"

    def __str__(self) -> str:
        return f"{self.region.value}/{self.kind.value}"


@dataclass(frozen=True)
class ExecuteHostname:
    """Platform-assigned hostname of a regional API: {api id}.{service}.{region}.{url suffix}."""

    api_key: ResourceKey
    region: Region
    service: str = "execute-api"
    url_suffix: str = "amazonaws.com"

    def resolve(self, api_id: str) -> str:
        """Build the concrete hostname once the API id is known."""
        return ".".join([api_id, self.service, self.region.value, self.url_suffix])


@dataclass(frozen=True)
class PublishedTable:
    """Table name published by the MAIN region for SECONDARY regions to bind to."""

    name: str
    main_region: Region
    replication_regions: tuple[Region, ...] = ()


@dataclass(frozen=True)
class TableHandle:
    """Owning (MAIN) or reference-only (SECONDARY) handle on the replicated table."""

    key: ResourceKey
    table_name: str
    role: RegionRole
    replication_regions: tuple[Region, ...] = ()
    partition_key: Optional[str] = None
    billing_mode: Optional[str] = None

    @property
    def region(self) -> Region:
        return self.key.region

    @property
    def owning(self) -> bool:
        """True if this handle defines the table (schema, billing, replicas)."""
        return self.role is RegionRole.MAIN


@dataclass(frozen=True)
class RouteDefinition:
    """A route on a regional API; business routes come from the compute collaborator."""

    method: str
    path: str
    integration: str = "lambda"
    description: str = ""


@dataclass(frozen=True)
class RegionalEndpoint:
    """API surface of one region, bound to that region's table handle."""

    key: ResourceKey
    table: TableHandle
    stage_name: str
    hostname: ExecuteHostname
    health_route: RouteDefinition
    routes: tuple[RouteDefinition, ...] = ()

    @property
    def region(self) -> Region:
        return self.key.region

    @property
    def stage_health_path(self) -> str:
        """Health path as seen through the execute hostname: /{stage}/health."""
        return f"/{self.stage_name}{self.health_route.path}"


@dataclass(frozen=True)
class Certificate:
    """DNS-validated TLS certificate scoped to one region."""

    key: ResourceKey
    domain_name: str
    hosted_zone_id: str
    validation_method: str = "DNS"

    @property
    def region(self) -> Region:
        return self.key.region


@dataclass(frozen=True)
class DomainNameResource:
    """Region-scoped custom domain name resource of the API platform."""

    key: ResourceKey
    domain_name: str
    certificate_key: ResourceKey
    security_policy: str = "TLS_1_2"
    endpoint_type: str = "REGIONAL"

    @property
    def region(self) -> Region:
        return self.key.region


@dataclass(frozen=True)
class BasePathMapping:
    """Maps a domain name resource onto a regional API stage."""

    key: ResourceKey
    domain_key: ResourceKey
    api_key: ResourceKey
    stage_name: str

    @property
    def region(self) -> Region:
        return self.key.region


@dataclass(frozen=True)
class DomainBinding:
    """Shared domain attached to one region's endpoint through its own certificate."""

    region: Region
    domain_name: str
    hosted_zone_id: str
    certificate: Certificate
    domain: DomainNameResource
    mapping: BasePathMapping


@dataclass(frozen=True)
class HealthCheck:
    """Synthetic monitor polling one regional endpoint's health path."""

    key: ResourceKey
    endpoint_key: ResourceKey
    hostname: ExecuteHostname
    resource_path: str
    protocol: HealthCheckProtocol = HealthCheckProtocol.HTTPS
    port: int = 443
    request_interval_seconds: int = 30
    failure_threshold: int = 3

    @property
    def region(self) -> Region:
        return self.key.region

    def target_url(self, api_id: str) -> str:
        """Concrete URL polled once the API id is known."""
        scheme = self.protocol.value.lower()
        return f"{scheme}://{self.hostname.resolve(api_id)}:{self.port}{self.resource_path}"


@dataclass(frozen=True)
class FailoverRecord:
    """DNS record for the shared domain, excluded from answers while its health check is unhealthy."""

    key: ResourceKey
    domain_name: str
    hosted_zone_id: str
    set_identifier: str
    health_check_key: ResourceKey
    alias_target_key: ResourceKey
    record_type: str = "A"
    routing_policy: RoutingPolicy = RoutingPolicy.LATENCY

    @property
    def region(self) -> Region:
        return self.key.region


Entity = Union[
    TableHandle,
    RegionalEndpoint,
    Certificate,
    DomainNameResource,
    BasePathMapping,
    HealthCheck,
    FailoverRecord,
]


@dataclass(frozen=True)
class RegionalTopology:
    """Complete component chain of one region."""

    region: Region
    role: RegionRole
    table: TableHandle
    endpoint: RegionalEndpoint
    domain_binding: DomainBinding
    health_check: HealthCheck
    record: FailoverRecord

    def entities(self) -> list[Entity]:
        """Entities in dependency (creation) order."""
        return [
            self.table,
            self.endpoint,
            self.domain_binding.certificate,
            self.domain_binding.domain,
            self.domain_binding.mapping,
            self.health_check,
            self.record,
        ]


@dataclass(frozen=True)
class Topology:
    """All regional chains of one composition, MAIN first."""

    main_region: Region
    domain_name: str
    hosted_zone_id: str
    published_table: PublishedTable
    regions: tuple[RegionalTopology, ...] = field(default_factory=tuple)

    @property
    def endpoints(self) -> list[RegionalEndpoint]:
        return [r.endpoint for r in self.regions]

    @property
    def health_checks(self) -> list[HealthCheck]:
        return [r.health_check for r in self.regions]

    @property
    def records(self) -> list[FailoverRecord]:
        return [r.record for r in self.regions]

    def for_region(self, region: Region) -> RegionalTopology:
        """
        Look up the chain of one region.

        Raises:
            KeyError: If the region is not part of this topology
        """
        for regional in self.regions:
            if regional.region is region:
                return regional
        raise KeyError(region.value)

    def entities(self) -> list[Entity]:
        """All entities in dependency order, MAIN's chain first."""
        return [entity for regional in self.regions for entity in regional.entities()]
