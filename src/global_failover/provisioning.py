"""
Provisioning collaborator boundary.

The composition layer never creates cloud resources. It hands entity
descriptions, in dependency order, to a ProvisioningBackend and removes
them in reverse order. Errors raised by a backend propagate unchanged.

InMemoryProvisioner is a complete backend without a cloud behind it. It
resolves table references by name, assigns API ids, and tracks whether
health checks have been enabled.
"""

import hashlib
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

from .audit_logger import AuditLogger
from .enums import Region
from .exceptions import (
    HealthCheckActivationError,
    ProvisioningError,
    ReferenceResolutionError,
)
from .models import (
    BasePathMapping,
    DomainNameResource,
    Entity,
    FailoverRecord,
    HealthCheck,
    RegionalEndpoint,
    ResourceKey,
    TableHandle,
    Topology,
)


COMPONENT = "Provisioning"


@runtime_checkable
class ProvisioningBackend(Protocol):
    """External collaborator that creates and removes resources."""

    def provision(self, entity: Entity) -> None:
        """Create or update the resource described by `entity`."""
        ...

    def teardown(self, entity: Entity) -> None:
        """Remove the resource described by `entity`."""
        ...

    def health_check_enabled(self, health_check: HealthCheck) -> bool:
        """Report whether a provisioned health check is actively polling."""
        ...


def dependencies_of(entity: Entity) -> list[ResourceKey]:
    """Keys of the resources an entity refers to."""
    if isinstance(entity, RegionalEndpoint):
        return [entity.table.key]
    if isinstance(entity, DomainNameResource):
        return [entity.certificate_key]
    if isinstance(entity, BasePathMapping):
        return [entity.domain_key, entity.api_key]
    if isinstance(entity, HealthCheck):
        return [entity.endpoint_key]
    if isinstance(entity, FailoverRecord):
        return [entity.health_check_key, entity.alias_target_key]
    return []


def provision_topology(
    topology: Topology,
    backend: ProvisioningBackend,
    logger: Optional[AuditLogger] = None,
) -> list[Entity]:
    """
    Hand every entity to the backend in dependency order, MAIN first.

    Certificate validation and health check activation may complete long
    after this returns; nothing here waits for them.

    Returns:
        The entities provisioned, in order

    Raises:
        ProvisioningError: Whatever the backend raises, unchanged
    """
    applied: list[Entity] = []
    for entity in topology.entities():
        try:
            backend.provision(entity)
        except ProvisioningError as e:
            if logger:
                logger.log_error(COMPONENT, f"Provisioning of {entity.key} failed", e, entity.key.region)
            raise
        applied.append(entity)
        if logger:
            logger.debug(COMPONENT, f"Provisioned {entity.key.kind.value}", entity.key.region,
                         logical_id=entity.key.logical_id())

    if logger:
        logger.info(COMPONENT, "Topology provisioned", entities=len(applied))
    return applied


def teardown_topology(
    topology: Topology,
    backend: ProvisioningBackend,
    logger: Optional[AuditLogger] = None,
) -> list[Entity]:
    """
    Remove every entity in reverse dependency order, MAIN's table last.

    Returns:
        The entities removed, in order
    """
    removed: list[Entity] = []
    for entity in reversed(topology.entities()):
        try:
            backend.teardown(entity)
        except ProvisioningError as e:
            if logger:
                logger.log_error(COMPONENT, f"Teardown of {entity.key} failed", e, entity.key.region)
            raise
        removed.append(entity)

    if logger:
        logger.info(COMPONENT, "Topology torn down", entities=len(removed))
    return removed


@dataclass
class ActivationReport:
    """Outcome of confirming that every health check is enabled."""

    enabled: list[Region] = field(default_factory=list)
    disabled: list[Region] = field(default_factory=list)

    @property
    def all_enabled(self) -> bool:
        return not self.disabled


def verify_health_check_activation(
    topology: Topology,
    backend: ProvisioningBackend,
    logger: Optional[AuditLogger] = None,
    strict: bool = True,
) -> ActivationReport:
    """
    Confirm that every provisioned health check is enabled.

    Creation does not guarantee a check is polling. Until it is, its
    record cannot fail over, so this confirmation is a required step
    after provisioning.

    Args:
        topology: Provisioned topology
        backend: Backend that provisioned it
        logger: Optional audit logger
        strict: Raise when any check is disabled

    Returns:
        ActivationReport

    Raises:
        HealthCheckActivationError: If strict and any check is disabled
    """
    report = ActivationReport()
    for check in topology.health_checks:
        if backend.health_check_enabled(check):
            report.enabled.append(check.region)
        else:
            report.disabled.append(check.region)
            if logger:
                logger.warn(COMPONENT, "Health check is not enabled", check.region,
                            logical_id=check.key.logical_id())

    if strict and not report.all_enabled:
        error = HealthCheckActivationError(
            code="health_check_disabled",
            message=(
                "Health checks not enabled for: "
                + ", ".join(region.value for region in report.disabled)
            ),
            details={"disabled_regions": [r.value for r in report.disabled]},
        )
        if logger:
            logger.log_error(COMPONENT, "Health check activation failed", error)
        raise error
    return report


class InMemoryProvisioner:
    """
    Provisioning backend that keeps resources in memory.

    Tables are global: an owning table exists in its own region and every
    replica region. A reference resolves only if a table with that exact
    name exists in the referencing region.
    """

    def __init__(self, enable_health_checks: bool = True) -> None:
        """
        Args:
            enable_health_checks: Whether new health checks start enabled
        """
        self._enable_health_checks = enable_health_checks
        self._resources: dict[ResourceKey, Entity] = {}
        self._tables: dict[str, set[Region]] = {}
        self._api_ids: dict[ResourceKey, str] = {}
        self._enabled: dict[ResourceKey, bool] = {}

    @property
    def provisioned(self) -> list[ResourceKey]:
        """Keys of live resources in provisioning order."""
        return list(self._resources)

    @property
    def api_ids(self) -> dict[ResourceKey, str]:
        """API id per provisioned endpoint key."""
        return dict(self._api_ids)

    def table_regions(self, table_name: str) -> set[Region]:
        return set(self._tables.get(table_name, set()))

    def get(self, key: ResourceKey) -> Entity:
        return self._resources[key]

    def provision(self, entity: Entity) -> None:
        """
        Create or update a resource.

        Raises:
            ReferenceResolutionError: If a table reference does not resolve
            ProvisioningError: If a referenced resource does not exist
        """
        missing = [key for key in dependencies_of(entity) if key not in self._resources]
        if missing:
            raise ProvisioningError(
                code="missing_dependency",
                message=f"{entity.key} refers to resources that do not exist",
                details={"resource": str(entity.key), "missing": [str(k) for k in missing]},
            )

        if isinstance(entity, TableHandle):
            self._provision_table(entity)
        elif isinstance(entity, RegionalEndpoint):
            self._api_ids.setdefault(entity.key, self._generate_api_id(entity.key))
        elif isinstance(entity, HealthCheck):
            self._enabled.setdefault(entity.key, self._enable_health_checks)

        self._resources[entity.key] = entity

    def teardown(self, entity: Entity) -> None:
        """
        Remove a resource.

        Raises:
            ProvisioningError: If another live resource still refers to it
        """
        if entity.key not in self._resources:
            return

        dependents = [
            other.key for other in self._resources.values()
            if entity.key in dependencies_of(other)
        ]
        if isinstance(entity, TableHandle) and entity.owning:
            dependents.extend(
                other.key for other in self._resources.values()
                if isinstance(other, TableHandle)
                and not other.owning
                and other.table_name == entity.table_name
            )
        if dependents:
            raise ProvisioningError(
                code="resource_in_use",
                message=f"{entity.key} is still referenced",
                details={"resource": str(entity.key), "dependents": [str(k) for k in dependents]},
            )

        del self._resources[entity.key]
        self._api_ids.pop(entity.key, None)
        self._enabled.pop(entity.key, None)
        if isinstance(entity, TableHandle) and entity.owning:
            self._tables.pop(entity.table_name, None)

    def health_check_enabled(self, health_check: HealthCheck) -> bool:
        return self._enabled.get(health_check.key, False)

    def enable_health_check(self, key: ResourceKey) -> None:
        """
        Mark a provisioned health check as enabled.

        Raises:
            KeyError: If no such health check is provisioned
        """
        if key not in self._enabled:
            raise KeyError(str(key))
        self._enabled[key] = True

    def _provision_table(self, table: TableHandle) -> None:
        if table.owning:
            self._tables[table.table_name] = {table.region, *table.replication_regions}
            return

        regions = self._tables.get(table.table_name)
        if not regions or table.region not in regions:
            raise ReferenceResolutionError(
                code="table_not_found",
                message=(
                    f"Table '{table.table_name}' does not exist in {table.region.value}"
                ),
                details={
                    "table_name": table.table_name,
                    "region": table.region.value,
                    "known_tables": sorted(self._tables),
                },
            )

    @staticmethod
    def _generate_api_id(key: ResourceKey) -> str:
        return hashlib.sha256(key.logical_id().encode("utf-8")).hexdigest()[:10]
