"""
Topology Orchestrator for the global failover topology.

This module sequences the per-region component chain:
- Replica table binding (owning for MAIN, by-name reference for SECONDARY)
- Regional endpoint with its health route
- Certificate and domain binding
- Health check on the endpoint's stage-scoped health path
- Failover record bound to that health check

Composition is two-phase. Phase 1 builds MAIN's owning table and publishes
its name. Phase 2 composes every region's chain with the published name as
an explicit input, MAIN first. SECONDARY chains do not depend on each other.
"""

from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from .audit_logger import AuditLogger
from .config import TopologyConfig, load_config_from_env
from .domain_binding import bind_domain
from .endpoint import create_regional_endpoint
from .enums import Region, RegionRole
from .exceptions import ConfigurationError, TopologyError
from .failover_record import create_failover_record
from .health_check import create_health_check
from .input_validator import InputValidator, ensure_valid_config
from .models import PublishedTable, RegionalTopology, RouteDefinition, Topology
from .replica_table import bind_replica_table, derive_table_name, publish_table


class TopologyOrchestrator:
    """
    Composes the active-active topology from one configuration.

    The MAIN role is fixed per orchestrator from the configuration and
    passed explicitly down the chain; it is never re-read from the
    environment during composition.
    """

    COMPONENT = "TopologyOrchestrator"

    def __init__(
        self,
        config: TopologyConfig,
        routes: Iterable[RouteDefinition] = (),
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Topology configuration
            routes: Business routes supplied by the compute collaborator
            logger: Optional audit logger
        """
        self._config = config
        self._routes = tuple(routes)
        self._logger = logger

    @property
    def config(self) -> TopologyConfig:
        return self._config

    def compose(self) -> Topology:
        """
        Compose every configured region.

        Returns:
            Topology with MAIN's chain first

        Raises:
            ConfigurationError: If an input is missing or invalid; raised
                before any entity is created
        """
        domain_name, hosted_zone_id = self._validated_inputs()
        published = self._publish_main_table()

        regions = tuple(
            self._compose_chain(region, published, domain_name, hosted_zone_id)
            for region in self._config.regions
        )

        self._log_info(
            "Topology composed",
            table_name=published.name,
            regions=[r.region.value for r in regions],
            entities=sum(len(r.entities()) for r in regions),
        )

        return Topology(
            main_region=self._config.main_region,
            domain_name=domain_name,
            hosted_zone_id=hosted_zone_id,
            published_table=published,
            regions=regions,
        )

    def compose_region(self, region: Optional[Union[Region, str]] = None) -> RegionalTopology:
        """
        Compose a single region's chain.

        Matches deploying one region at a time: the table binding still
        consumes the name MAIN publishes, so a SECONDARY composed alone
        references exactly the table MAIN creates.

        Args:
            region: Region or region identifier to compose (defaults to the
                configured deployment region)

        Returns:
            RegionalTopology for the region

        Raises:
            ConfigurationError: If an input is missing or invalid, or the
                region is not part of the configured topology
        """
        domain_name, hosted_zone_id = self._validated_inputs()
        region = region or self._config.region
        if not isinstance(region, Region):
            try:
                region = InputValidator().require_region(str(region), "region")
            except ConfigurationError as e:
                self._log_error("Region composition rejected", e)
                raise
        if region not in self._config.regions:
            error = ConfigurationError(
                code="region_mismatch",
                message=f"Region {region.value} is not part of the configured topology",
                details={
                    "region": region.value,
                    "configured_regions": [r.value for r in self._config.regions],
                },
            )
            self._log_error("Region composition rejected", error)
            raise error

        published = self._publish_main_table()
        return self._compose_chain(region, published, domain_name, hosted_zone_id)

    def role_of(self, region: Region) -> RegionRole:
        """Role of a region in this composition."""
        if region is self._config.main_region:
            return RegionRole.MAIN
        return RegionRole.SECONDARY

    def _validated_inputs(self) -> tuple[str, str]:
        try:
            result = ensure_valid_config(self._config)
        except ConfigurationError as e:
            self._log_error("Configuration rejected", e)
            raise

        for warning in result.warnings:
            self._log_warn(warning)

        validator = InputValidator()
        domain = validator.validate_domain_name(self._config.domain_name)
        zone = validator.validate_hosted_zone_id(self._config.hosted_zone_id)
        return domain.canonical_value, zone.canonical_value

    def _publish_main_table(self) -> PublishedTable:
        """Phase 1: MAIN's owning table, independent of every SECONDARY."""
        config = self._config
        main_table = bind_replica_table(
            region=config.main_region,
            role=RegionRole.MAIN,
            table_name=derive_table_name(config.table.base_name, config.table.suffix),
            replication_regions=config.secondary_regions,
            partition_key=config.table.partition_key,
            billing_mode=config.table.billing_mode,
        )
        published = publish_table(main_table)
        self._log_debug(
            "Main table published",
            config.main_region,
            table_name=published.name,
            replication_regions=[r.value for r in published.replication_regions],
        )
        return published

    def _compose_chain(
        self,
        region: Region,
        published: PublishedTable,
        domain_name: str,
        hosted_zone_id: str,
    ) -> RegionalTopology:
        """Phase 2: one region's chain, consuming the published table name."""
        config = self._config
        role = self.role_of(region)

        try:
            table = bind_replica_table(
                region=region,
                role=role,
                table_name=published.name,
                replication_regions=published.replication_regions,
                partition_key=config.table.partition_key,
                billing_mode=config.table.billing_mode,
            )
            endpoint = create_regional_endpoint(
                table,
                stage_name=config.stage_name,
                routes=self._routes,
                url_suffix=config.url_suffix,
            )
            binding = bind_domain(domain_name, hosted_zone_id, endpoint)
            health_check = create_health_check(endpoint, config.health_check)
            record = create_failover_record(binding, health_check)
        except (TopologyError, ValueError) as e:
            self._log_error("Region composition failed", e, region)
            raise

        self._log_info(
            "Region composed",
            region,
            role=role.value,
            table_name=table.table_name,
            owning_table=table.owning,
            health_check_path=health_check.resource_path,
            set_identifier=record.set_identifier,
        )

        return RegionalTopology(
            region=region,
            role=role,
            table=table,
            endpoint=endpoint,
            domain_binding=binding,
            health_check=health_check,
            record=record,
        )

    def _log_debug(self, message: str, region: Optional[Region] = None, **data) -> None:
        if self._logger:
            self._logger.debug(self.COMPONENT, message, region, **data)

    def _log_info(self, message: str, region: Optional[Region] = None, **data) -> None:
        if self._logger:
            self._logger.info(self.COMPONENT, message, region, **data)

    def _log_warn(self, message: str) -> None:
        if self._logger:
            self._logger.warn(self.COMPONENT, message)

    def _log_error(self, message: str, error: Exception, region: Optional[Region] = None) -> None:
        if self._logger:
            self._logger.log_error(self.COMPONENT, message, error=error, region=region)


def compose_from_env(
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Union[str, Path]] = None,
    routes: Iterable[RouteDefinition] = (),
    logger: Optional[AuditLogger] = None,
) -> Topology:
    """
    Load configuration from the environment and compose the topology.

    Args:
        environ: Environment mapping (defaults to os.environ)
        dotenv_path: Optional .env file
        routes: Business routes supplied by the compute collaborator
        logger: Audit logger; built from the loaded LoggingConfig if omitted

    Returns:
        Composed Topology

    Raises:
        ConfigurationError: If a required input is missing or invalid
    """
    config = load_config_from_env(environ=environ, dotenv_path=dotenv_path)
    if logger is None:
        logger = AuditLogger.from_config(config.logging)
    return TopologyOrchestrator(config, routes=routes, logger=logger).compose()
