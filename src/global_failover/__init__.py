"""
Global Failover - active-active multi-region topology composition.

This package composes the per-region resources of an active-active
deployment (replicated table, regional API, certificate and domain binding,
health check and failover DNS record) in dependency order, and hands them to
an external provisioning collaborator.
"""

__version__ = "0.1.0"

from global_failover.exceptions import (
    TopologyError,
    ConfigurationError,
    ProvisioningError,
    ReferenceResolutionError,
    HealthCheckActivationError,
)
from global_failover.enums import (
    Region,
    RegionRole,
    ResourceKind,
    HealthStatus,
    HealthCheckProtocol,
    RoutingPolicy,
    LogLevel,
    InputValidationErrorCode,
)
from global_failover.config import (
    TableSettings,
    HealthCheckSettings,
    LoggingConfig,
    TopologyConfig,
    load_config_from_env,
)
from global_failover.input_validator import (
    InputValidator,
    InputValidationResult,
    InputValidationError,
    ConfigValidationResult,
    validate_topology_config,
)
from global_failover.models import (
    ResourceKey,
    ExecuteHostname,
    PublishedTable,
    TableHandle,
    RouteDefinition,
    RegionalEndpoint,
    Certificate,
    DomainNameResource,
    BasePathMapping,
    DomainBinding,
    HealthCheck,
    FailoverRecord,
    RegionalTopology,
    Topology,
)
from global_failover.replica_table import (
    derive_table_name,
    bind_replica_table,
    publish_table,
)
from global_failover.endpoint import create_regional_endpoint
from global_failover.domain_binding import bind_domain
from global_failover.health_check import (
    create_health_check,
    HealthCheckMonitor,
    HealthCheckVerifier,
    HealthProbeResult,
    HealthProbeReport,
)
from global_failover.failover_record import (
    create_failover_record,
    resolve_dns_answers,
    set_identifier_for,
)
from global_failover.audit_logger import AuditLogger, LogEntry
from global_failover.orchestrator import TopologyOrchestrator, compose_from_env
from global_failover.template import (
    render_region_template,
    render_topology,
    dump_template,
)
from global_failover.provisioning import (
    ProvisioningBackend,
    InMemoryProvisioner,
    ActivationReport,
    provision_topology,
    teardown_topology,
    verify_health_check_activation,
)

__all__ = [
    # Exceptions
    "TopologyError",
    "ConfigurationError",
    "ProvisioningError",
    "ReferenceResolutionError",
    "HealthCheckActivationError",
    # Enums
    "Region",
    "RegionRole",
    "ResourceKind",
    "HealthStatus",
    "HealthCheckProtocol",
    "RoutingPolicy",
    "LogLevel",
    "InputValidationErrorCode",
    # Configuration
    "TableSettings",
    "HealthCheckSettings",
    "LoggingConfig",
    "TopologyConfig",
    "load_config_from_env",
    # Input validation
    "InputValidator",
    "InputValidationResult",
    "InputValidationError",
    "ConfigValidationResult",
    "validate_topology_config",
    # Models
    "ResourceKey",
    "ExecuteHostname",
    "PublishedTable",
    "TableHandle",
    "RouteDefinition",
    "RegionalEndpoint",
    "Certificate",
    "DomainNameResource",
    "BasePathMapping",
    "DomainBinding",
    "HealthCheck",
    "FailoverRecord",
    "RegionalTopology",
    "Topology",
    # Components
    "derive_table_name",
    "bind_replica_table",
    "publish_table",
    "create_regional_endpoint",
    "bind_domain",
    "create_health_check",
    "HealthCheckMonitor",
    "HealthCheckVerifier",
    "HealthProbeResult",
    "HealthProbeReport",
    "create_failover_record",
    "resolve_dns_answers",
    "set_identifier_for",
    # Logging
    "AuditLogger",
    "LogEntry",
    # Orchestration
    "TopologyOrchestrator",
    "compose_from_env",
    # Template boundary
    "render_region_template",
    "render_topology",
    "dump_template",
    # Provisioning
    "ProvisioningBackend",
    "InMemoryProvisioner",
    "ActivationReport",
    "provision_topology",
    "teardown_topology",
    "verify_health_check_activation",
]
