"""
Enumeration types for the global failover topology.

These enums provide type-safe constants for regions, roles, resource kinds,
health states and configuration options throughout the system.
"""

from enum import Enum


class Region(Enum):
    """
    Supported deployment regions.

    Limited to the locations where the API health check platform can probe
    regional API endpoints.
    """

    US_EAST_1 = "us-east-1"
    US_WEST_1 = "us-west-1"
    US_WEST_2 = "us-west-2"
    EU_WEST_1 = "eu-west-1"
    AP_SOUTHEAST_1 = "ap-southeast-1"
    AP_SOUTHEAST_2 = "ap-southeast-2"
    AP_NORTHEAST_1 = "ap-northeast-1"
    SA_EAST_1 = "sa-east-1"

    @classmethod
    def supported_values(cls) -> list[str]:
        """Return all supported region identifiers."""
        return [region.value for region in cls]


class RegionRole(Enum):
    """Role of a region within one topology composition."""

    MAIN = "main"
    SECONDARY = "secondary"


class ResourceKind(Enum):
    """Kinds of resources emitted per region."""

    TABLE = "Table"
    REST_API = "RestApi"
    CERTIFICATE = "Certificate"
    DOMAIN_NAME = "DomainName"
    BASE_PATH_MAPPING = "BasePathMapping"
    HEALTH_CHECK = "HealthCheck"
    RECORD_SET = "RecordSet"


class HealthStatus(Enum):
    """Binary health signal plus the initial unknown state."""

    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthCheckProtocol(Enum):
    """Protocols a health check can poll with."""

    HTTPS = "HTTPS"
    HTTP = "HTTP"


class RoutingPolicy(Enum):
    """DNS routing policy applied across the per-region record set."""

    LATENCY = "latency"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}


class InputValidationErrorCode(Enum):
    """Error codes for input validation failures."""

    MISSING_INPUT = "missing_input"
    UNSUPPORTED_REGION = "unsupported_region"
    DUPLICATE_REGION = "duplicate_region"
    MAIN_IN_SECONDARY = "main_in_secondary"
    INVALID_DOMAIN = "invalid_domain"
    IDNA_ERROR = "idna_error"
    INVALID_HOSTED_ZONE = "invalid_hosted_zone"
    INVALID_TABLE_NAME = "invalid_table_name"
    REGION_MISMATCH = "region_mismatch"
    INVALID_STAGE_NAME = "invalid_stage_name"
    INVALID_LOG_SETTING = "invalid_log_setting"
