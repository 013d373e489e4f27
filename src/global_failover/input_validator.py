"""
Input validation and normalization module.

Validates the required topology inputs (regions, hosted zone identifier,
domain name, table name) and normalizes them to canonical form before any
entity is composed.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import idna

from .enums import InputValidationErrorCode, LogLevel, Region
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .config import TopologyConfig


# Valid hostname label characters after IDNA encoding (RFC 1035)
LABEL_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")

FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'
)

# Route 53 hosted zone ids, optionally with the API path prefix
HOSTED_ZONE_PATTERN = re.compile(r"^Z[A-Z0-9]{1,31}$")
HOSTED_ZONE_PREFIX = "/hostedzone/"

TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,255}$")

# Stage names become a path segment of the health check target
STAGE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")

LOG_OUTPUT_FORMATS = ("json", "text", "both")

MAX_DOMAIN_LENGTH = 253

# Above this many replicas a deployment takes noticeably long
REPLICA_WARNING_THRESHOLD = 3


@dataclass
class InputValidationError:
    """Structured error information for input validation failures."""

    code: InputValidationErrorCode
    message: str
    details: dict


@dataclass
class InputValidationResult:
    """Result of validating one input value."""

    valid: bool
    canonical_value: Optional[str]
    error: Optional[InputValidationError]


@dataclass
class ConfigValidationResult:
    """Result of validating a complete topology configuration."""

    valid: bool
    errors: list[InputValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _ok(value: str) -> InputValidationResult:
    return InputValidationResult(valid=True, canonical_value=value, error=None)


def _fail(code: InputValidationErrorCode, message: str, **details) -> InputValidationResult:
    return InputValidationResult(
        valid=False,
        canonical_value=None,
        error=InputValidationError(code=code, message=message, details=details),
    )


class InputValidator:
    """
    Validates and normalizes topology inputs.

    Handles:
    - Region membership in the supported set
    - Domain names converted to lowercase IDNA form
    - Route 53 hosted zone identifier shape
    - Table names within the table service's character set
    - Stage names usable as a single URL path segment
    """

    def validate_region(self, raw_region: Optional[str]) -> InputValidationResult:
        """
        Check that a region identifier belongs to the supported set.

        Args:
            raw_region: Region identifier (e.g., 'eu-west-1')

        Returns:
            InputValidationResult with the canonical region identifier or error
        """
        if not raw_region or not raw_region.strip():
            return _fail(
                InputValidationErrorCode.MISSING_INPUT,
                "Region input is empty",
                raw_input=raw_region,
            )

        region = raw_region.strip().lower()
        if region not in Region.supported_values():
            return _fail(
                InputValidationErrorCode.UNSUPPORTED_REGION,
                f"Region '{region}' is not supported by the health check platform",
                region=region,
                supported_regions=Region.supported_values(),
            )
        return _ok(region)

    def require_region(self, raw_region: Optional[str], input_name: str) -> Region:
        """
        Resolve a region identifier or fail.

        Raises:
            ConfigurationError: If the region is missing or unsupported
        """
        result = self.validate_region(raw_region)
        if not result.valid:
            raise ConfigurationError(
                code=result.error.code.value,
                message=f"{input_name}: {result.error.message}",
                details={"input": input_name, **result.error.details},
            )
        return Region(result.canonical_value)

    def validate_domain_name(self, raw_domain: Optional[str]) -> InputValidationResult:
        """
        Validate and normalize a domain name.

        Args:
            raw_domain: The raw domain name

        Returns:
            InputValidationResult with the canonical domain or error
        """
        if not raw_domain or not raw_domain.strip():
            return _fail(
                InputValidationErrorCode.MISSING_INPUT,
                "Domain name input is empty",
                raw_input=raw_domain,
            )

        domain = raw_domain.strip().rstrip(".")

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return _fail(
                InputValidationErrorCode.INVALID_DOMAIN,
                "Domain name contains forbidden characters",
                raw_input=raw_domain,
                forbidden_chars=FORBIDDEN_CHARS_PATTERN.findall(domain),
            )

        domain = domain.lower()
        if any(ord(c) > 127 for c in domain):
            try:
                domain = idna.encode(domain, uts46=True).decode("ascii")
            except idna.IDNAError as e:
                return _fail(
                    InputValidationErrorCode.IDNA_ERROR,
                    f"IDNA encoding failed: {e}",
                    raw_input=raw_domain,
                    idna_error=str(e),
                )

        labels = domain.split(".")
        if len(labels) < 2 or len(domain) > MAX_DOMAIN_LENGTH:
            return _fail(
                InputValidationErrorCode.INVALID_DOMAIN,
                "Domain name must have at least two labels and at most 253 characters",
                raw_input=raw_domain,
                canonical=domain,
            )

        bad_labels = [label for label in labels if not LABEL_PATTERN.match(label)]
        if bad_labels:
            return _fail(
                InputValidationErrorCode.INVALID_DOMAIN,
                "Domain name contains invalid labels",
                raw_input=raw_domain,
                invalid_labels=bad_labels,
            )

        return _ok(domain)

    def validate_hosted_zone_id(self, raw_zone_id: Optional[str]) -> InputValidationResult:
        """
        Validate a Route 53 hosted zone identifier.

        Accepts both the bare id and the '/hostedzone/<id>' form.
        """
        if not raw_zone_id or not raw_zone_id.strip():
            return _fail(
                InputValidationErrorCode.MISSING_INPUT,
                "Hosted zone id input is empty",
                raw_input=raw_zone_id,
            )

        zone_id = raw_zone_id.strip()
        if zone_id.startswith(HOSTED_ZONE_PREFIX):
            zone_id = zone_id[len(HOSTED_ZONE_PREFIX):]
        zone_id = zone_id.upper()

        if not HOSTED_ZONE_PATTERN.match(zone_id):
            return _fail(
                InputValidationErrorCode.INVALID_HOSTED_ZONE,
                f"Hosted zone id '{raw_zone_id}' is malformed",
                raw_input=raw_zone_id,
            )
        return _ok(zone_id)

    def validate_table_name(self, table_name: str) -> InputValidationResult:
        """Validate a derived table name."""
        if not TABLE_NAME_PATTERN.match(table_name or ""):
            return _fail(
                InputValidationErrorCode.INVALID_TABLE_NAME,
                f"Table name '{table_name}' must be 3-255 characters of [A-Za-z0-9_.-]",
                table_name=table_name,
            )
        return _ok(table_name)

    def validate_stage_name(self, stage_name: Optional[str]) -> InputValidationResult:
        """Validate a deployment stage name (a single URL path segment)."""
        if not STAGE_NAME_PATTERN.fullmatch(stage_name or ""):
            return _fail(
                InputValidationErrorCode.INVALID_STAGE_NAME,
                f"Stage name '{stage_name}' must be 1-128 characters of [A-Za-z0-9_-]",
                stage_name=stage_name,
            )
        return _ok(stage_name)

    def validate_logging(self, level: str, output_format: str) -> list[InputValidationError]:
        """Check the log level and output format against the accepted values."""
        errors = []
        levels = [lvl.value for lvl in LogLevel]
        if level not in levels:
            errors.append(InputValidationError(
                code=InputValidationErrorCode.INVALID_LOG_SETTING,
                message=f"Log level '{level}' must be one of: {', '.join(levels)}",
                details={"input": "LOG_LEVEL", "value": level, "allowed": levels},
            ))
        if output_format not in LOG_OUTPUT_FORMATS:
            errors.append(InputValidationError(
                code=InputValidationErrorCode.INVALID_LOG_SETTING,
                message=f"Log format '{output_format}' must be one of: {', '.join(LOG_OUTPUT_FORMATS)}",
                details={"input": "LOG_FORMAT", "value": output_format, "allowed": list(LOG_OUTPUT_FORMATS)},
            ))
        return errors


def validate_topology_config(config: "TopologyConfig") -> ConfigValidationResult:
    """
    Validate a complete topology configuration.

    Checks:
    - Deployment region, hosted zone id and domain name are present and valid
    - MAIN and every SECONDARY region are supported
    - SECONDARY regions are unique and exclude MAIN
    - The deployment region is one of the configured regions
    - The derived table name and the stage name are valid
    - The log level and log format are accepted values

    Returns:
        ConfigValidationResult with errors and warnings
    """
    # Local import: config imports this module.
    from .replica_table import derive_table_name

    validator = InputValidator()
    errors: list[InputValidationError] = []
    warnings: list[str] = []

    if config.region is None:
        errors.append(InputValidationError(
            code=InputValidationErrorCode.MISSING_INPUT,
            message="Could not resolve region. Please pass it with the AWS_REGION environment variable.",
            details={"input": "region"},
        ))

    zone = validator.validate_hosted_zone_id(config.hosted_zone_id)
    if not zone.valid:
        errors.append(zone.error)

    domain = validator.validate_domain_name(config.domain_name)
    if not domain.valid:
        errors.append(domain.error)

    for region in config.regions:
        if not isinstance(region, Region):
            errors.append(InputValidationError(
                code=InputValidationErrorCode.UNSUPPORTED_REGION,
                message=f"Region '{region}' is not supported by the health check platform",
                details={"region": str(region), "supported_regions": Region.supported_values()},
            ))

    if config.main_region in config.secondary_regions:
        errors.append(InputValidationError(
            code=InputValidationErrorCode.MAIN_IN_SECONDARY,
            message=f"Main region {_name(config.main_region)} must not be listed as a secondary region",
            details={"main_region": _name(config.main_region)},
        ))

    seen: set = set()
    for region in config.secondary_regions:
        if region in seen:
            errors.append(InputValidationError(
                code=InputValidationErrorCode.DUPLICATE_REGION,
                message=f"Secondary region {_name(region)} is listed more than once",
                details={"region": _name(region)},
            ))
        seen.add(region)

    if config.region is not None and config.region not in config.regions:
        errors.append(InputValidationError(
            code=InputValidationErrorCode.REGION_MISMATCH,
            message=f"Deployment region {_name(config.region)} is not part of the configured topology",
            details={
                "region": _name(config.region),
                "configured_regions": [_name(r) for r in config.regions],
            },
        ))

    table = validator.validate_table_name(
        derive_table_name(config.table.base_name, config.table.suffix)
    )
    if not table.valid:
        errors.append(table.error)

    stage = validator.validate_stage_name(config.stage_name)
    if not stage.valid:
        errors.append(stage.error)

    errors.extend(validator.validate_logging(config.logging.level, config.logging.output_format))

    if not config.secondary_regions:
        warnings.append("No secondary regions configured - there is no failover target")
    elif len(config.secondary_regions) > REPLICA_WARNING_THRESHOLD:
        warnings.append(
            f"{len(config.secondary_regions)} replica regions configured - "
            "each replica lengthens table deployment"
        )

    return ConfigValidationResult(valid=not errors, errors=errors, warnings=warnings)


def ensure_valid_config(config: "TopologyConfig") -> ConfigValidationResult:
    """
    Validate a configuration and raise on the first error.

    Raises:
        ConfigurationError: If the configuration has any error
    """
    result = validate_topology_config(config)
    if not result.valid:
        first = result.errors[0]
        raise ConfigurationError(
            code=first.code.value,
            message=first.message,
            details={
                **first.details,
                "errors": [error.message for error in result.errors],
            },
        )
    return result


def _name(region) -> str:
    return region.value if isinstance(region, Region) else str(region)
