"""
Configuration dataclasses for the global failover topology.

This module defines the configuration structures used throughout the system,
covering the region layout, the replicated table, health check polling,
and logging, plus loading them from environment-style inputs.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

from .enums import HealthCheckProtocol, Region
from .exceptions import ConfigurationError
from .input_validator import InputValidator, ensure_valid_config


DEFAULT_MAIN_REGION = Region.US_EAST_1
# Every replica region makes the table deployment take longer.
DEFAULT_SECONDARY_REGIONS = (Region.EU_WEST_1, Region.AP_SOUTHEAST_2)


@dataclass(frozen=True)
class TableSettings:
    """Settings of the globally replicated table."""

    base_name: str = "GlobalApplicationTable"
    suffix: Optional[str] = None
    partition_key: str = "pk"
    billing_mode: str = "PAY_PER_REQUEST"


@dataclass(frozen=True)
class HealthCheckSettings:
    """Fixed polling configuration for regional health checks."""

    protocol: HealthCheckProtocol = HealthCheckProtocol.HTTPS
    port: int = 443
    request_interval_seconds: int = 30
    failure_threshold: int = 3


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass(frozen=True)
class TopologyConfig:
    """Main configuration for one topology composition."""

    region: Optional[Region]
    hosted_zone_id: str
    domain_name: str
    main_region: Region = DEFAULT_MAIN_REGION
    secondary_regions: tuple[Region, ...] = DEFAULT_SECONDARY_REGIONS
    table: TableSettings = field(default_factory=TableSettings)
    stage_name: str = "prod"
    url_suffix: str = "amazonaws.com"
    health_check: HealthCheckSettings = field(default_factory=HealthCheckSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def regions(self) -> tuple[Region, ...]:
        """All configured regions, MAIN first."""
        return (self.main_region, *self.secondary_regions)


def parse_region_list(env_val: Optional[str]) -> list[str]:
    """
    Split a comma, semicolon or whitespace separated region list.

    Duplicates are kept so that validation can report them.

    Args:
        env_val: Raw environment value

    Returns:
        List of lowercase region identifiers in input order
    """
    if not env_val:
        return []
    raw = [p.strip() for chunk in env_val.replace(";", ",").split(",") for p in chunk.split()]
    return [r.lower() for r in raw if r]


def _required(env: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = (env.get(name) or "").strip()
        if value:
            return value
    return None


def load_config_from_env(
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Union[str, Path]] = None,
) -> TopologyConfig:
    """
    Build a TopologyConfig from environment variables.

    Values from an optional .env file are used as defaults and are
    overridden by the process environment.

    Args:
        environ: Environment mapping (defaults to os.environ)
        dotenv_path: Optional path of a .env file

    Returns:
        Validated TopologyConfig

    Raises:
        ConfigurationError: If a required input is missing or invalid
    """
    env: dict[str, str] = {}
    if dotenv_path is not None:
        env.update({k: v for k, v in dotenv_values(dotenv_path).items() if v is not None})
    env.update(os.environ if environ is None else environ)

    validator = InputValidator()

    region_value = _required(env, "AWS_REGION", "CDK_DEFAULT_REGION")
    if region_value is None:
        raise ConfigurationError(
            code="missing_input",
            message="Could not resolve region. Please pass it with the AWS_REGION environment variable.",
            details={"input": "AWS_REGION"},
        )
    hosted_zone_id = _required(env, "HOSTED_ZONE_ID")
    if hosted_zone_id is None:
        raise ConfigurationError(
            code="missing_input",
            message="Could not resolve hostedZoneId. Please pass it with the HOSTED_ZONE_ID environment variable.",
            details={"input": "HOSTED_ZONE_ID"},
        )
    domain_name = _required(env, "DOMAIN_NAME")
    if domain_name is None:
        raise ConfigurationError(
            code="missing_input",
            message="Could not resolve domainName. Please pass it with the DOMAIN_NAME environment variable.",
            details={"input": "DOMAIN_NAME"},
        )

    region = validator.require_region(region_value, "AWS_REGION")

    main_value = _required(env, "MAIN_REGION")
    main_region = (
        validator.require_region(main_value, "MAIN_REGION")
        if main_value else DEFAULT_MAIN_REGION
    )

    if "SECONDARY_REGIONS" in env:
        secondary_regions = tuple(
            validator.require_region(value, "SECONDARY_REGIONS")
            for value in parse_region_list(env["SECONDARY_REGIONS"])
        )
    else:
        secondary_regions = DEFAULT_SECONDARY_REGIONS

    table = TableSettings(suffix=_required(env, "TABLE_SUFFIX"))

    config = TopologyConfig(
        region=region,
        hosted_zone_id=hosted_zone_id,
        domain_name=domain_name,
        main_region=main_region,
        secondary_regions=secondary_regions,
        table=table,
        stage_name=_required(env, "STAGE_NAME") or "prod",
        logging=LoggingConfig(
            level=(_required(env, "LOG_LEVEL") or "info").lower(),
            output_format=(_required(env, "LOG_FORMAT") or "text").lower(),
        ),
    )
    ensure_valid_config(config)
    return config
