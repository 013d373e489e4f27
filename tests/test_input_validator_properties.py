"""
Property-based tests for input validation.

Uses Hypothesis to verify canonicalization of domains, hosted zone ids and
regions, and the checks applied to a complete topology configuration.
"""

import string

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from global_failover.config import LoggingConfig, TableSettings, TopologyConfig
from global_failover.enums import InputValidationErrorCode, Region
from global_failover.exceptions import ConfigurationError
from global_failover.input_validator import (
    InputValidator,
    ensure_valid_config,
    validate_topology_config,
)


label_strategy = st.text(alphabet=string.ascii_lowercase + string.digits, min_size=1, max_size=20)


@st.composite
def domain_strategy(draw) -> str:
    labels = draw(st.lists(label_strategy, min_size=2, max_size=4))
    return ".".join(labels)


def make_config(**overrides) -> TopologyConfig:
    values = dict(
        region=Region.US_EAST_1,
        hosted_zone_id="Z1D633PJN98FT9",
        domain_name="api.example.com",
    )
    values.update(overrides)
    return TopologyConfig(**values)


class TestDomainCanonicalizationProperty:
    """Domains are lowercased, stripped of a trailing dot and IDNA-encoded."""

    @given(domain=domain_strategy(), upper=st.booleans(), trailing_dot=st.booleans())
    @settings(max_examples=100)
    def test_canonical_form(self, domain: str, upper: bool, trailing_dot: bool) -> None:
        raw = domain.upper() if upper else domain
        if trailing_dot:
            raw += "."

        result = InputValidator().validate_domain_name(raw)

        assert result.valid
        assert result.canonical_value == domain

    def test_unicode_domain_encoded(self) -> None:
        result = InputValidator().validate_domain_name("bücher.example")

        assert result.valid
        assert result.canonical_value == "xn--bcher-kva.example"

    @pytest.mark.parametrize("raw, code", [
        ("", InputValidationErrorCode.MISSING_INPUT),
        ("localhost", InputValidationErrorCode.INVALID_DOMAIN),
        ("api example.com", InputValidationErrorCode.INVALID_DOMAIN),
        ("-api.example.com", InputValidationErrorCode.INVALID_DOMAIN),
        ("api/v1.example.com", InputValidationErrorCode.INVALID_DOMAIN),
    ])
    def test_invalid_domains(self, raw: str, code: InputValidationErrorCode) -> None:
        result = InputValidator().validate_domain_name(raw)

        assert not result.valid
        assert result.error.code is code

    def test_overlong_domain_rejected(self) -> None:
        raw = ".".join(["a" * 60] * 5)

        assert not InputValidator().validate_domain_name(raw).valid


class TestHostedZoneProperty:
    """Hosted zone ids accept the API path prefix and any case."""

    @given(body=st.text(alphabet=string.ascii_uppercase + string.digits, min_size=1, max_size=20))
    @settings(max_examples=100)
    def test_prefix_and_case_normalized(self, body: str) -> None:
        zone_id = f"Z{body}"
        validator = InputValidator()

        assert validator.validate_hosted_zone_id(zone_id).canonical_value == zone_id
        assert validator.validate_hosted_zone_id(f"/hostedzone/{zone_id}").canonical_value == zone_id
        assert validator.validate_hosted_zone_id(zone_id.lower()).canonical_value == zone_id

    @pytest.mark.parametrize("raw", ["X1234", "Z", "Z12-34", "/hostedzone/"])
    def test_malformed_zone_rejected(self, raw: str) -> None:
        result = InputValidator().validate_hosted_zone_id(raw)

        assert not result.valid
        assert result.error.code is InputValidationErrorCode.INVALID_HOSTED_ZONE


class TestRegionValidation:
    """Only the supported region set is accepted."""

    @given(region=st.sampled_from(list(Region)))
    @settings(max_examples=20)
    def test_supported_regions(self, region: Region) -> None:
        validator = InputValidator()

        assert validator.require_region(f"  {region.value.upper()} ", "AWS_REGION") is region

    def test_unsupported_region(self) -> None:
        result = InputValidator().validate_region("eu-central-1")

        assert not result.valid
        assert result.error.code is InputValidationErrorCode.UNSUPPORTED_REGION
        assert "us-east-1" in result.error.details["supported_regions"]


class TestTopologyConfigValidation:
    """Complete configurations are checked before anything is composed."""

    def test_valid_default_configuration(self) -> None:
        result = validate_topology_config(make_config())

        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_all_errors_collected(self) -> None:
        config = make_config(
            region=None,
            hosted_zone_id="",
            secondary_regions=(Region.US_EAST_1, Region.EU_WEST_1, Region.EU_WEST_1),
        )

        result = validate_topology_config(config)

        codes = [error.code for error in result.errors]
        assert codes == [
            InputValidationErrorCode.MISSING_INPUT,
            InputValidationErrorCode.MISSING_INPUT,
            InputValidationErrorCode.MAIN_IN_SECONDARY,
            InputValidationErrorCode.DUPLICATE_REGION,
        ]

    def test_invalid_table_suffix(self) -> None:
        result = validate_topology_config(make_config(table=TableSettings(suffix="bad suffix!")))

        assert [e.code for e in result.errors] == [InputValidationErrorCode.INVALID_TABLE_NAME]

    def test_unsupported_region_entry(self) -> None:
        result = validate_topology_config(make_config(secondary_regions=("mars-north-1",)))

        assert result.errors[0].code is InputValidationErrorCode.UNSUPPORTED_REGION

    @given(count=st.integers(min_value=4, max_value=7))
    @settings(max_examples=10)
    def test_many_replicas_warn(self, count: int) -> None:
        secondaries = tuple(r for r in Region if r is not Region.US_EAST_1)[:count]
        assume(len(secondaries) == count)

        result = validate_topology_config(make_config(secondary_regions=secondaries))

        assert result.valid
        assert len(result.warnings) == 1

    def test_ensure_raises_first_error_with_all_messages(self) -> None:
        config = make_config(hosted_zone_id="bogus", domain_name="")

        with pytest.raises(ConfigurationError) as exc_info:
            ensure_valid_config(config)

        assert exc_info.value.code == "invalid_hosted_zone"
        assert len(exc_info.value.details["errors"]) == 2


class TestStageNameProperty:
    """Stage names are a single non-empty path segment."""

    @given(stage=st.text(alphabet=string.ascii_letters + string.digits + "_-", min_size=1, max_size=128))
    @settings(max_examples=100)
    def test_valid_stage_names(self, stage: str) -> None:
        result = InputValidator().validate_stage_name(stage)

        assert result.valid
        assert result.canonical_value == stage

    @pytest.mark.parametrize("stage", ["", "prod/v1", "/prod", "my stage", "prod\n", "a" * 129])
    def test_invalid_stage_names(self, stage: str) -> None:
        result = InputValidator().validate_stage_name(stage)

        assert not result.valid
        assert result.error.code is InputValidationErrorCode.INVALID_STAGE_NAME

    def test_empty_stage_rejected_in_config(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ensure_valid_config(make_config(stage_name=""))

        assert exc_info.value.code == "invalid_stage_name"


class TestLoggingSettings:
    """Log level and format must be values the logger accepts."""

    def test_defaults_accepted(self) -> None:
        assert InputValidator().validate_logging("info", "text") == []

    def test_both_errors_reported(self) -> None:
        errors = InputValidator().validate_logging("warning", "xml")

        assert [e.details["input"] for e in errors] == ["LOG_LEVEL", "LOG_FORMAT"]
        assert all(e.code is InputValidationErrorCode.INVALID_LOG_SETTING for e in errors)

    def test_invalid_logging_in_config(self) -> None:
        result = validate_topology_config(make_config(logging=LoggingConfig(level="verbose")))

        assert [e.code for e in result.errors] == [InputValidationErrorCode.INVALID_LOG_SETTING]
