"""
Property-based tests for the topology orchestrator.

Uses Hypothesis to verify join-key consistency, per-region cardinality,
deterministic naming and fail-fast configuration handling.
"""

import io
import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from global_failover.audit_logger import AuditLogger
from global_failover.config import HealthCheckSettings, TableSettings, TopologyConfig
from global_failover.enums import LogLevel, Region, RegionRole
from global_failover.exceptions import ConfigurationError
from global_failover.models import RouteDefinition
from global_failover.orchestrator import TopologyOrchestrator, compose_from_env


HOSTED_ZONE_ID = "Z1D633PJN98FT9"
DOMAIN_NAME = "api.example.com"


@st.composite
def region_layout_strategy(draw) -> tuple[Region, tuple[Region, ...]]:
    """Generate a MAIN region and a disjoint, unique SECONDARY list (possibly empty)."""
    main = draw(st.sampled_from(list(Region)))
    others = [r for r in Region if r is not main]
    secondaries = draw(st.lists(st.sampled_from(others), unique=True, max_size=len(others)))
    return main, tuple(secondaries)


@st.composite
def topology_config_strategy(draw) -> TopologyConfig:
    """Generate valid topology configurations."""
    main, secondaries = draw(region_layout_strategy())
    suffix = draw(st.one_of(
        st.none(),
        st.text(alphabet=string.ascii_lowercase + string.digits, min_size=1, max_size=12),
    ))
    return TopologyConfig(
        region=draw(st.sampled_from((main, *secondaries))),
        hosted_zone_id=HOSTED_ZONE_ID,
        domain_name=DOMAIN_NAME,
        main_region=main,
        secondary_regions=secondaries,
        table=TableSettings(suffix=suffix),
        stage_name=draw(st.sampled_from(["prod", "dev", "v1"])),
        health_check=HealthCheckSettings(
            request_interval_seconds=draw(st.sampled_from([10, 30])),
            failure_threshold=draw(st.integers(min_value=1, max_value=10)),
        ),
    )


def make_config(**overrides) -> TopologyConfig:
    values = dict(
        region=Region.US_EAST_1,
        hosted_zone_id=HOSTED_ZONE_ID,
        domain_name=DOMAIN_NAME,
        main_region=Region.US_EAST_1,
        secondary_regions=(Region.EU_WEST_1, Region.AP_SOUTHEAST_2),
    )
    values.update(overrides)
    return TopologyConfig(**values)


class TestTableJoinKeyProperty:
    """
    Property 1: every SECONDARY table name equals MAIN's table name.
    """

    @given(config=topology_config_strategy())
    @settings(max_examples=100)
    def test_secondary_tables_share_main_name(self, config: TopologyConfig) -> None:
        topology = TopologyOrchestrator(config).compose()

        main_table = topology.for_region(config.main_region).table
        assert main_table.owning
        assert main_table.table_name == topology.published_table.name

        for regional in topology.regions[1:]:
            assert regional.role is RegionRole.SECONDARY
            assert not regional.table.owning
            assert regional.table.table_name == main_table.table_name

    @given(config=topology_config_strategy())
    @settings(max_examples=50)
    def test_main_replicates_to_every_secondary(self, config: TopologyConfig) -> None:
        topology = TopologyOrchestrator(config).compose()

        main_table = topology.regions[0].table
        assert main_table.region is config.main_region
        assert main_table.replication_regions == config.secondary_regions

    @given(config=topology_config_strategy())
    @settings(max_examples=50)
    def test_single_region_composition_matches_full(self, config: TopologyConfig) -> None:
        orchestrator = TopologyOrchestrator(config)
        topology = orchestrator.compose()

        regional = orchestrator.compose_region(config.region)

        assert regional == topology.for_region(config.region)


class TestEmptySecondaryProperty:
    """
    Property 2: no SECONDARY regions yields a single-region topology.
    """

    @given(main=st.sampled_from(list(Region)))
    @settings(max_examples=20)
    def test_single_region_topology(self, main: Region) -> None:
        config = make_config(region=main, main_region=main, secondary_regions=())

        topology = TopologyOrchestrator(config).compose()

        assert len(topology.endpoints) == 1
        assert len(topology.records) == 1
        assert topology.regions[0].table.replication_regions == ()
        assert topology.published_table.replication_regions == ()


class TestThreeRegionTopology:
    """
    Property 3: us-east-1 with eu-west-1 and ap-southeast-2 yields three
    records and three health checks, each bound to its own region.
    """

    def test_three_distinct_records_and_checks(self) -> None:
        topology = TopologyOrchestrator(make_config()).compose()

        records = topology.records
        checks = topology.health_checks
        assert len(records) == 3
        assert len(checks) == 3

        identifiers = [record.set_identifier for record in records]
        assert len(set(identifiers)) == 3
        for record in records:
            assert record.region.value in record.set_identifier
            assert record.domain_name == DOMAIN_NAME

        for regional in topology.regions:
            check = regional.health_check
            assert check.region is regional.region
            assert check.endpoint_key == regional.endpoint.key
            assert check.hostname == regional.endpoint.hostname
            assert regional.record.health_check_key == check.key
            assert regional.region.value in check.hostname.resolve("abc123")

    def test_main_processed_first(self) -> None:
        topology = TopologyOrchestrator(make_config()).compose()

        assert [r.region for r in topology.regions] == [
            Region.US_EAST_1,
            Region.EU_WEST_1,
            Region.AP_SOUTHEAST_2,
        ]
        assert topology.regions[0].role is RegionRole.MAIN


class TestFailFastProperty:
    """
    Property 4: missing required inputs raise ConfigurationError before any
    entity is created.
    """

    @pytest.mark.parametrize("field_name", ["domain_name", "hosted_zone_id"])
    @pytest.mark.parametrize("missing", ["", "   "])
    def test_missing_input_raises(self, field_name: str, missing: str) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream, level=LogLevel.DEBUG)
        orchestrator = TopologyOrchestrator(make_config(**{field_name: missing}), logger=logger)

        with pytest.raises(ConfigurationError) as exc_info:
            orchestrator.compose()

        assert exc_info.value.code == "missing_input"
        # Only the rejection was logged: no table published, no region composed
        assert [e.message for e in logger.entries] == ["Configuration rejected"]

    def test_missing_region_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            TopologyOrchestrator(make_config(region=None)).compose()

    def test_main_in_secondaries_rejected(self) -> None:
        config = make_config(secondary_regions=(Region.US_EAST_1, Region.EU_WEST_1))

        with pytest.raises(ConfigurationError) as exc_info:
            TopologyOrchestrator(config).compose()

        assert exc_info.value.code == "main_in_secondary"

    def test_duplicate_secondaries_rejected(self) -> None:
        config = make_config(secondary_regions=(Region.EU_WEST_1, Region.EU_WEST_1))

        with pytest.raises(ConfigurationError) as exc_info:
            TopologyOrchestrator(config).compose()

        assert exc_info.value.code == "duplicate_region"

    def test_compose_region_outside_topology_rejected(self) -> None:
        orchestrator = TopologyOrchestrator(make_config())

        with pytest.raises(ConfigurationError) as exc_info:
            orchestrator.compose_region(Region.SA_EAST_1)

        assert exc_info.value.code == "region_mismatch"

    @pytest.mark.parametrize("stage", ["", "prod/v1", "my stage"])
    def test_invalid_stage_rejected_before_composition(self, stage: str) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            TopologyOrchestrator(make_config(stage_name=stage)).compose()

        assert exc_info.value.code == "invalid_stage_name"

    @given(region=st.sampled_from([Region.US_EAST_1, Region.EU_WEST_1, Region.AP_SOUTHEAST_2]))
    @settings(max_examples=10)
    def test_compose_region_accepts_identifier(self, region: Region) -> None:
        orchestrator = TopologyOrchestrator(make_config())

        regional = orchestrator.compose_region(f" {region.value.upper()} ")

        assert regional == orchestrator.compose_region(region)

    @pytest.mark.parametrize("value, code", [
        ("sa-east-1", "region_mismatch"),
        ("mars-north-1", "unsupported_region"),
    ])
    def test_compose_region_rejects_bad_identifier(self, value: str, code: str) -> None:
        orchestrator = TopologyOrchestrator(make_config())

        with pytest.raises(ConfigurationError) as exc_info:
            orchestrator.compose_region(value)

        assert exc_info.value.code == code


class TestIdempotentNamingProperty:
    """
    Property 5: identical inputs produce identical set-identifiers and entities.
    """

    @given(config=topology_config_strategy())
    @settings(max_examples=50)
    def test_recomposition_is_identical(self, config: TopologyConfig) -> None:
        first = TopologyOrchestrator(config).compose()
        second = TopologyOrchestrator(config).compose()

        assert [r.set_identifier for r in first.records] == [
            r.set_identifier for r in second.records
        ]
        assert first == second


class TestHealthPathProperty:
    """
    Property 6: every health check path is /{stage}/health of its own region's endpoint.
    """

    @given(config=topology_config_strategy())
    @settings(max_examples=100)
    def test_health_path_matches_endpoint_stage(self, config: TopologyConfig) -> None:
        topology = TopologyOrchestrator(config).compose()

        for regional in topology.regions:
            endpoint = regional.endpoint
            check = regional.health_check
            assert check.resource_path == f"/{endpoint.stage_name}/health"
            assert check.resource_path == endpoint.stage_health_path
            assert check.endpoint_key.region is regional.region


class TestOrchestratorInputs:
    """Normalization, business routes and environment composition."""

    def test_domain_and_zone_are_canonicalized(self) -> None:
        config = make_config(domain_name="API.Example.COM.", hosted_zone_id="/hostedzone/z1d633pjn98ft9")

        topology = TopologyOrchestrator(config).compose()

        assert topology.domain_name == "api.example.com"
        assert topology.hosted_zone_id == HOSTED_ZONE_ID
        assert all(r.domain_name == "api.example.com" for r in topology.records)

    def test_business_routes_reach_every_region(self) -> None:
        routes = [RouteDefinition(method="GET", path="/items"), RouteDefinition(method="POST", path="/items")]

        topology = TopologyOrchestrator(make_config(), routes=routes).compose()

        for endpoint in topology.endpoints:
            assert endpoint.routes == tuple(routes)
            assert endpoint.health_route.path == "/health"

    def test_compose_from_env(self) -> None:
        stream = io.StringIO()
        environ = {
            "AWS_REGION": "eu-west-1",
            "HOSTED_ZONE_ID": HOSTED_ZONE_ID,
            "DOMAIN_NAME": DOMAIN_NAME,
            "TABLE_SUFFIX": "staging",
        }

        topology = compose_from_env(
            environ=environ,
            logger=AuditLogger(output_format="text", output_stream=stream),
        )

        assert topology.published_table.name == "GlobalApplicationTable-staging"
        assert len(topology.regions) == 3
        assert "Topology composed" in stream.getvalue()

    def test_warning_logged_without_secondaries(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=io.StringIO())

        TopologyOrchestrator(make_config(secondary_regions=()), logger=logger).compose()

        warnings = [e for e in logger.entries if e.level is LogLevel.WARN]
        assert len(warnings) == 1
        assert "failover" in warnings[0].message
