"""
Health checks for regional endpoints.

This module composes the health check bound to each regional endpoint,
tracks the healthy/unhealthy state machine fed by external observations,
and provides an optional one-shot probe of the resolved health URLs.

Health check states:
- UNKNOWN: created, no successful poll and fewer than `failure_threshold`
  consecutive failures yet
- HEALTHY / UNHEALTHY: binary signal consumed by the region's failover record

Transitions are driven by the monitoring substrate; this layer only wires a
check's identity to its target and records what it is told.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional

import httpx

from .config import HealthCheckSettings
from .enums import HealthStatus, Region, ResourceKind
from .models import HealthCheck, RegionalEndpoint, ResourceKey


def create_health_check(
    endpoint: RegionalEndpoint,
    settings: Optional[HealthCheckSettings] = None,
) -> HealthCheck:
    """
    Compose the health check of one regional endpoint.

    The target is the endpoint's execute hostname and the path is scoped
    by the same endpoint's stage: /{stage}/health.

    Args:
        endpoint: Regional endpoint to monitor
        settings: Polling configuration (HTTPS, port 443, 30s by default)

    Returns:
        HealthCheck keyed to the endpoint's region
    """
    settings = settings or HealthCheckSettings()
    return HealthCheck(
        key=ResourceKey(region=endpoint.region, kind=ResourceKind.HEALTH_CHECK),
        endpoint_key=endpoint.key,
        hostname=endpoint.hostname,
        resource_path=endpoint.stage_health_path,
        protocol=settings.protocol,
        port=settings.port,
        request_interval_seconds=settings.request_interval_seconds,
        failure_threshold=settings.failure_threshold,
    )


@dataclass
class HealthTransition:
    """A single recorded state change."""

    region: Region
    previous: HealthStatus
    current: HealthStatus
    timestamp: float


@dataclass
class _CheckState:
    status: HealthStatus = HealthStatus.UNKNOWN
    failure_threshold: int = 3
    opposing_observations: int = 0


class HealthCheckMonitor:
    """
    Tracks the state of every health check of a topology.

    A check leaves UNKNOWN on its first successful poll, or as UNHEALTHY
    after `failure_threshold` consecutive failed polls. After that it flips
    only when `failure_threshold` consecutive observations disagree with its
    current state. Nothing ever returns to UNKNOWN.
    """

    def __init__(self, health_checks: list[HealthCheck]) -> None:
        self._states: dict[ResourceKey, _CheckState] = {
            check.key: _CheckState(failure_threshold=check.failure_threshold)
            for check in health_checks
        }
        self._transitions: list[HealthTransition] = []

    @property
    def transitions(self) -> list[HealthTransition]:
        """All recorded state changes, oldest first."""
        return self._transitions.copy()

    def status(self, key: ResourceKey) -> HealthStatus:
        return self._states[key].status

    def statuses(self) -> dict[ResourceKey, HealthStatus]:
        """Current status of every tracked check."""
        return {key: state.status for key, state in self._states.items()}

    def observe(self, key: ResourceKey, healthy: bool) -> HealthStatus:
        """
        Record one poll outcome for a health check.

        Args:
            key: Health check key
            healthy: Whether the poll succeeded

        Returns:
            The check's status after the observation

        Raises:
            KeyError: If the check is not tracked by this monitor
        """
        state = self._states[key]
        observed = HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY

        if state.status is HealthStatus.UNKNOWN and healthy:
            self._transition(key, state, observed)
            return state.status

        if observed is state.status:
            state.opposing_observations = 0
            return state.status

        # From UNKNOWN only failures count here
        state.opposing_observations += 1
        if state.opposing_observations >= state.failure_threshold:
            self._transition(key, state, observed)
        return state.status

    def _transition(self, key: ResourceKey, state: _CheckState, new_status: HealthStatus) -> None:
        self._transitions.append(HealthTransition(
            region=key.region,
            previous=state.status,
            current=new_status,
            timestamp=time.time(),
        ))
        state.status = new_status
        state.opposing_observations = 0


@dataclass
class HealthProbeResult:
    """Result of probing one health URL."""

    region: Region
    url: str
    status: HealthStatus
    response_time_ms: float
    http_status_code: Optional[int] = None
    error: Optional[str] = None


@dataclass
class HealthProbeReport:
    """Results of probing every health URL of a topology."""

    results: list[HealthProbeResult] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return bool(self.results) and all(r.status is HealthStatus.HEALTHY for r in self.results)

    @property
    def unhealthy_regions(self) -> list[Region]:
        return [r.region for r in self.results if r.status is not HealthStatus.HEALTHY]


class HealthCheckVerifier:
    """
    One-shot probe of provisioned health URLs.

    Polls each check's resolved URL the way the monitoring substrate would
    (TLS verified, 2xx and 3xx count as healthy). Used to confirm a freshly
    provisioned topology answers before relying on DNS failover.
    """

    PROBE_TIMEOUT = 5.0

    def __init__(
        self,
        timeout: float = PROBE_TIMEOUT,
        simulation_mode: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the verifier.

        Args:
            timeout: Request timeout in seconds
            simulation_mode: If True, no real network requests are made
            transport: Optional httpx transport (used to stub the network)
        """
        self._timeout = timeout
        self._simulation_mode = simulation_mode
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HealthCheckVerifier":
        self._client = httpx.AsyncClient(
            verify=True,
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=False,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def probe(self, health_check: HealthCheck, api_id: str) -> HealthProbeResult:
        """
        Probe one health check's target.

        Args:
            health_check: Health check to probe
            api_id: Platform-assigned API id of the check's endpoint

        Returns:
            HealthProbeResult; network failures are reported as UNHEALTHY
        """
        url = health_check.target_url(api_id)

        if self._simulation_mode:
            return HealthProbeResult(
                region=health_check.region,
                url=url,
                status=HealthStatus.HEALTHY,
                response_time_ms=0.0,
                http_status_code=200,
            )

        if self._client is None:
            raise RuntimeError("HealthCheckVerifier must be used as an async context manager")

        start = time.perf_counter()
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            return HealthProbeResult(
                region=health_check.region,
                url=url,
                status=HealthStatus.UNHEALTHY,
                response_time_ms=(time.perf_counter() - start) * 1000,
                error=f"{type(e).__name__}: {e}",
            )

        healthy = 200 <= response.status_code < 400
        return HealthProbeResult(
            region=health_check.region,
            url=url,
            status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
            response_time_ms=(time.perf_counter() - start) * 1000,
            http_status_code=response.status_code,
            error=None if healthy else f"HTTP {response.status_code}",
        )

    async def probe_all(
        self,
        health_checks: list[HealthCheck],
        api_ids: dict[ResourceKey, str],
    ) -> HealthProbeReport:
        """
        Probe every health check concurrently.

        Args:
            health_checks: Checks to probe
            api_ids: API id per endpoint key

        Returns:
            HealthProbeReport in the order of `health_checks`

        Raises:
            KeyError: If an endpoint has no API id
        """
        results = await asyncio.gather(*(
            self.probe(check, api_ids[check.endpoint_key]) for check in health_checks
        ))
        return HealthProbeReport(results=list(results))
