"""
Regional endpoint composition.

Each region exposes its own API surface with a dedicated health route,
bound to that region's table handle. The business routes are supplied by
the compute collaborator and carried as descriptions only.
"""

from typing import Iterable

from .enums import ResourceKind
from .models import (
    ExecuteHostname,
    RegionalEndpoint,
    ResourceKey,
    RouteDefinition,
    TableHandle,
)


HEALTH_ROUTE = RouteDefinition(
    method="GET",
    path="/health",
    integration="mock",
    description="Static 200 response used by the regional health check",
)


def create_regional_endpoint(
    table: TableHandle,
    stage_name: str = "prod",
    routes: Iterable[RouteDefinition] = (),
    url_suffix: str = "amazonaws.com",
) -> RegionalEndpoint:
    """
    Compose the API surface of one region.

    Args:
        table: Table handle of the same region
        stage_name: Deployment stage name
        routes: Business routes from the compute collaborator
        url_suffix: Platform root domain of the execute hostname

    Returns:
        RegionalEndpoint exposing GET /health

    Raises:
        ValueError: If a business route collides with the health route
    """
    region = table.region
    business_routes = tuple(routes)
    for route in business_routes:
        if route.method.upper() == HEALTH_ROUTE.method and route.path == HEALTH_ROUTE.path:
            raise ValueError(f"Route {route.method} {route.path} is reserved for the health check")

    key = ResourceKey(region=region, kind=ResourceKind.REST_API)
    return RegionalEndpoint(
        key=key,
        table=table,
        stage_name=stage_name,
        hostname=ExecuteHostname(api_key=key, region=region, url_suffix=url_suffix),
        health_route=HEALTH_ROUTE,
        routes=business_routes,
    )


def health_response_body(endpoint: RegionalEndpoint) -> dict:
    """Body returned by the health route's static integration."""
    return {"status": "ok", "region": endpoint.region.value}
