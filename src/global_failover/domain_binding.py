"""
Certificate and domain binding.

The same domain name is attached to every region. Certificates and
domain-name resources are singletons per name within their provisioning
scope, so each is keyed by region rather than by domain name.
"""

from .enums import ResourceKind
from .models import (
    BasePathMapping,
    Certificate,
    DomainBinding,
    DomainNameResource,
    RegionalEndpoint,
    ResourceKey,
)


def bind_domain(
    domain_name: str,
    hosted_zone_id: str,
    endpoint: RegionalEndpoint,
) -> DomainBinding:
    """
    Attach the shared domain to one region's endpoint.

    Creates a DNS-validated certificate for the region, a TLS 1.2 regional
    domain-name resource using it, and a base-path mapping from that
    domain-name resource onto the endpoint's stage.

    Args:
        domain_name: Canonical shared domain name
        hosted_zone_id: Hosted zone holding the domain's records
        endpoint: Regional endpoint the domain should route into

    Returns:
        DomainBinding for the endpoint's region
    """
    region = endpoint.region

    certificate = Certificate(
        key=ResourceKey(region=region, kind=ResourceKind.CERTIFICATE),
        domain_name=domain_name,
        hosted_zone_id=hosted_zone_id,
    )
    domain = DomainNameResource(
        key=ResourceKey(region=region, kind=ResourceKind.DOMAIN_NAME),
        domain_name=domain_name,
        certificate_key=certificate.key,
    )
    mapping = BasePathMapping(
        key=ResourceKey(region=region, kind=ResourceKind.BASE_PATH_MAPPING),
        domain_key=domain.key,
        api_key=endpoint.key,
        stage_name=endpoint.stage_name,
    )

    return DomainBinding(
        region=region,
        domain_name=domain_name,
        hosted_zone_id=hosted_zone_id,
        certificate=certificate,
        domain=domain,
        mapping=mapping,
    )
