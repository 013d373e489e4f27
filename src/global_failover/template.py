"""
Template rendering at the provisioning boundary.

Turns a composed topology into one declarative resource document per
region. This is the only place where resource keys become logical id
strings and hostnames become join expressions.
"""

import json

from .models import (
    BasePathMapping,
    Certificate,
    DomainNameResource,
    Entity,
    ExecuteHostname,
    FailoverRecord,
    HealthCheck,
    RegionalEndpoint,
    RegionalTopology,
    ResourceKey,
    TableHandle,
    Topology,
)


def _ref(key: ResourceKey) -> dict:
    return {"Ref": key.logical_id()}


def _get_att(key: ResourceKey, attribute: str) -> dict:
    return {"Fn::GetAtt": [key.logical_id(), attribute]}


def _table(table: TableHandle) -> dict:
    replicas = [table.region, *table.replication_regions]
    return {
        "Type": "AWS::DynamoDB::GlobalTable",
        "Properties": {
            "TableName": table.table_name,
            "BillingMode": table.billing_mode,
            "AttributeDefinitions": [
                {"AttributeName": table.partition_key, "AttributeType": "S"},
            ],
            "KeySchema": [
                {"AttributeName": table.partition_key, "KeyType": "HASH"},
            ],
            "StreamSpecification": {"StreamViewType": "NEW_AND_OLD_IMAGES"},
            "Replicas": [{"Region": region.value} for region in replicas],
        },
    }


def _endpoint(endpoint: RegionalEndpoint) -> dict:
    routes = [endpoint.health_route, *endpoint.routes]
    return {
        "Type": "AWS::ApiGateway::RestApi",
        "Properties": {
            "Name": f"GlobalApplication-{endpoint.region.value}",
            "EndpointConfiguration": {"Types": ["REGIONAL"]},
        },
        "Metadata": {
            "StageName": endpoint.stage_name,
            "TableName": endpoint.table.table_name,
            "Routes": [
                {"Method": r.method, "Path": r.path, "Integration": r.integration}
                for r in routes
            ],
        },
    }


def _certificate(certificate: Certificate) -> dict:
    return {
        "Type": "AWS::CertificateManager::Certificate",
        "Properties": {
            "DomainName": certificate.domain_name,
            "ValidationMethod": certificate.validation_method,
            "DomainValidationOptions": [{
                "DomainName": certificate.domain_name,
                "HostedZoneId": certificate.hosted_zone_id,
            }],
        },
    }


def _domain_name(domain: DomainNameResource) -> dict:
    return {
        "Type": "AWS::ApiGateway::DomainName",
        "Properties": {
            "DomainName": domain.domain_name,
            "RegionalCertificateArn": _ref(domain.certificate_key),
            "SecurityPolicy": domain.security_policy,
            "EndpointConfiguration": {"Types": [domain.endpoint_type]},
        },
    }


def _mapping(mapping: BasePathMapping) -> dict:
    return {
        "Type": "AWS::ApiGateway::BasePathMapping",
        "Properties": {
            "DomainName": _ref(mapping.domain_key),
            "RestApiId": _ref(mapping.api_key),
            "Stage": mapping.stage_name,
        },
    }


def _execute_hostname(hostname: ExecuteHostname) -> dict:
    return {
        "Fn::Join": [".", [
            _ref(hostname.api_key),
            hostname.service,
            hostname.region.value,
            hostname.url_suffix,
        ]],
    }


def _health_check(check: HealthCheck) -> dict:
    return {
        "Type": "AWS::Route53::HealthCheck",
        "Properties": {
            "HealthCheckConfig": {
                "Type": check.protocol.value,
                "FullyQualifiedDomainName": _execute_hostname(check.hostname),
                "Port": check.port,
                "RequestInterval": check.request_interval_seconds,
                "FailureThreshold": check.failure_threshold,
                "ResourcePath": check.resource_path,
            },
        },
    }


def _record(record: FailoverRecord) -> dict:
    return {
        "Type": "AWS::Route53::RecordSet",
        "Properties": {
            "HostedZoneId": record.hosted_zone_id,
            "Name": f"{record.domain_name}.",
            "Type": record.record_type,
            "Region": record.region.value,
            "SetIdentifier": record.set_identifier,
            "HealthCheckId": _get_att(record.health_check_key, "HealthCheckId"),
            "AliasTarget": {
                "DNSName": _get_att(record.alias_target_key, "RegionalDomainName"),
                "HostedZoneId": _get_att(record.alias_target_key, "RegionalHostedZoneId"),
                "EvaluateTargetHealth": False,
            },
        },
    }


_RENDERERS = {
    RegionalEndpoint: _endpoint,
    Certificate: _certificate,
    DomainNameResource: _domain_name,
    BasePathMapping: _mapping,
    HealthCheck: _health_check,
    FailoverRecord: _record,
}


def render_entity(entity: Entity) -> dict:
    """
    Render one entity as a resource description.

    Raises:
        ValueError: If the entity is a table reference, which is not a resource
    """
    if isinstance(entity, TableHandle):
        if not entity.owning:
            raise ValueError(f"Table reference {entity.key} is not a resource")
        return _table(entity)
    return _RENDERERS[type(entity)](entity)


def render_region_template(regional: RegionalTopology) -> dict:
    """
    Render one region's chain as a resource document.

    The MAIN region defines the table; SECONDARY regions list the table
    they import by name under Metadata.
    """
    resources: dict[str, dict] = {}
    metadata: dict = {
        "Region": regional.region.value,
        "Role": regional.role.value,
    }

    for entity in regional.entities():
        if isinstance(entity, TableHandle) and not entity.owning:
            metadata["ImportedTable"] = {"TableName": entity.table_name}
            continue
        resources[entity.key.logical_id()] = render_entity(entity)

    endpoint = regional.endpoint
    return {
        "Description": f"Global application resources for {regional.region.value}",
        "Metadata": metadata,
        "Resources": resources,
        "Outputs": {
            "ExecuteApiDomainName": {"Value": _execute_hostname(endpoint.hostname)},
            "HealthCheckPath": {"Value": endpoint.stage_health_path},
            "SetIdentifier": {"Value": regional.record.set_identifier},
        },
    }


def render_topology(topology: Topology) -> dict[str, dict]:
    """Render every region's document, keyed by region identifier, MAIN first."""
    return {
        regional.region.value: render_region_template(regional)
        for regional in topology.regions
    }


def dump_template(template: dict) -> str:
    """Serialize a rendered document deterministically."""
    return json.dumps(template, indent=2, sort_keys=True, ensure_ascii=False)
