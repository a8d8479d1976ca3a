"""Render a resource graph as a CloudFormation template."""

from __future__ import annotations

import json
from typing import Any

import structlog

from .exceptions import GraphConsistencyError
from .graph import CONTENT_BUCKET, CONTENT_DEPLOYMENT_USER, DNS_ZONE
from .intrinsics import find_references, get_att, ref
from .models import ResourceGraph
from .topology import CONTENT_CDN

logger = structlog.get_logger(__name__)

TEMPLATE_FORMAT_VERSION = "2010-09-09"
DEFAULT_DESCRIPTION = (
    "A static website hosted on S3 with a class 200 CloudFront CDN and an "
    "authoritative DNS zone in Route 53."
)


def _outputs() -> dict[str, Any]:
    return {
        "ContentBucketName": {
            "Description": "Bucket that receives the website content",
            "Value": ref(CONTENT_BUCKET),
        },
        "ContentDistributionId": {
            "Description": "Distribution to invalidate after a deployment",
            "Value": ref(CONTENT_CDN),
        },
        "ContentDistributionDomainName": {
            "Description": "CloudFront domain name of the content distribution",
            "Value": get_att(CONTENT_CDN, "DomainName"),
        },
        "ContentDeploymentUserName": {
            "Description": "IAM user allowed to deploy content",
            "Value": ref(CONTENT_DEPLOYMENT_USER),
        },
        "NameServers": {
            "Description": "Name servers to delegate the domain to",
            "Value": {"Fn::Join": [",", get_att(DNS_ZONE, "NameServers")]},
        },
    }


def render_template(graph: ResourceGraph, description: str | None = None) -> dict[str, Any]:
    """Render a resource graph as a CloudFormation template document.

    Resources keep their logical ids and appear in creation order. Each
    resource lists its dependencies in ``DependsOn``.

    Raises:
        GraphConsistencyError: If the template references an unknown resource
    """
    resources: dict[str, Any] = {}
    for resource in graph.resources:
        body: dict[str, Any] = {"Type": resource.resource_type}
        if resource.depends_on:
            body["DependsOn"] = list(resource.depends_on)
        body["Properties"] = resource.properties
        resources[resource.id] = body

    outputs = _outputs()
    for reference in find_references(outputs):
        if reference not in resources:
            logger.error("template_output_unresolved", resource=reference)
            raise GraphConsistencyError(f"template output references unknown resource {reference}")

    return {
        "AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION,
        "Description": description or DEFAULT_DESCRIPTION,
        "Resources": resources,
        "Outputs": outputs,
    }


def render_template_json(graph: ResourceGraph, description: str | None = None) -> str:
    return json.dumps(render_template(graph, description), indent=2)
