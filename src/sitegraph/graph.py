from __future__ import annotations

import copy
from collections.abc import Iterable, Sequence
from typing import Any

import structlog

from .exceptions import GraphConsistencyError
from .intrinsics import ACCOUNT_ID, STACK_NAME, find_references, get_att, ref, sub
from .models import (
    AliasBinding,
    ExternalIds,
    LogicalResource,
    ResourceGraph,
    ResourceKind,
    SiteConfig,
    Topology,
)
from .topology import (
    CONTENT_CDN,
    REDIRECT_CDN,
    alias_bindings,
    cdn_aliases,
    custom_error_responses,
    origin_request_associations,
    redirect_target,
)

logger = structlog.get_logger(__name__)

DNS_ZONE = "DNSZone"
LOGS_BUCKET = "LogsBucket"
CONTENT_BUCKET = "ContentBucket"
CONTENT_BUCKET_POLICY = "ContentBucketPolicy"
ORIGIN_ACCESS_IDENTITY = "OriginAccessIdentity"
CONTENT_DEPLOYMENT_USER = "ContentDeploymentUser"
REDIRECT_BUCKET = "RedirectBucket"

INDEX_DOCUMENT = "index.html"
PRICE_CLASS = "PriceClass_200"
HTTP_VERSION = "http2"
MINIMUM_PROTOCOL_VERSION = "TLSv1.1_2016"

_RESOURCE_TYPES = {
    ResourceKind.ZONE: "AWS::Route53::HostedZone",
    ResourceKind.DNS_RECORD: "AWS::Route53::RecordSet",
    ResourceKind.BUCKET: "AWS::S3::Bucket",
    ResourceKind.BUCKET_POLICY: "AWS::S3::BucketPolicy",
    ResourceKind.CDN: "AWS::CloudFront::Distribution",
    ResourceKind.IDENTITY_PRINCIPAL: "AWS::CloudFront::CloudFrontOriginAccessIdentity",
    ResourceKind.SERVICE_ACCOUNT: "AWS::IAM::User",
}

_PUBLIC_ACCESS_BLOCK = {
    "BlockPublicAcls": True,
    "BlockPublicPolicy": True,
    "IgnorePublicAcls": True,
    "RestrictPublicBuckets": True,
}

_BUCKET_ENCRYPTION = {
    "ServerSideEncryptionConfiguration": [
        {"ServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"}}
    ]
}

_FORWARDED_VALUES = {"Cookies": {"Forward": "none"}, "QueryString": False}


def _resource(
    resource_id: str,
    kind: ResourceKind,
    properties: dict[str, Any],
    after: Iterable[str] = (),
) -> LogicalResource:
    """Create a resource whose edges are its references plus explicit ordering.

    Properties are deep-copied so no nested value is shared between resources
    or between graphs.
    """
    edges = set(find_references(properties)) | set(after)
    return LogicalResource(
        id=resource_id,
        kind=kind,
        resource_type=_RESOURCE_TYPES[kind],
        properties=copy.deepcopy(properties),
        depends_on=tuple(sorted(edges)),
    )


def bucket_name(domain_name: str, suffix: str | None = None) -> str:
    """Derive a bucket name from a domain name (example.com -> example-com)."""
    base = "-".join(domain_name.split("."))
    return f"{base}-{suffix}" if suffix else base


def _dns_zone(config: SiteConfig) -> LogicalResource:
    return _resource(DNS_ZONE, ResourceKind.ZONE, {"Name": config.domain_name})


def _logs_bucket(config: SiteConfig) -> LogicalResource:
    # LogDeliveryWrite lets the log delivery group write; nothing else is granted.
    return _resource(
        LOGS_BUCKET,
        ResourceKind.BUCKET,
        {
            "BucketName": bucket_name(config.domain_name, "logs"),
            "BucketEncryption": _BUCKET_ENCRYPTION,
            "AccessControl": "LogDeliveryWrite",
            "PublicAccessBlockConfiguration": _PUBLIC_ACCESS_BLOCK,
        },
    )


def _content_bucket(config: SiteConfig) -> LogicalResource:
    return _resource(
        CONTENT_BUCKET,
        ResourceKind.BUCKET,
        {
            "BucketName": bucket_name(config.domain_name),
            "BucketEncryption": _BUCKET_ENCRYPTION,
            "PublicAccessBlockConfiguration": _PUBLIC_ACCESS_BLOCK,
            "LoggingConfiguration": {
                "DestinationBucketName": ref(LOGS_BUCKET),
                "LogFilePrefix": "s3/website/",
            },
        },
        after=[LOGS_BUCKET],
    )


def _origin_access_identity() -> LogicalResource:
    return _resource(
        ORIGIN_ACCESS_IDENTITY,
        ResourceKind.IDENTITY_PRINCIPAL,
        {"CloudFrontOriginAccessIdentityConfig": {"Comment": sub(f"${{{CONTENT_BUCKET}}}")}},
    )


def _content_bucket_policy() -> LogicalResource:
    return _resource(
        CONTENT_BUCKET_POLICY,
        ResourceKind.BUCKET_POLICY,
        {
            "Bucket": ref(CONTENT_BUCKET),
            "PolicyDocument": {
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Principal": {
                            "AWS": sub(
                                "arn:aws:iam::cloudfront:user/CloudFront Origin Access Identity "
                                f"${{{ORIGIN_ACCESS_IDENTITY}}}"
                            )
                        },
                        "Action": "s3:GetObject",
                        "Resource": sub(f"arn:aws:s3:::${{{CONTENT_BUCKET}}}/*"),
                    }
                ]
            },
        },
    )


def _viewer_certificate(config: SiteConfig) -> dict[str, Any]:
    return {
        "AcmCertificateArn": config.certificate_ref,
        "SslSupportMethod": "sni-only",
        "MinimumProtocolVersion": MINIMUM_PROTOCOL_VERSION,
    }


def _content_cdn(config: SiteConfig, topology: Topology) -> LogicalResource:
    default_behavior: dict[str, Any] = {
        "TargetOriginId": "default",
        "ForwardedValues": _FORWARDED_VALUES,
        "ViewerProtocolPolicy": "redirect-to-https",
        "Compress": True,
    }
    associations = origin_request_associations(config, topology)
    if associations:
        default_behavior["LambdaFunctionAssociations"] = associations

    distribution: dict[str, Any] = {
        "Enabled": True,
        "PriceClass": PRICE_CLASS,
        "HttpVersion": HTTP_VERSION,
        "DefaultRootObject": INDEX_DOCUMENT,
    }
    aliases = cdn_aliases(config, topology)[CONTENT_CDN]
    if aliases:
        distribution["Aliases"] = aliases
    if topology.has_certificate:
        distribution["ViewerCertificate"] = _viewer_certificate(config)
    distribution["Logging"] = {
        "Bucket": get_att(LOGS_BUCKET, "DomainName"),
        "Prefix": "cloudfront/website/",
        "IncludeCookies": True,
    }
    distribution["Origins"] = [
        {
            "Id": "default",
            "DomainName": get_att(CONTENT_BUCKET, "DomainName"),
            "S3OriginConfig": {
                "OriginAccessIdentity": sub(
                    f"origin-access-identity/cloudfront/${{{ORIGIN_ACCESS_IDENTITY}}}"
                )
            },
        }
    ]
    distribution["DefaultCacheBehavior"] = default_behavior
    error_responses = custom_error_responses(config, topology)
    if error_responses:
        distribution["CustomErrorResponses"] = error_responses

    return _resource(CONTENT_CDN, ResourceKind.CDN, {"DistributionConfig": distribution})


def _content_deployment_user(external_ids: ExternalIds) -> LogicalResource:
    """IAM user allowed to upload content and invalidate the content CDN only."""
    if external_ids.stack_name:
        user_name: Any = f"{external_ids.stack_name}-ContentDeploymentUser"
    else:
        user_name = sub(f"{STACK_NAME}-ContentDeploymentUser")
    account_id = external_ids.account_id or ACCOUNT_ID

    return _resource(
        CONTENT_DEPLOYMENT_USER,
        ResourceKind.SERVICE_ACCOUNT,
        {
            "UserName": user_name,
            "Policies": [
                {
                    "PolicyName": "S3",
                    "PolicyDocument": {
                        "Version": "2012-10-17",
                        "Statement": [
                            {
                                "Effect": "Allow",
                                "Action": ["s3:ListBucket", "s3:PutObject", "s3:DeleteObject"],
                                "Resource": [
                                    get_att(CONTENT_BUCKET, "Arn"),
                                    sub(f"${{{CONTENT_BUCKET}.Arn}}/*"),
                                ],
                            }
                        ],
                    },
                },
                {
                    "PolicyName": "CloudFront",
                    "PolicyDocument": {
                        "Version": "2012-10-17",
                        "Statement": [
                            {
                                "Effect": "Allow",
                                "Action": ["cloudfront:CreateInvalidation"],
                                "Resource": [
                                    sub(
                                        f"arn:aws:cloudfront::{account_id}:distribution/"
                                        f"${{{CONTENT_CDN}}}"
                                    )
                                ],
                            }
                        ],
                    },
                },
            ],
        },
    )


def _redirect_bucket(config: SiteConfig, topology: Topology) -> LogicalResource:
    return _resource(
        REDIRECT_BUCKET,
        ResourceKind.BUCKET,
        {
            "BucketName": bucket_name(config.domain_name, "redirect"),
            "PublicAccessBlockConfiguration": _PUBLIC_ACCESS_BLOCK,
            "WebsiteConfiguration": {
                "RedirectAllRequestsTo": {
                    "Protocol": "https",
                    "HostName": redirect_target(config, topology),
                }
            },
            "LoggingConfiguration": {
                "DestinationBucketName": ref(LOGS_BUCKET),
                "LogFilePrefix": "s3/redirect/",
            },
        },
        after=[LOGS_BUCKET],
    )


def _redirect_cdn(config: SiteConfig, topology: Topology) -> LogicalResource:
    distribution: dict[str, Any] = {
        "Enabled": True,
        "PriceClass": PRICE_CLASS,
        "HttpVersion": HTTP_VERSION,
    }
    aliases = cdn_aliases(config, topology)[REDIRECT_CDN]
    if aliases:
        distribution["Aliases"] = aliases
    if topology.has_certificate:
        distribution["ViewerCertificate"] = _viewer_certificate(config)
    # The website endpoint is the host part of the bucket's http:// website URL.
    distribution["Origins"] = [
        {
            "Id": "default",
            "DomainName": {
                "Fn::Select": [1, {"Fn::Split": ["://", get_att(REDIRECT_BUCKET, "WebsiteURL")]}]
            },
            "CustomOriginConfig": {"OriginProtocolPolicy": "http-only"},
        }
    ]
    distribution["DefaultCacheBehavior"] = {
        "TargetOriginId": "default",
        "ForwardedValues": _FORWARDED_VALUES,
        "ViewerProtocolPolicy": "allow-all",
    }
    distribution["Logging"] = {
        "Bucket": get_att(LOGS_BUCKET, "DomainName"),
        "Prefix": "cloudfront/redirect/",
        "IncludeCookies": True,
    }
    return _resource(REDIRECT_CDN, ResourceKind.CDN, {"DistributionConfig": distribution})


def _alias_record(binding: AliasBinding, external_ids: ExternalIds) -> LogicalResource:
    return _resource(
        binding.record_id,
        ResourceKind.DNS_RECORD,
        {
            "HostedZoneId": ref(DNS_ZONE),
            "Type": "A",
            "Name": binding.hostname,
            "AliasTarget": {
                "DNSName": get_att(binding.cdn_id, "DomainName"),
                "HostedZoneId": external_ids.cdn_hosted_zone_id,
            },
        },
        after=[DNS_ZONE],
    )


def _consistency_error(reason: str, **context: Any) -> GraphConsistencyError:
    logger.error("graph_consistency_violation", reason=reason, **context)
    return GraphConsistencyError(reason)


def order_resources(resources: Sequence[LogicalResource]) -> list[LogicalResource]:
    """Order resources so every resource follows all of its dependencies.

    Ties are broken by declaration order, so the result is deterministic.

    Raises:
        GraphConsistencyError: On duplicate ids, dangling edges or cycles
    """
    by_id: dict[str, LogicalResource] = {}
    for resource in resources:
        if resource.id in by_id:
            raise _consistency_error(f"duplicate resource id: {resource.id}", resource=resource.id)
        by_id[resource.id] = resource

    for resource in resources:
        for dependency in resource.depends_on:
            if dependency not in by_id:
                raise _consistency_error(
                    f"{resource.id} depends on unknown resource {dependency}",
                    resource=resource.id,
                    dependency=dependency,
                )

    ordered: list[LogicalResource] = []
    emitted: set[str] = set()
    pending = list(resources)
    while pending:
        ready = next(
            (r for r in pending if all(dependency in emitted for dependency in r.depends_on)),
            None,
        )
        if ready is None:
            raise _consistency_error(
                "dependency cycle between resources: "
                + ", ".join(sorted(resource.id for resource in pending)),
                resources=sorted(resource.id for resource in pending),
            )
        ordered.append(ready)
        emitted.add(ready.id)
        pending.remove(ready)
    return ordered


def _check_bindings(graph: ResourceGraph) -> None:
    cdn_ids = {resource.id for resource in graph.of_kind(ResourceKind.CDN)}
    for binding in graph.alias_bindings:
        if binding.cdn_id not in cdn_ids:
            raise _consistency_error(
                f"{binding.hostname} is bound to unknown CDN {binding.cdn_id}",
                hostname=binding.hostname,
            )
        if not graph.has(binding.record_id):
            raise _consistency_error(
                f"{binding.hostname} has no DNS record {binding.record_id}",
                hostname=binding.hostname,
            )
        target = graph.get(binding.record_id).properties["AliasTarget"]["DNSName"]
        if target != get_att(binding.cdn_id, "DomainName"):
            raise _consistency_error(
                f"DNS record for {binding.hostname} does not target {binding.cdn_id}",
                hostname=binding.hostname,
            )
        if (binding.hostname in graph.cdn_aliases(binding.cdn_id)) != binding.attached:
            raise _consistency_error(
                f"alias attachment of {binding.hostname} does not match its binding",
                hostname=binding.hostname,
            )
    bound_cdns = [binding.cdn_id for binding in graph.alias_bindings]
    if len(set(bound_cdns)) != len(bound_cdns):
        raise _consistency_error("hostnames must resolve to different CDNs", cdns=bound_cdns)


def build(
    topology: Topology, config: SiteConfig, external_ids: ExternalIds | None = None
) -> ResourceGraph:
    """Materialize a resolved topology into an ordered resource graph.

    Args:
        topology: Flags returned by ``resolve(config)``
        config: The validated site configuration
        external_ids: Engine-owned identifiers; pseudo parameters are used when unset

    Returns:
        ResourceGraph with resources in creation order

    Raises:
        GraphConsistencyError: If the resources do not form a valid graph
    """
    external_ids = external_ids or ExternalIds()
    bindings = alias_bindings(config, topology)

    resources = [
        _dns_zone(config),
        _logs_bucket(config),
        _content_bucket(config),
        _origin_access_identity(),
        _content_bucket_policy(),
        _content_cdn(config, topology),
        _content_deployment_user(external_ids),
    ]
    if topology.has_www:
        resources.append(_redirect_bucket(config, topology))
        resources.append(_redirect_cdn(config, topology))
    resources.extend(_alias_record(binding, external_ids) for binding in bindings)

    graph = ResourceGraph(
        resources=tuple(order_resources(resources)),
        alias_bindings=tuple(bindings),
        redirect_target=redirect_target(config, topology),
    )
    _check_bindings(graph)

    logger.info(
        "resource_graph_built",
        domain_name=config.domain_name,
        resources=len(graph.resources),
        cdns=len(graph.of_kind(ResourceKind.CDN)),
    )
    return graph
