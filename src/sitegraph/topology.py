"""Resolve which optional parts of a website exist and how hostnames map to CDNs.

The resolver turns a validated SiteConfig into Topology flags. The helpers in
this module derive everything that depends on those flags (hostname roles,
CDN aliases, DNS alias bindings, redirect target, edge function association
and error responses) so that each branch can be tested on its own.

Roles by www mode:

- absent: the domain is served by the content CDN, nothing redirects
- ``HostName``: ``www.<domain>`` is served, ``<domain>`` redirects to it
- ``Redirect``: ``<domain>`` is served, ``www.<domain>`` redirects to it
"""

from __future__ import annotations

from typing import Any

import structlog

from .intrinsics import get_att
from .models import AliasBinding, SiteConfig, Topology, WwwMode

logger = structlog.get_logger(__name__)

CONTENT_CDN = "ContentCDN"
REDIRECT_CDN = "RedirectCDN"
DOMAIN_RECORD = "DomainNameARecord"
WWW_RECORD = "WwwARecord"

ORIGIN_REQUEST_EVENT = "origin-request"

# Status codes CloudFront lets us map to a custom error document.
ERROR_STATUS_CODES: tuple[int, ...] = (400, 403, 404, 405, 414, 416, 500, 501, 502, 503, 504)


def resolve(config: SiteConfig) -> Topology:
    """Compute the feature flags of a validated site configuration."""
    topology = Topology(
        has_www=config.www_mode is not None,
        www_is_hostname=config.www_mode == WwwMode.HOST_NAME,
        has_certificate=config.certificate_ref is not None,
        has_origin_rewrite=config.origin_rewrite_ref is not None,
        has_error_document=config.error_document_path is not None,
    )
    logger.info("topology_resolved", domain_name=config.domain_name, **topology.model_dump())
    return topology


def canonical_hostname(config: SiteConfig) -> str:
    return config.domain_name


def www_hostname(config: SiteConfig) -> str:
    return f"www.{config.domain_name}"


def content_hostname(config: SiteConfig, topology: Topology) -> str:
    """Hostname that serves the website content."""
    if topology.www_is_hostname:
        return www_hostname(config)
    return canonical_hostname(config)


def redirect_hostname(config: SiteConfig, topology: Topology) -> str | None:
    """Hostname that redirects to the content hostname, if any."""
    if not topology.has_www:
        return None
    if topology.www_is_hostname:
        return canonical_hostname(config)
    return www_hostname(config)


def redirect_target(config: SiteConfig, topology: Topology) -> str | dict[str, Any] | None:
    """Host that the redirect bucket sends every request to.

    With a certificate this is the content hostname. Without one, no custom
    hostname can be served over HTTPS, so the redirect goes to the content
    CDN's own provider-assigned domain name instead.
    """
    if not topology.has_www:
        return None
    if topology.has_certificate:
        return content_hostname(config, topology)
    return get_att(CONTENT_CDN, "DomainName")


def cdn_aliases(config: SiteConfig, topology: Topology) -> dict[str, list[str]]:
    """Custom hostnames attached to each CDN.

    Aliases are only attached when a certificate is configured; a custom
    hostname on a CDN without a matching certificate breaks HTTPS for it.
    """
    aliases: dict[str, list[str]] = {CONTENT_CDN: []}
    if topology.has_www:
        aliases[REDIRECT_CDN] = []
    if not topology.has_certificate:
        return aliases

    aliases[CONTENT_CDN] = [content_hostname(config, topology)]
    redirect = redirect_hostname(config, topology)
    if redirect is not None:
        aliases[REDIRECT_CDN] = [redirect]
    return aliases


def alias_bindings(config: SiteConfig, topology: Topology) -> list[AliasBinding]:
    """DNS alias records and the CDN each of them resolves to."""
    canonical_cdn = REDIRECT_CDN if topology.www_is_hostname else CONTENT_CDN
    bindings = [
        AliasBinding(
            hostname=canonical_hostname(config),
            record_id=DOMAIN_RECORD,
            cdn_id=canonical_cdn,
            attached=topology.has_certificate,
        )
    ]
    if topology.has_www:
        bindings.append(
            AliasBinding(
                hostname=www_hostname(config),
                record_id=WWW_RECORD,
                cdn_id=CONTENT_CDN if topology.www_is_hostname else REDIRECT_CDN,
                attached=topology.has_certificate,
            )
        )
    return bindings


def origin_request_associations(config: SiteConfig, topology: Topology) -> list[dict[str, Any]]:
    """Edge function associations for the content CDN's default behavior.

    The function runs on origin requests only, i.e. when CloudFront forwards a
    request after a cache miss, before the origin is contacted.
    """
    if not topology.has_origin_rewrite:
        return []
    return [{"EventType": ORIGIN_REQUEST_EVENT, "LambdaFunctionARN": config.origin_rewrite_ref}]


def custom_error_responses(config: SiteConfig, topology: Topology) -> list[dict[str, Any]]:
    """Map every supported error status to the error document, keeping the status."""
    if not topology.has_error_document:
        return []
    return [
        {
            "ErrorCode": code,
            "ResponseCode": code,
            "ResponsePagePath": config.error_document_path,
        }
        for code in ERROR_STATUS_CODES
    ]
