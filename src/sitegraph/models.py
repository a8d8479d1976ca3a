from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Fixed hosted zone that Route 53 alias records use for every CloudFront distribution.
CLOUDFRONT_HOSTED_ZONE_ID = "Z2FDTNDATAQYW2"

_LOGICAL_ID_RE = re.compile(r"[A-Za-z][A-Za-z0-9]*")


class WwwMode(str, Enum):
    HOST_NAME = "HostName"
    REDIRECT = "Redirect"


class ResourceKind(str, Enum):
    ZONE = "Zone"
    DNS_RECORD = "DnsRecord"
    BUCKET = "Bucket"
    BUCKET_POLICY = "BucketPolicy"
    CDN = "CDN"
    IDENTITY_PRINCIPAL = "IdentityPrincipal"
    SERVICE_ACCOUNT = "ServiceAccount"


class SiteConfig(BaseModel):
    """Validated configuration of a single website.

    Field aliases carry the camelCase names used by callers; the snake_case
    names are accepted as well.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    domain_name: str = Field(alias="domainName")
    www_mode: WwwMode | None = Field(default=None, alias="wwwMode")
    certificate_ref: str | None = Field(default=None, alias="certificateRef")
    origin_rewrite_ref: str | None = Field(default=None, alias="originRewriteRef")
    error_document_path: str | None = Field(default=None, alias="errorDocumentPath")

    @field_validator("domain_name")
    @classmethod
    def _no_www_label(cls, value: str) -> str:
        if not value or value.strip() == "":
            raise ValueError("domain name must be non-empty")
        if value.split(".", 1)[0] == "www":
            raise ValueError("domain name must not start with a 'www' label")
        return value


class ExternalIds(BaseModel):
    """Identifiers owned by the provisioning engine.

    Unset values are left to the engine as pseudo parameters.
    """

    model_config = ConfigDict(frozen=True)

    account_id: str | None = None
    stack_name: str | None = None
    cdn_hosted_zone_id: str = CLOUDFRONT_HOSTED_ZONE_ID


class Topology(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_www: bool
    www_is_hostname: bool
    has_certificate: bool
    has_origin_rewrite: bool
    has_error_document: bool

    @model_validator(mode="after")
    def _www_hostname_requires_www(self) -> Topology:
        if self.www_is_hostname and not self.has_www:
            raise ValueError("www_is_hostname requires has_www")
        return self


class LogicalResource(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: ResourceKind
    resource_type: str
    properties: dict[str, Any] = Field(default_factory=dict)
    depends_on: tuple[str, ...] = ()

    @field_validator("id")
    @classmethod
    def _logical_id(cls, value: str) -> str:
        if not _LOGICAL_ID_RE.fullmatch(value):
            raise ValueError("logical id must be alphanumeric and start with a letter")
        return value


class AliasBinding(BaseModel):
    """A hostname, the DNS record that publishes it and the CDN it resolves to."""

    model_config = ConfigDict(frozen=True)

    hostname: str
    record_id: str
    cdn_id: str
    attached: bool


class ResourceGraph(BaseModel):
    """Resources in creation order plus the alias bindings between them."""

    model_config = ConfigDict(frozen=True)

    resources: tuple[LogicalResource, ...]
    alias_bindings: tuple[AliasBinding, ...] = ()
    redirect_target: str | dict[str, Any] | None = None

    def has(self, resource_id: str) -> bool:
        return any(resource.id == resource_id for resource in self.resources)

    def get(self, resource_id: str) -> LogicalResource:
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        raise KeyError(resource_id)

    def of_kind(self, kind: ResourceKind) -> list[LogicalResource]:
        return [resource for resource in self.resources if resource.kind == kind]

    def creation_order(self) -> list[str]:
        return [resource.id for resource in self.resources]

    def teardown_order(self) -> list[str]:
        """Return logical ids in the order they can be safely deleted."""
        return list(reversed(self.creation_order()))

    def cdn_aliases(self, cdn_id: str) -> list[str]:
        resource = self.get(cdn_id)
        if resource.kind != ResourceKind.CDN:
            raise ValueError(f"{cdn_id} is not a CDN resource")
        return list(resource.properties["DistributionConfig"].get("Aliases", []))

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)
