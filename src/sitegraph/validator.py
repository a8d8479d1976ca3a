from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    InvalidCertificateRef,
    InvalidDomainName,
    InvalidErrorDocumentPath,
    InvalidIndexDocument,
    InvalidOriginRewriteRef,
    InvalidWwwMode,
    ValidationError,
)
from .models import SiteConfig, WwwMode

logger = structlog.get_logger(__name__)

MAX_DOMAIN_LENGTH = 253

_LABEL = r"[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?"
_TLD = r"(?:[a-z]{2,63}|xn--[a-z0-9](?:[a-z0-9-]{0,57}[a-z0-9])?)"
_DOMAIN_RE = re.compile(rf"(?:{_LABEL}\.)+{_TLD}")

# CloudFront only accepts certificates and Lambda@Edge versions from us-east-1.
_CERTIFICATE_ARN_RE = re.compile(
    r"arn:aws:acm:us-east-1:[0-9]+:certificate/"
    r"[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}"
)
_LAMBDA_VERSION_ARN_RE = re.compile(
    r"arn:aws:lambda:us-east-1:[0-9]+:function:[a-zA-Z0-9_-]+:[0-9]+"
)
_FILE_NAME_RE = re.compile(r"[a-zA-Z0-9_.-]+")

_FIELDS = {
    "domain_name": ("domainName", "domain_name"),
    "www_mode": ("wwwMode", "www_mode"),
    "certificate_ref": ("certificateRef", "certificate_ref"),
    "origin_rewrite_ref": ("originRewriteRef", "origin_rewrite_ref"),
    "error_document_path": ("errorDocumentPath", "error_document_path"),
}


def _rejected(error: ValidationError) -> ValidationError:
    logger.warning(
        "site_config_rejected",
        field=error.field,
        constraint=error.constraint,
        value=error.value,
    )
    return error


def _lookup(raw: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    """Return the first present value for a field, treating '' as absent."""
    for name in names:
        value = raw.get(name)
        if value is None:
            continue
        if isinstance(value, str) and value == "":
            return None
        return value
    return None


def _is_safe_file_name(value: str) -> bool:
    return bool(_FILE_NAME_RE.fullmatch(value)) and value not in {".", ".."}


def validate_domain_name(value: Any) -> str:
    """Validate a canonical domain name.

    Args:
        value: Candidate domain name

    Returns:
        The validated domain name

    Raises:
        InvalidDomainName: If the value is missing, malformed or starts with 'www'
    """
    if value is None:
        raise _rejected(InvalidDomainName("domain name is required"))
    if not isinstance(value, str):
        raise _rejected(InvalidDomainName("domain name must be a string", value))
    if value.split(".", 1)[0] == "www":
        raise _rejected(InvalidDomainName("domain name must not start with a 'www' label", value))
    if len(value) > MAX_DOMAIN_LENGTH:
        raise _rejected(
            InvalidDomainName(f"domain name must be at most {MAX_DOMAIN_LENGTH} characters", value)
        )
    if not _DOMAIN_RE.fullmatch(value):
        raise _rejected(
            InvalidDomainName(
                "domain name must be lowercase labels of 1-63 characters of [a-z0-9-], "
                "not starting or ending with '-', under an alphabetic or xn-- top-level domain",
                value,
            )
        )
    return value


def validate_www_mode(value: Any) -> WwwMode | None:
    if value is None:
        return None
    if isinstance(value, WwwMode):
        return value
    try:
        return WwwMode(value)
    except ValueError:
        raise _rejected(
            InvalidWwwMode("www mode must be one of 'HostName', 'Redirect' or absent", value)
        ) from None


def validate_certificate_ref(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not _CERTIFICATE_ARN_RE.fullmatch(value):
        raise _rejected(
            InvalidCertificateRef("certificate must be an ACM certificate ARN in us-east-1", value)
        )
    return value


def validate_origin_rewrite_ref(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not _LAMBDA_VERSION_ARN_RE.fullmatch(value):
        raise _rejected(
            InvalidOriginRewriteRef(
                "origin rewrite must be a versioned Lambda function ARN in us-east-1", value
            )
        )
    return value


def validate_error_document_path(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.startswith("/"):
        raise _rejected(InvalidErrorDocumentPath("error document must be an absolute path", value))
    if not _is_safe_file_name(value[1:]):
        raise _rejected(
            InvalidErrorDocumentPath(
                "error document must be a single file name of [a-zA-Z0-9_.-] below '/'", value
            )
        )
    return value


def validate_index_document(value: Any) -> str:
    """Validate the index document bound into the origin request rewriter.

    Raises:
        InvalidIndexDocument: If the value is not a plain file name
    """
    if not isinstance(value, str) or not _is_safe_file_name(value):
        raise _rejected(
            InvalidIndexDocument("index document must be a file name of [a-zA-Z0-9_.-]", value)
        )
    return value


def validate(raw: Mapping[str, Any]) -> SiteConfig:
    """Validate raw website configuration.

    Keys may be given in camelCase (``domainName``) or snake_case
    (``domain_name``). Empty strings are treated as absent values.

    Args:
        raw: Mapping of configuration values

    Returns:
        A validated, immutable SiteConfig

    Raises:
        ValidationError: Subclass naming the first rejected field
    """
    values = {field: _lookup(raw, names) for field, names in _FIELDS.items()}

    domain_name = validate_domain_name(values["domain_name"])
    www_mode = validate_www_mode(values["www_mode"])
    certificate_ref = validate_certificate_ref(values["certificate_ref"])
    origin_rewrite_ref = validate_origin_rewrite_ref(values["origin_rewrite_ref"])
    error_document_path = validate_error_document_path(values["error_document_path"])

    try:
        return SiteConfig(
            domain_name=domain_name,
            www_mode=www_mode,
            certificate_ref=certificate_ref,
            origin_rewrite_ref=origin_rewrite_ref,
            error_document_path=error_document_path,
        )
    except PydanticValidationError as exc:
        raise _rejected(ValidationError("config", f"invalid site config: {exc}")) from exc
