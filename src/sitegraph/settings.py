"""Environment-driven configuration.

Supported variables:
- SITE_DOMAIN_NAME: canonical domain name (required)
- SITE_USE_WWW: 'HostName', 'Redirect' or empty
- SITE_ACM_CERTIFICATE_ARN: validated us-east-1 ACM certificate ARN or empty
- SITE_ORIGIN_REQUEST_LAMBDA_ARN: versioned us-east-1 Lambda ARN or empty
- SITE_ERROR_DOCUMENT: absolute path of the error document or empty
- SITE_INDEX_DOCUMENT: index document bound into the rewrite function
- SITE_STACK_NAME: stack name used for the deployment user
- AWS_ACCOUNT_ID / CDK_DEFAULT_ACCOUNT: account that owns the distribution
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from .models import ExternalIds
from .validator import validate_index_document

DEFAULT_INDEX_DOCUMENT = "index.html"

SITE_CONFIG_ENV = {
    "domainName": "SITE_DOMAIN_NAME",
    "wwwMode": "SITE_USE_WWW",
    "certificateRef": "SITE_ACM_CERTIFICATE_ARN",
    "originRewriteRef": "SITE_ORIGIN_REQUEST_LAMBDA_ARN",
    "errorDocumentPath": "SITE_ERROR_DOCUMENT",
}


def raw_site_config_from_env(overrides: Mapping[str, Any] | None = None) -> dict[str, str]:
    """Collect the raw site configuration, skipping unset values.

    Non-empty ``overrides`` (for example CDK context values) win over the
    environment variable of the same key.
    """
    overrides = overrides or {}
    raw: dict[str, str] = {}
    for key, env_var in SITE_CONFIG_ENV.items():
        value = str(overrides.get(key) or os.environ.get(env_var, "")).strip()
        if value:
            raw[key] = value
    return raw


def load_external_ids_from_env() -> ExternalIds:
    account_id = os.environ.get("AWS_ACCOUNT_ID") or os.environ.get("CDK_DEFAULT_ACCOUNT")
    stack_name = os.environ.get("SITE_STACK_NAME")
    return ExternalIds(account_id=account_id or None, stack_name=stack_name or None)


def index_document() -> str:
    """Return the configured index document, 'index.html' by default."""
    return validate_index_document(os.environ.get("SITE_INDEX_DOCUMENT") or DEFAULT_INDEX_DOCUMENT)
