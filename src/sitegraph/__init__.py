from .edge import handle_origin_request, make_handler, render_inline_handler, rewrite
from .exceptions import (
    GraphConsistencyError,
    InvalidCertificateRef,
    InvalidDomainName,
    InvalidErrorDocumentPath,
    InvalidIndexDocument,
    InvalidOriginRewriteRef,
    InvalidWwwMode,
    SiteGraphError,
    TopologyError,
    ValidationError,
)
from .graph import build
from .models import (
    AliasBinding,
    ExternalIds,
    LogicalResource,
    ResourceGraph,
    ResourceKind,
    SiteConfig,
    Topology,
    WwwMode,
)
from .pipeline import plan
from .template import render_template, render_template_json
from .topology import resolve
from .validator import validate, validate_index_document

__all__ = [
    # Models
    "AliasBinding",
    "ExternalIds",
    "LogicalResource",
    "ResourceGraph",
    "ResourceKind",
    "SiteConfig",
    "Topology",
    "WwwMode",
    # Functions
    "build",
    "handle_origin_request",
    "make_handler",
    "plan",
    "render_inline_handler",
    "render_template",
    "render_template_json",
    "resolve",
    "rewrite",
    "validate",
    "validate_index_document",
    # Exceptions
    "GraphConsistencyError",
    "InvalidCertificateRef",
    "InvalidDomainName",
    "InvalidErrorDocumentPath",
    "InvalidIndexDocument",
    "InvalidOriginRewriteRef",
    "InvalidWwwMode",
    "SiteGraphError",
    "TopologyError",
    "ValidationError",
]

__version__ = "0.1.0"
