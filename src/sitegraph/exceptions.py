"""Custom exception classes for the sitegraph planner.

Validation errors are recoverable by correcting the input and always name the
offending field and the constraint it violated. Graph consistency errors point
at a defect in the resolver/builder pairing and abort graph emission.
"""

from __future__ import annotations


class SiteGraphError(Exception):
    """Base exception class for all sitegraph errors."""

    pass


class ValidationError(SiteGraphError):
    """Raised when a site configuration value is rejected.

    Attributes:
        field: Name of the configuration field that was rejected
        constraint: Short description of the violated rule
    """

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        self.field = field
        self.constraint = constraint
        self.value = value
        super().__init__(f"{field}: {constraint}")


class InvalidDomainName(ValidationError):
    """Raised when the domain name is malformed or starts with a 'www' label."""

    def __init__(self, constraint: str, value: object = None) -> None:
        super().__init__("domainName", constraint, value)


class InvalidWwwMode(ValidationError):
    """Raised when the www mode is neither 'HostName', 'Redirect' nor absent."""

    def __init__(self, constraint: str, value: object = None) -> None:
        super().__init__("wwwMode", constraint, value)


class InvalidCertificateRef(ValidationError):
    """Raised when the certificate reference is not a us-east-1 ACM certificate ARN."""

    def __init__(self, constraint: str, value: object = None) -> None:
        super().__init__("certificateRef", constraint, value)


class InvalidOriginRewriteRef(ValidationError):
    """Raised when the origin rewrite reference is not a versioned us-east-1 Lambda ARN."""

    def __init__(self, constraint: str, value: object = None) -> None:
        super().__init__("originRewriteRef", constraint, value)


class InvalidErrorDocumentPath(ValidationError):
    """Raised when the error document is not an absolute, safe file path."""

    def __init__(self, constraint: str, value: object = None) -> None:
        super().__init__("errorDocumentPath", constraint, value)


class InvalidIndexDocument(ValidationError):
    """Raised when the index document is not a plain file name."""

    def __init__(self, constraint: str, value: object = None) -> None:
        super().__init__("indexDocument", constraint, value)


class TopologyError(SiteGraphError):
    """Reserved for topology resolution failures.

    Resolution is total over validated configurations, so nothing raises this.
    """

    pass


class GraphConsistencyError(SiteGraphError):
    """Raised when a built resource graph violates an internal invariant."""

    pass
