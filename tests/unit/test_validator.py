import pytest

from sitegraph.exceptions import (
    InvalidCertificateRef,
    InvalidDomainName,
    InvalidErrorDocumentPath,
    InvalidIndexDocument,
    InvalidOriginRewriteRef,
    InvalidWwwMode,
    ValidationError,
)
from sitegraph.models import WwwMode
from sitegraph.validator import validate, validate_index_document

CERTIFICATE_ARN = "arn:aws:acm:us-east-1:123456789012:certificate/1a2b3c4d-1234-5678-9abc-0123456789ab"
LAMBDA_VERSION_ARN = "arn:aws:lambda:us-east-1:123456789012:function:rewrite-index:3"


def test_validate_minimal_config():
    config = validate({"domainName": "example.com"})
    assert config.domain_name == "example.com"
    assert config.www_mode is None
    assert config.certificate_ref is None
    assert config.origin_rewrite_ref is None
    assert config.error_document_path is None


def test_validate_full_config():
    config = validate(
        {
            "domainName": "example.com",
            "wwwMode": "HostName",
            "certificateRef": CERTIFICATE_ARN,
            "originRewriteRef": LAMBDA_VERSION_ARN,
            "errorDocumentPath": "/error.html",
        }
    )
    assert config.www_mode is WwwMode.HOST_NAME
    assert config.certificate_ref == CERTIFICATE_ARN
    assert config.origin_rewrite_ref == LAMBDA_VERSION_ARN
    assert config.error_document_path == "/error.html"


def test_validate_accepts_snake_case_keys():
    config = validate({"domain_name": "example.org", "www_mode": "Redirect"})
    assert config.domain_name == "example.org"
    assert config.www_mode is WwwMode.REDIRECT


def test_validate_treats_empty_strings_as_absent():
    config = validate(
        {
            "domainName": "example.com",
            "wwwMode": "",
            "certificateRef": "",
            "originRewriteRef": "",
            "errorDocumentPath": "",
        }
    )
    assert config.www_mode is None
    assert config.certificate_ref is None
    assert config.origin_rewrite_ref is None
    assert config.error_document_path is None


@pytest.mark.parametrize(
    "domain_name",
    [
        "example.com",
        "sub.example.co.uk",
        "a.io",
        "my-site.example",
        "wwwexample.com",
        "example.xn--p1ai",
        "xn--bcher-kva.de",
        "123.example.net",
    ],
)
def test_validate_accepts_domain_names(domain_name: str):
    assert validate({"domainName": domain_name}).domain_name == domain_name


@pytest.mark.parametrize(
    "domain_name",
    [
        "www.example.com",
        "www.sub.example.com",
        "Example.com",
        "example",
        "-example.com",
        "example-.com",
        "exa_mple.com",
        "example..com",
        "example.com.",
        ".example.com",
        "example.c",
        "example.c0m",
        "example.com/path",
        "a" * 64 + ".com",
        ".".join(["a" * 60] * 5) + ".com",
    ],
)
def test_validate_rejects_domain_names(domain_name: str):
    with pytest.raises(InvalidDomainName):
        validate({"domainName": domain_name})


def test_validate_requires_domain_name():
    with pytest.raises(InvalidDomainName):
        validate({})


def test_validate_rejects_non_string_domain_name():
    with pytest.raises(InvalidDomainName):
        validate({"domainName": 42})


@pytest.mark.parametrize("www_mode", ["hostname", "redirect", "Alias", "yes", 1])
def test_validate_rejects_www_mode(www_mode: object):
    with pytest.raises(InvalidWwwMode):
        validate({"domainName": "example.com", "wwwMode": www_mode})


def test_validate_accepts_www_mode_enum():
    config = validate({"domainName": "example.com", "wwwMode": WwwMode.REDIRECT})
    assert config.www_mode is WwwMode.REDIRECT


@pytest.mark.parametrize(
    "certificate_ref",
    [
        "arn:aws:acm:eu-west-1:123456789012:certificate/1a2b3c4d-1234-5678-9abc-0123456789ab",
        "arn:aws:acm:us-east-1:123456789012:certificate/1A2B3C4D-1234-5678-9ABC-0123456789AB",
        "arn:aws:acm:us-east-1:123456789012:certificate/not-a-uuid",
        "arn:aws:iam::123456789012:server-certificate/example",
        "certificate",
    ],
)
def test_validate_rejects_certificate_ref(certificate_ref: str):
    with pytest.raises(InvalidCertificateRef):
        validate({"domainName": "example.com", "certificateRef": certificate_ref})


@pytest.mark.parametrize(
    "origin_rewrite_ref",
    [
        "arn:aws:lambda:us-east-1:123456789012:function:rewrite-index",
        "arn:aws:lambda:us-east-1:123456789012:function:rewrite-index:$LATEST",
        "arn:aws:lambda:eu-west-1:123456789012:function:rewrite-index:3",
        "rewrite-index",
    ],
)
def test_validate_rejects_origin_rewrite_ref(origin_rewrite_ref: str):
    with pytest.raises(InvalidOriginRewriteRef):
        validate({"domainName": "example.com", "originRewriteRef": origin_rewrite_ref})


@pytest.mark.parametrize("error_document", ["/404.html", "/error-page_v2.htm", "/.error"])
def test_validate_accepts_error_document_path(error_document: str):
    config = validate({"domainName": "example.com", "errorDocumentPath": error_document})
    assert config.error_document_path == error_document


@pytest.mark.parametrize(
    "error_document",
    ["error.html", "/", "/..", "/.", "/errors/404.html", "/../secret", "/error page.html", "/a:b"],
)
def test_validate_rejects_error_document_path(error_document: str):
    with pytest.raises(InvalidErrorDocumentPath):
        validate({"domainName": "example.com", "errorDocumentPath": error_document})


def test_validation_error_names_field_and_constraint():
    with pytest.raises(ValidationError) as excinfo:
        validate({"domainName": "example.com", "wwwMode": "Both"})
    assert excinfo.value.field == "wwwMode"
    assert "HostName" in excinfo.value.constraint
    assert excinfo.value.value == "Both"
    assert str(excinfo.value).startswith("wwwMode:")


def test_validate_reports_first_invalid_field():
    with pytest.raises(InvalidDomainName):
        validate({"domainName": "www.example.com", "wwwMode": "Both"})


@pytest.mark.parametrize("index_document", ["index.html", "default.htm", "INDEX_v2.html"])
def test_validate_index_document(index_document: str):
    assert validate_index_document(index_document) == index_document


@pytest.mark.parametrize("index_document", ["", ".", "..", "docs/index.html", "index.html/", None])
def test_validate_index_document_rejects(index_document: object):
    with pytest.raises(InvalidIndexDocument):
        validate_index_document(index_document)


@pytest.mark.parametrize(
    ("field", "value", "error"),
    [
        ("domainName", "example.com\n", InvalidDomainName),
        ("certificateRef", CERTIFICATE_ARN + "\n", InvalidCertificateRef),
        ("originRewriteRef", LAMBDA_VERSION_ARN + "\n", InvalidOriginRewriteRef),
        ("errorDocumentPath", "/error.html\n", InvalidErrorDocumentPath),
    ],
)
def test_validate_rejects_trailing_newline(field: str, value: str, error: type[ValidationError]):
    raw = {"domainName": "example.com", field: value}
    with pytest.raises(error):
        validate(raw)


@pytest.mark.parametrize(
    "domain_name",
    ["example.com\r", "example\n.com", "example.co١", " example.com"],
)
def test_validate_rejects_embedded_control_and_unicode_characters(domain_name: str):
    with pytest.raises(InvalidDomainName):
        validate({"domainName": domain_name})


def test_validate_rejects_unicode_digits_in_account_id():
    arn = "arn:aws:lambda:us-east-1:١٢٣:function:rewrite-index:3"
    with pytest.raises(InvalidOriginRewriteRef):
        validate({"domainName": "example.com", "originRewriteRef": arn})


def test_validate_index_document_rejects_trailing_newline():
    with pytest.raises(InvalidIndexDocument):
        validate_index_document("index.html\n")
