import pytest

from sitegraph.edge import handle_origin_request, make_handler, render_inline_handler, rewrite
from sitegraph.exceptions import InvalidIndexDocument


def _event(uri: str) -> dict:
    return {
        "Records": [
            {
                "cf": {
                    "config": {"eventType": "origin-request"},
                    "request": {
                        "uri": uri,
                        "method": "GET",
                        "querystring": "page=2",
                        "headers": {
                            "host": [{"key": "Host", "value": "example-com.s3.amazonaws.com"}]
                        },
                    },
                }
            }
        ]
    }


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/docs/", "/docs/index.html"),
        ("/", "/index.html"),
        ("/docs/index.html", "/docs/index.html"),
        ("/favicon.ico", "/favicon.ico"),
        ("/docs", "/docs"),
        ("", ""),
    ],
)
def test_rewrite(path: str, expected: str):
    assert rewrite(path, "index.html") == expected


def test_rewrite_is_idempotent():
    once = rewrite("/docs/", "index.html")
    assert rewrite(once, "index.html") == once


def test_handle_origin_request_rewrites_uri_only():
    event = _event("/blog/")
    request = handle_origin_request(event, "index.html")
    assert request["uri"] == "/blog/index.html"
    assert request["method"] == "GET"
    assert request["querystring"] == "page=2"
    assert request["headers"] == _event("/blog/")["Records"][0]["cf"]["request"]["headers"]


def test_handle_origin_request_leaves_files_alone():
    request = handle_origin_request(_event("/style.css"), "index.html")
    assert request["uri"] == "/style.css"


def test_make_handler_binds_index_document():
    handler = make_handler("default.htm")
    assert handler(_event("/about/"), None)["uri"] == "/about/default.htm"


def test_make_handler_rejects_invalid_index_document():
    with pytest.raises(InvalidIndexDocument):
        make_handler("docs/index.html")


def test_render_inline_handler_matches_rewrite():
    source = render_inline_handler("index.html")
    namespace: dict = {}
    exec(compile(source, "index.py", "exec"), namespace)

    assert namespace["INDEX_DOCUMENT"] == "index.html"
    assert namespace["handler"](_event("/docs/"), None)["uri"] == "/docs/index.html"
    assert namespace["handler"](_event("/docs/a.html"), None)["uri"] == "/docs/a.html"


def test_render_inline_handler_rejects_invalid_index_document():
    with pytest.raises(InvalidIndexDocument):
        render_inline_handler('index.html"; import os; "')
