"""Origin request rewriting for directory URLs.

CloudFront invokes the function on origin requests (cache misses) and sends
the returned request to the S3 origin, so ``/docs/`` is fetched as
``/docs/index.html``. Lambda@Edge functions cannot read environment
variables, so the index document is bound when the function is deployed.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .validator import validate_index_document

PATH_SEPARATOR = "/"

_HANDLER_SOURCE = '''\
INDEX_DOCUMENT = {index_document!r}


def handler(event, context):
    request = event["Records"][0]["cf"]["request"]
    if request["uri"].endswith("/"):
        request["uri"] = request["uri"] + INDEX_DOCUMENT
    return request
'''


def rewrite(request_path: str, index_document: str) -> str:
    """Append the index document to paths that name a directory."""
    if request_path.endswith(PATH_SEPARATOR):
        return request_path + index_document
    return request_path


def handle_origin_request(event: dict[str, Any], index_document: str) -> dict[str, Any]:
    """Rewrite the URI of a CloudFront origin request event.

    Only the ``uri`` field is touched; headers, querystring and the rest of
    the request are returned as received.
    """
    request = event["Records"][0]["cf"]["request"]
    request["uri"] = rewrite(request["uri"], index_document)
    return request


def make_handler(index_document: str) -> Callable[[dict[str, Any], Any], dict[str, Any]]:
    """Return a Lambda handler with the index document bound."""
    index_document = validate_index_document(index_document)

    def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
        return handle_origin_request(event, index_document)

    return handler


def render_inline_handler(index_document: str) -> str:
    """Render self-contained handler source for inline Lambda@Edge code.

    Raises:
        InvalidIndexDocument: If the index document is not a plain file name
    """
    return _HANDLER_SOURCE.format(index_document=validate_index_document(index_document))
