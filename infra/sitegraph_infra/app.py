import os

from aws_cdk import App, Environment

from sitegraph import plan
from sitegraph.logging_config import configure_logging
from sitegraph.settings import (
    SITE_CONFIG_ENV,
    index_document,
    load_external_ids_from_env,
    raw_site_config_from_env,
)

from .stacks.index_document_stack import EDGE_REGION, IndexDocumentStack
from .stacks.website_stack import WebsiteStack

configure_logging()

app = App()

# CDK context (-c domainName=...) wins over the SITE_* environment variables.
context = {key: app.node.try_get_context(key) for key in SITE_CONFIG_ENV}
raw_config = raw_site_config_from_env(context)
external_ids = load_external_ids_from_env()

index_document_stack = IndexDocumentStack(
    app,
    "WebsiteIndexDocumentStack",
    index_document=app.node.try_get_context("indexDocument") or index_document(),
    env=Environment(account=external_ids.account_id, region=EDGE_REGION),
)

# The origin rewrite reference is a versioned ARN output by the stack above, so
# a site that uses it is deployed in a second pass with originRewriteRef set.
website_stack = WebsiteStack(
    app,
    app.node.try_get_context("stackName") or "WebsiteStack",
    graph=plan(raw_config, external_ids),
    env=Environment(account=external_ids.account_id, region=os.environ.get("CDK_DEFAULT_REGION")),
)

app.synth()
