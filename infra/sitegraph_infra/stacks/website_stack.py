from __future__ import annotations

from aws_cdk import CfnOutput, CfnResource, Fn, Stack, Token
from constructs import Construct

from sitegraph.graph import CONTENT_BUCKET, CONTENT_DEPLOYMENT_USER, DNS_ZONE
from sitegraph.models import ResourceGraph
from sitegraph.topology import CONTENT_CDN


class WebsiteStack(Stack):
    """Deploys every resource of a planned website graph.

    Each graph node becomes one L1 resource whose logical id is the node id, so
    the intrinsic references inside node properties resolve unchanged.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        graph: ResourceGraph,
        **kwargs: object,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        created: dict[str, CfnResource] = {}
        for resource in graph.resources:
            cfn_resource = CfnResource(
                self,
                resource.id,
                type=resource.resource_type,
                properties=resource.properties,
            )
            cfn_resource.override_logical_id(resource.id)
            # Graph order guarantees every dependency was created first.
            for dependency in resource.depends_on:
                cfn_resource.add_dependency(created[dependency])
            created[resource.id] = cfn_resource

        self.graph_resources = created

        CfnOutput(
            self,
            "ContentBucketName",
            value=created[CONTENT_BUCKET].ref,
            description="Bucket that receives the website content",
        )
        CfnOutput(
            self,
            "ContentDistributionId",
            value=created[CONTENT_CDN].ref,
            description="Distribution to invalidate after a deployment",
        )
        CfnOutput(
            self,
            "ContentDistributionDomainName",
            value=Token.as_string(created[CONTENT_CDN].get_att("DomainName")),
            description="CloudFront domain name of the content distribution",
        )
        CfnOutput(
            self,
            "ContentDeploymentUserName",
            value=created[CONTENT_DEPLOYMENT_USER].ref,
            description="IAM user allowed to deploy content",
        )
        CfnOutput(
            self,
            "NameServers",
            value=Fn.join(",", Token.as_list(created[DNS_ZONE].get_att("NameServers"))),
            description="Name servers to delegate the domain to",
        )
