from __future__ import annotations

from aws_cdk import CfnOutput, Stack, Token
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as lambda_
from constructs import Construct

from sitegraph.edge import render_inline_handler

EDGE_REGION = "us-east-1"


class IndexDocumentStack(Stack):
    """Lambda@Edge function that rewrites directory requests to their index document."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        index_document: str,
        **kwargs: object,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Lambda@Edge functions must be provisioned in us-east-1
        if not Token.is_unresolved(self.region) and self.region != EDGE_REGION:
            raise ValueError(
                f"IndexDocumentStack must be deployed to {EDGE_REGION}, not {self.region}"
            )

        role = iam.Role(
            self,
            "ExecutionRole",
            path="/service-role/",
            assumed_by=iam.CompositePrincipal(
                iam.ServicePrincipal("lambda.amazonaws.com"),
                iam.ServicePrincipal("edgelambda.amazonaws.com"),
            ),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaBasicExecutionRole"
                )
            ],
        )

        function = lambda_.Function(
            self,
            "Function",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="index.handler",
            code=lambda_.Code.from_inline(render_inline_handler(index_document)),
            role=role,
            description=(
                "Rewrites a CloudFront origin request for a directory "
                "to a request for its index document."
            ),
        )

        self.function = function
        self.function_version = function.current_version

        CfnOutput(
            self,
            "FunctionVersionArn",
            value=function.current_version.function_arn,
            description="Versioned function ARN to pass as the origin rewrite reference",
        )
