"""Limen Infra AWS — boto3 adapters for the CDN and DNS control planes."""

from limen.infra.aws.clients import create_client, get_cloudfront_client, get_route53_client
from limen.infra.aws.cloudfront import CloudFrontControlPlane
from limen.infra.aws.errors import translate_client_error, translate_errors
from limen.infra.aws.route53 import Route53ControlPlane
from limen.infra.aws.settings import AWSSettings, get_aws_settings

__all__ = [
    "AWSSettings",
    "CloudFrontControlPlane",
    "Route53ControlPlane",
    "create_client",
    "get_aws_settings",
    "get_cloudfront_client",
    "get_route53_client",
    "translate_client_error",
    "translate_errors",
]
