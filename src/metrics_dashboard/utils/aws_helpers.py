"""AWS client construction using Boto3."""

from typing import Any, Dict, Optional
import boto3
from botocore.config import Config as BotoConfig

from ..config import AWSConfig, config
from .logger import get_logger

logger = get_logger(__name__)


def build_client_config(aws: Optional[AWSConfig] = None) -> BotoConfig:
    """
    Build the botocore client configuration.

    Throttling responses are retried with backoff by botocore according to
    the configured retry mode; callers above the client never retry.

    Args:
        aws: AWS settings. If None, uses config default.

    Returns:
        botocore Config instance.
    """
    aws = aws or config.aws
    return BotoConfig(
        region_name=aws.region,
        retries={"max_attempts": aws.max_attempts, "mode": aws.retry_mode},
    )


def get_boto3_client(
    service_name: str,
    region: Optional[str] = None,
    aws: Optional[AWSConfig] = None,
) -> Any:
    """
    Get an explicitly configured Boto3 client for the specified AWS service.

    Args:
        service_name: AWS service name (e.g., 'cloudwatch', 'rds')
        region: AWS region. If None, uses the configured region.
        aws: AWS settings. If None, uses config default.

    Returns:
        Boto3 client instance.
    """
    aws = aws or config.aws
    region = region or aws.region
    kwargs: Dict[str, Any] = {
        "region_name": region,
        "config": build_client_config(aws),
    }
    if aws.has_static_credentials:
        kwargs["aws_access_key_id"] = aws.access_key_id
        kwargs["aws_secret_access_key"] = aws.secret_access_key

    logger.debug(f"Creating Boto3 client for {service_name} in {region}")
    return boto3.client(service_name, **kwargs)


def get_cloudwatch_client(region: Optional[str] = None, aws: Optional[AWSConfig] = None) -> Any:
    """Get a CloudWatch client."""
    return get_boto3_client("cloudwatch", region=region, aws=aws)


def get_rds_client(region: Optional[str] = None, aws: Optional[AWSConfig] = None) -> Any:
    """Get an RDS client."""
    return get_boto3_client("rds", region=region, aws=aws)
