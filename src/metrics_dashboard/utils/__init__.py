"""Utility modules for the metrics dashboard."""

from .logger import get_logger, set_log_level
from .aws_helpers import (
    build_client_config,
    get_boto3_client,
    get_cloudwatch_client,
    get_rds_client,
)

__all__ = [
    "get_logger",
    "set_log_level",
    "build_client_config",
    "get_boto3_client",
    "get_cloudwatch_client",
    "get_rds_client",
]
