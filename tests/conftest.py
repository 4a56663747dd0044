"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from botocore.exceptions import ClientError


BASE_TIME = datetime(2024, 11, 14, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_time():
    """Fixed 'now' for window and label assertions."""
    return BASE_TIME


@pytest.fixture
def descending_timestamps():
    """Three timestamps newest first, 5 minutes apart (t0 > t1 > t2)."""
    return [BASE_TIME - timedelta(minutes=5 * i) for i in range(3)]


@pytest.fixture
def metric_page():
    """Build a GetMetricData response page."""

    def _page(*results, messages=None):
        return {
            "MetricDataResults": [
                {
                    "Id": series_id,
                    "Label": series_id,
                    "Timestamps": list(timestamps),
                    "Values": list(values),
                    "StatusCode": "Complete",
                }
                for series_id, timestamps, values in results
            ],
            "Messages": messages or [],
        }

    return _page


@pytest.fixture
def mock_cloudwatch():
    """CloudWatch client double whose paginator yields no pages by default."""
    client = Mock()
    client.get_paginator.return_value.paginate.return_value = []
    return client


@pytest.fixture
def throttling_error():
    """ClientError as raised for a throttled GetMetricData call."""
    return ClientError(
        {"Error": {"Code": "Throttling", "Message": "Rate exceeded"}},
        "GetMetricData",
    )


@pytest.fixture
def sample_db_instance():
    """DescribeDBInstances entry for a small PostgreSQL instance."""
    return {
        "DBInstanceIdentifier": "orders-db",
        "DBInstanceClass": "db.t3.micro",
        "Engine": "postgres",
        "EngineVersion": "15.4",
        "DBInstanceStatus": "available",
        "Endpoint": {
            "Address": "orders-db.abc123.us-east-1.rds.amazonaws.com",
            "Port": 5432,
        },
        "AllocatedStorage": 20,
        "InstanceCreateTime": datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc),
        "BackupRetentionPeriod": 7,
    }

