"""Unit tests for the metric query engine pipeline."""

import pytest
from datetime import timezone
from unittest.mock import Mock

from botocore.exceptions import ClientError

from metrics_dashboard.engine.pipeline import DashboardState, MetricQueryEngine
from metrics_dashboard.engine.resources import ResourceKind
from metrics_dashboard.exceptions import ConfigMissing, FetchFailure

MB = 1024 * 1024
GB = 1024 * MB


@pytest.fixture
def engine(mock_cloudwatch):
    return MetricQueryEngine(mock_cloudwatch, tz=timezone.utc)


def set_pages(client, *pages):
    client.get_paginator.return_value.paginate.return_value = list(pages)


class TestEndToEnd:
    """Test the full fetch, normalize, convert and scale pipeline."""

    def test_cpu_scenario(self, engine, mock_cloudwatch, metric_page, descending_timestamps, base_time):
        """Test one CPU query over 3 hours with newest-first raw data."""
        t0, t1, t2 = descending_timestamps
        set_pages(mock_cloudwatch, metric_page(("cpu", [t0, t1, t2], [90, 50, 10])))

        snapshot = engine.refresh(ResourceKind.EC2, "i-123", metrics=["cpu"], now=base_time)

        paginate = mock_cloudwatch.get_paginator.return_value.paginate
        request = paginate.call_args.kwargs
        assert request["MetricDataQueries"] == [{
            "Id": "cpu",
            "MetricStat": {
                "Metric": {
                    "Namespace": "AWS/EC2",
                    "MetricName": "CPUUtilization",
                    "Dimensions": [{"Name": "InstanceId", "Value": "i-123"}],
                },
                "Period": 300,
                "Stat": "Average",
            },
            "ReturnData": True,
        }]
        assert (request["EndTime"] - request["StartTime"]).total_seconds() == 3 * 3600

        chart = snapshot.charts["cpu"]
        assert [(p.label, p.value) for p in chart.series.points] == [
            ("11:50:00", 10),
            ("11:55:00", 50),
            ("12:00:00", 90),
        ]
        assert chart.axis.max == 100
        assert chart.axis.step_size == 10
        assert chart.axis.unit == "%"
        assert chart.title == "CPU Utilization"

    def test_missing_series_renders_empty(self, engine, mock_cloudwatch, metric_page, descending_timestamps):
        """Test ids without data get empty charts with a usable axis."""
        set_pages(
            mock_cloudwatch,
            metric_page(
                ("cpu", descending_timestamps, [90, 50, 10]),
                ("networkIn", descending_timestamps, [1200, 800, 300]),
            ),
        )

        snapshot = engine.refresh(ResourceKind.EC2, "i-123")

        assert list(snapshot.charts) == ["cpu", "networkIn", "networkOut"]
        assert snapshot.charts["networkOut"].series.is_empty
        assert snapshot.charts["networkOut"].axis.max == 1000
        assert snapshot.charts["networkIn"].axis.max == 2000

    def test_rds_unit_conversion_before_scaling(self, engine, mock_cloudwatch, metric_page, descending_timestamps):
        """Test memory and storage are converted before the axis is computed."""
        set_pages(
            mock_cloudwatch,
            metric_page(
                ("freeMemory", descending_timestamps, [512 * MB, 480 * MB, 450 * MB]),
                ("freeStorage", descending_timestamps, [18 * GB, 18 * GB, 19 * GB]),
            ),
        )

        snapshot = engine.refresh(ResourceKind.RDS, "orders-db")

        memory = snapshot.charts["freeMemory"]
        assert memory.series.values == [450, 480, 512]
        assert memory.series.unit == "MB"
        assert memory.axis.max == 600
        storage = snapshot.charts["freeStorage"]
        assert storage.series.values == [19, 18, 18]
        assert storage.axis.max == 100
        assert storage.axis.unit == "GB"

    def test_malformed_series_renders_empty(self, engine, mock_cloudwatch, descending_timestamps):
        """Test a length-mismatched result does not fail the refresh."""
        set_pages(mock_cloudwatch, {
            "MetricDataResults": [
                {"Id": "cpu", "Timestamps": descending_timestamps, "Values": [1.0], "StatusCode": "Complete"},
            ],
        })

        snapshot = engine.refresh(ResourceKind.EC2, "i-123", metrics=["cpu"])

        assert snapshot.charts["cpu"].series.is_empty

    def test_fetch_failure_propagates(self, engine, mock_cloudwatch, throttling_error):
        """Test batch failures reach the caller."""
        mock_cloudwatch.get_paginator.return_value.paginate.side_effect = throttling_error

        with pytest.raises(FetchFailure):
            engine.refresh(ResourceKind.LAMBDA, "order-handler")

    def test_config_missing_before_network(self, engine, mock_cloudwatch):
        """Test a missing identifier fails without touching the client."""
        with pytest.raises(ConfigMissing):
            engine.refresh(ResourceKind.S3, "")

        mock_cloudwatch.get_paginator.assert_not_called()

    def test_payload(self, engine, mock_cloudwatch, metric_page, descending_timestamps):
        """Test the presentation payload shape."""
        set_pages(mock_cloudwatch, metric_page(("duration", descending_timestamps, [250, 120, 80])))

        payload = engine.refresh(ResourceKind.LAMBDA, "order-handler").to_payload()

        assert payload["resource"] == "lambda"
        assert payload["identifier"] == "order-handler"
        assert [c["id"] for c in payload["charts"]] == ["invocations", "duration", "errors"]
        duration = payload["charts"][1]
        assert duration["values"] == [80, 120, 250]
        assert duration["axis"] == {"max": 300, "stepSize": 60, "unit": "ms"}
        assert duration["yAxisLabel"] == "Duration (milliseconds)"
        assert "dbInfo" not in payload

    @pytest.mark.asyncio
    async def test_refresh_async(self, engine, mock_cloudwatch, metric_page, descending_timestamps):
        """Test the async wrapper returns the same snapshot shape."""
        set_pages(mock_cloudwatch, metric_page(("cpu", descending_timestamps, [90, 50, 10])))

        snapshot = await engine.refresh_async(ResourceKind.EC2, "i-123", metrics=["cpu"])

        assert snapshot.charts["cpu"].series.values == [10, 50, 90]


class TestRDSInfo:
    """Test the RDS info table alongside the charts."""

    def test_db_info_included(self, mock_cloudwatch, sample_db_instance):
        """Test RDS refresh describes the instance."""
        rds_client = Mock()
        rds_client.describe_db_instances.return_value = {"DBInstances": [sample_db_instance]}
        engine = MetricQueryEngine(mock_cloudwatch, rds_client=rds_client)

        snapshot = engine.refresh(ResourceKind.RDS, "orders-db")

        rds_client.describe_db_instances.assert_called_once_with(DBInstanceIdentifier="orders-db")
        assert snapshot.db_info.engine == "postgres"
        assert snapshot.to_payload()["dbInfo"]["Storage"] == "20 GB"

    def test_db_info_failure_keeps_charts(self, mock_cloudwatch):
        """Test a describe failure leaves db_info unset."""
        rds_client = Mock()
        rds_client.describe_db_instances.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DescribeDBInstances"
        )
        engine = MetricQueryEngine(mock_cloudwatch, rds_client=rds_client)

        snapshot = engine.refresh(ResourceKind.RDS, "orders-db")

        assert snapshot.db_info is None
        assert len(snapshot.charts) == 4

    def test_other_resources_skip_describe(self, mock_cloudwatch):
        """Test only RDS views describe an instance."""
        rds_client = Mock()
        engine = MetricQueryEngine(mock_cloudwatch, rds_client=rds_client)

        engine.refresh(ResourceKind.EC2, "i-123")

        rds_client.describe_db_instances.assert_not_called()


class TestDashboardState:
    """Test displayed state updates."""

    def test_apply_overwrites_slots(self, engine, mock_cloudwatch, metric_page, descending_timestamps):
        """Test each slot is replaced wholesale by the latest snapshot."""
        state = DashboardState()
        set_pages(mock_cloudwatch, metric_page(("cpu", descending_timestamps, [90, 50, 10])))
        state.apply(engine.refresh(ResourceKind.EC2, "i-123"), 1)

        set_pages(mock_cloudwatch, metric_page(("cpu", descending_timestamps[:1], [42])))
        state.apply(engine.refresh(ResourceKind.EC2, "i-123"), 2)

        assert state.charts["cpu"].series.values == [42]
        assert state.generation == 2

    def test_error_keeps_previous_data(self, engine, mock_cloudwatch, metric_page, descending_timestamps):
        """Test a failure sets the error indicator only."""
        state = DashboardState()
        set_pages(mock_cloudwatch, metric_page(("cpu", descending_timestamps, [90, 50, 10])))
        state.apply(engine.refresh(ResourceKind.EC2, "i-123"), 1)

        state.record_error(FetchFailure("batch-2", "Rate exceeded", "Throttling"), 2)

        assert state.charts["cpu"].series.values == [10, 50, 90]
        assert "Throttling" in state.last_error
        assert state.generation == 1
