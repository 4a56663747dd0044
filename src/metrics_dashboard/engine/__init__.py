"""
Metric query engine.

Builds CloudWatch query batches for a resource, fetches them, and turns
the raw results into time-ordered, unit-converted series with axis scales.
"""

from .axis import compute_axis_scale
from .fetcher import MetricFetcher
from .kinds import KIND_POLICIES, KindPolicy, MetricKind, policy_for
from .models import (
    AxisScale,
    ChartSeries,
    Dimension,
    MetricQuerySpec,
    NormalizedSeries,
    QueryBatch,
    RawSeriesResult,
    SeriesPoint,
    Statistic,
    TimeWindow,
)
from .normalizer import convert_units, convert_value, format_time_label, normalize, normalize_safe
from .pipeline import DashboardSnapshot, DashboardState, MetricQueryEngine
from .query_builder import build_batch, build_query
from .rds_info import DBInstanceInfo, describe_db_instance
from .resources import (
    RESOURCE_DESCRIPTORS,
    MetricDescriptor,
    ResourceDescriptor,
    ResourceKind,
    describe,
)
from .scheduler import RefreshScheduler

__all__ = [
    "AxisScale",
    "ChartSeries",
    "DBInstanceInfo",
    "DashboardSnapshot",
    "DashboardState",
    "Dimension",
    "KIND_POLICIES",
    "KindPolicy",
    "MetricDescriptor",
    "MetricFetcher",
    "MetricKind",
    "MetricQueryEngine",
    "MetricQuerySpec",
    "NormalizedSeries",
    "QueryBatch",
    "RESOURCE_DESCRIPTORS",
    "RawSeriesResult",
    "RefreshScheduler",
    "ResourceDescriptor",
    "ResourceKind",
    "SeriesPoint",
    "Statistic",
    "TimeWindow",
    "build_batch",
    "build_query",
    "compute_axis_scale",
    "convert_units",
    "convert_value",
    "describe",
    "describe_db_instance",
    "format_time_label",
    "normalize",
    "normalize_safe",
    "policy_for",
]
