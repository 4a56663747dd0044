"""Build GetMetricData query batches from resource descriptors."""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..exceptions import ConfigMissing
from ..utils.logger import get_logger
from .models import Dimension, MetricQuerySpec, QueryBatch, Statistic, TimeWindow
from .resources import ResourceRef, describe

logger = get_logger(__name__)

DimensionLike = Union[Dimension, Tuple[str, str]]


def _coerce_statistic(statistic: Union[Statistic, str]) -> Statistic:
    try:
        return Statistic(statistic)
    except ValueError:
        allowed = ", ".join(s.value for s in Statistic)
        raise ValueError(f"Unknown statistic {statistic!r}; expected one of {allowed}") from None


def _check_period(period: int) -> int:
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        raise ValueError(f"Period must be a positive integer number of seconds, got {period!r}")
    return period


def _coerce_dimensions(dimensions: Iterable[DimensionLike]) -> Tuple[Dimension, ...]:
    result = []
    for item in dimensions:
        if isinstance(item, Dimension):
            name, value = item.name, item.value
        else:
            name, value = item
        if not name:
            raise ValueError("Dimension name must be non-empty")
        if not value:
            raise ConfigMissing(name)
        result.append(Dimension(name=name, value=value))
    if not result:
        raise ConfigMissing("dimensions", "At least one identifying dimension is required")
    return tuple(result)


def build_query(
    query_id: str,
    namespace: str,
    metric_name: str,
    dimensions: Iterable[DimensionLike],
    period: int = 300,
    statistic: Union[Statistic, str] = Statistic.AVERAGE,
) -> MetricQuerySpec:
    """
    Build a single metric query.

    Args:
        query_id: Id unique within the batch (lowercase first letter)
        namespace: CloudWatch namespace, e.g. 'AWS/EC2'
        metric_name: Metric name, e.g. 'CPUUtilization'
        dimensions: (name, value) pairs identifying the resource
        period: Aggregation period in seconds
        statistic: Aggregation function

    Returns:
        MetricQuerySpec instance.

    Raises:
        ConfigMissing: If no dimension is given or a dimension value is empty.
        ValueError: If period or statistic is invalid.
    """
    return MetricQuerySpec(
        id=query_id,
        namespace=namespace,
        metric_name=metric_name,
        dimensions=_coerce_dimensions(dimensions),
        period=_check_period(period),
        statistic=_coerce_statistic(statistic),
    )


def build_batch(
    resource: ResourceRef,
    identifier: Optional[str],
    window: Optional[TimeWindow] = None,
    period: Optional[int] = None,
    statistic: Optional[Union[Statistic, str]] = None,
    metrics: Optional[Sequence[str]] = None,
    hours: Optional[float] = None,
    now: Optional[datetime] = None,
) -> QueryBatch:
    """
    Build the query batch for one resource view.

    Args:
        resource: Resource kind, its value, or a custom ResourceDescriptor
        identifier: Value of the resource's identifying dimension
        window: Shared query window. If None, the last `hours` hours.
        period: Period override. If None, the resource default.
        statistic: Statistic override applied to every metric
        metrics: Subset of metric ids to query. If None, all of them.
        hours: Window length when window is None. Defaults per resource.
        now: Window end when window is None.

    Returns:
        QueryBatch with one query per selected metric.

    Raises:
        ConfigMissing: If the identifier is empty.
        ValueError: For invalid period, statistic, metric ids or duplicate ids.
    """
    descriptor = describe(resource)
    if not identifier:
        raise ConfigMissing(
            descriptor.dimension_name,
            f"No {descriptor.display_name} identifier configured ({descriptor.dimension_name})",
        )

    period = _check_period(period if period is not None else descriptor.default_period)
    if window is None:
        window = TimeWindow.last(
            hours if hours is not None else descriptor.default_window_hours, now=now
        )

    queries: List[MetricQuerySpec] = []
    seen = set()
    for metric in descriptor.select(metrics):
        if metric.query_id in seen:
            raise ValueError(f"Duplicate query id in batch: {metric.query_id}")
        seen.add(metric.query_id)
        queries.append(
            build_query(
                metric.query_id,
                descriptor.namespace,
                metric.metric_name,
                [(descriptor.dimension_name, identifier), *metric.extra_dimensions],
                period=period,
                statistic=statistic or metric.statistic,
            )
        )

    batch = QueryBatch(window=window, queries=tuple(queries))
    logger.debug(
        f"Built batch {batch.batch_id} for {descriptor.display_name} {identifier}: "
        f"{len(queries)} queries, period {period}s, {window.start.isoformat()} to {window.end.isoformat()}"
    )
    return batch
