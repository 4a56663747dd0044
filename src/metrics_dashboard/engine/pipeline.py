"""Fetch → normalize → convert → scale pipeline for one resource view."""

import asyncio
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel, Field

from ..exceptions import FetchFailure
from ..utils.logger import get_logger
from .axis import compute_axis_scale
from .fetcher import MetricFetcher
from .models import ChartSeries, QueryBatch, TimeWindow
from .normalizer import DEFAULT_LABEL_FORMAT, convert_units, normalize_safe
from .query_builder import build_batch
from .rds_info import DBInstanceInfo, describe_db_instance
from .resources import ResourceKind, ResourceRef, describe

logger = get_logger(__name__)


class DashboardSnapshot(BaseModel):
    """Result of one refresh of a resource view."""

    resource: str
    identifier: str
    batch_id: str
    window: TimeWindow
    charts: Dict[str, ChartSeries]
    db_info: Optional[DBInstanceInfo] = None
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "resource": self.resource,
            "identifier": self.identifier,
            "window": {"start": self.window.start.isoformat(), "end": self.window.end.isoformat()},
            "fetchedAt": self.fetched_at.isoformat(),
            "charts": [chart.to_payload() for chart in self.charts.values()],
        }
        if self.db_info is not None:
            payload["dbInfo"] = dict(self.db_info.as_rows())
        return payload


class MetricQueryEngine:
    """
    Turns a resource view request into chart-ready series.

    Clients are passed in explicitly; the engine never builds its own.
    """

    def __init__(
        self,
        cloudwatch_client: Any,
        rds_client: Optional[Any] = None,
        label_format: str = DEFAULT_LABEL_FORMAT,
        tz: Optional[tzinfo] = None,
    ):
        """
        Initialize the engine.

        Args:
            cloudwatch_client: Boto3 CloudWatch client
            rds_client: Boto3 RDS client, used for the RDS info table
            label_format: strftime format for time labels
            tz: Display timezone for labels. If None, the local timezone.
        """
        self.fetcher = MetricFetcher(cloudwatch_client)
        self.rds_client = rds_client
        self.label_format = label_format
        self.tz = tz

    def build(
        self,
        resource: ResourceRef,
        identifier: Optional[str],
        hours: Optional[float] = None,
        period: Optional[int] = None,
        metrics: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> QueryBatch:
        return build_batch(
            resource, identifier, period=period, metrics=metrics, hours=hours, now=now
        )

    def run(self, batch: QueryBatch, resource: ResourceRef) -> Dict[str, ChartSeries]:
        """
        Fetch a batch and render one chart per query, in batch order.

        Args:
            batch: Batch built for the resource
            resource: Resource whose descriptor supplies kinds and titles

        Returns:
            Dict of query id to ChartSeries. Ids without data get empty series.

        Raises:
            FetchFailure: If the metrics source rejects the batch.
        """
        descriptor = describe(resource)
        raw_results = self.fetcher.fetch(batch)

        charts: Dict[str, ChartSeries] = {}
        for query in batch.queries:
            metric = descriptor.metric(query.id)
            series = normalize_safe(raw_results[query.id], self.label_format, self.tz)
            series = convert_units(series, metric.kind)
            charts[query.id] = ChartSeries(
                id=query.id,
                title=metric.title,
                y_axis_label=metric.y_axis_label,
                series=series,
                axis=compute_axis_scale(series, metric.kind),
            )
        logger.info(
            f"Rendered {len(charts)} charts for batch {batch.batch_id} "
            f"({sum(len(c.series.points) for c in charts.values())} points)"
        )
        return charts

    def refresh(
        self,
        resource: ResourceRef,
        identifier: Optional[str],
        hours: Optional[float] = None,
        period: Optional[int] = None,
        metrics: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> DashboardSnapshot:
        """
        Run the full pipeline for a resource view.

        For RDS, the instance info is described as well; a failure there is
        logged and leaves db_info unset instead of failing the charts.

        Raises:
            ConfigMissing: If the identifier is missing.
            FetchFailure: If the metric batch fails.
        """
        descriptor = describe(resource)
        batch = self.build(descriptor, identifier, hours=hours, period=period, metrics=metrics, now=now)
        charts = self.run(batch, descriptor)

        db_info = None
        if descriptor.name == ResourceKind.RDS.value and self.rds_client is not None:
            try:
                db_info = describe_db_instance(self.rds_client, identifier)
            except FetchFailure as e:
                logger.warning(f"RDS instance info unavailable: {e}")

        return DashboardSnapshot(
            resource=descriptor.name,
            identifier=identifier,
            batch_id=batch.batch_id,
            window=batch.window,
            charts=charts,
            db_info=db_info,
        )

    async def refresh_async(self, *args: Any, **kwargs: Any) -> DashboardSnapshot:
        """refresh() on a worker thread so the event loop keeps running."""
        return await asyncio.to_thread(self.refresh, *args, **kwargs)


class DashboardState:
    """
    Displayed state of one view: one slot per series id.

    Each applied snapshot overwrites its slots wholesale. Failures only set
    last_error; previously displayed data stays in place.
    """

    def __init__(self):
        self.charts: Dict[str, ChartSeries] = {}
        self.db_info: Optional[DBInstanceInfo] = None
        self.generation = 0
        self.last_error: Optional[str] = None
        self.updated_at: Optional[datetime] = None

    def apply(self, snapshot: DashboardSnapshot, generation: int) -> None:
        for series_id, chart in snapshot.charts.items():
            self.charts[series_id] = chart
        if snapshot.db_info is not None:
            self.db_info = snapshot.db_info
        self.generation = generation
        self.last_error = None
        self.updated_at = snapshot.fetched_at

    def record_error(self, error: Exception, generation: int) -> None:
        self.last_error = str(error)
        logger.warning(f"Keeping previous data after failed refresh #{generation}: {error}")
