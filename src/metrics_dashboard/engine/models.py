"""Data model for metric queries and chart-ready series."""

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# CloudWatch rule for MetricDataQuery ids
QUERY_ID_PATTERN = r"^[a-z][a-zA-Z0-9_]*$"


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so aware and naive values compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Statistic(str, Enum):
    """Aggregation applied within each period."""

    AVERAGE = "Average"
    SUM = "Sum"
    MINIMUM = "Minimum"
    MAXIMUM = "Maximum"
    SAMPLE_COUNT = "SampleCount"


class Dimension(BaseModel):
    """Name/value pair scoping a metric to one resource."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    value: str = Field(min_length=1)

    def to_api(self) -> Dict[str, str]:
        return {"Name": self.name, "Value": self.value}


class MetricQuerySpec(BaseModel):
    """One metric to query within a batch."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=QUERY_ID_PATTERN)
    namespace: str = Field(min_length=1)
    metric_name: str = Field(min_length=1)
    dimensions: Tuple[Dimension, ...] = ()
    period: int = Field(gt=0)
    statistic: Statistic = Statistic.AVERAGE

    def to_api(self) -> Dict[str, Any]:
        """Render as a GetMetricData MetricDataQuery entry."""
        return {
            "Id": self.id,
            "MetricStat": {
                "Metric": {
                    "Namespace": self.namespace,
                    "MetricName": self.metric_name,
                    "Dimensions": [d.to_api() for d in self.dimensions],
                },
                "Period": self.period,
                "Stat": self.statistic.value,
            },
            "ReturnData": True,
        }


class TimeWindow(BaseModel):
    """Query window; both ends timezone-aware, end strictly after start."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.end <= self.start:
            raise ValueError(f"Time window end {self.end} must be after start {self.start}")
        return self

    @classmethod
    def last(cls, hours: float, now: Optional[datetime] = None) -> "TimeWindow":
        """
        Build the window covering the last N hours.

        Args:
            hours: Window length in hours, must be positive
            now: Window end. If None, uses the current UTC time.

        Returns:
            TimeWindow ending at now.
        """
        if hours <= 0:
            raise ValueError(f"Window length must be positive, got {hours} hours")
        end = as_utc(now) if now is not None else datetime.now(timezone.utc)
        return cls(start=end - timedelta(hours=hours), end=end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class QueryBatch(BaseModel):
    """Queries submitted together against one shared window."""

    batch_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    window: TimeWindow
    queries: Tuple[MetricQuerySpec, ...]

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "QueryBatch":
        seen = set()
        for query in self.queries:
            if query.id in seen:
                raise ValueError(f"Duplicate query id in batch: {query.id}")
            seen.add(query.id)
        return self

    @property
    def ids(self) -> List[str]:
        return [q.id for q in self.queries]


class RawSeriesResult(BaseModel):
    """
    One series as delivered by the metrics source.

    Timestamps and values are positionally paired. Their order is whatever
    the source returned. Lengths are checked by the normalizer, not here.
    """

    id: str
    timestamps: Optional[List[datetime]] = Field(default_factory=list)
    values: Optional[List[float]] = Field(default_factory=list)
    status_code: Optional[str] = None

    @classmethod
    def empty(cls, series_id: str) -> "RawSeriesResult":
        return cls(id=series_id)

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "RawSeriesResult":
        """Build from a GetMetricData MetricDataResults entry."""
        return cls(
            id=item["Id"],
            timestamps=item.get("Timestamps"),
            values=item.get("Values"),
            status_code=item.get("StatusCode"),
        )

    def merge(self, other: "RawSeriesResult") -> "RawSeriesResult":
        """Concatenate a continuation page for the same id."""
        timestamps = None
        values = None
        if self.timestamps is not None and other.timestamps is not None:
            timestamps = self.timestamps + other.timestamps
        if self.values is not None and other.values is not None:
            values = self.values + other.values
        return RawSeriesResult(
            id=self.id,
            timestamps=timestamps,
            values=values,
            status_code=other.status_code or self.status_code,
        )


class SeriesPoint(BaseModel):
    timestamp: datetime
    label: str
    value: float


class NormalizedSeries(BaseModel):
    """Chart-ready series ordered by ascending timestamp."""

    id: str
    points: List[SeriesPoint] = Field(default_factory=list)
    unit: str = ""

    @property
    def labels(self) -> List[str]:
        return [p.label for p in self.points]

    @property
    def values(self) -> List[float]:
        return [p.value for p in self.points]

    @property
    def is_empty(self) -> bool:
        return not self.points


class AxisScale(BaseModel):
    max: float
    step_size: float
    unit: str


class ChartSeries(BaseModel):
    """Everything a chart renderer needs for one metric."""

    id: str
    title: str
    y_axis_label: str
    series: NormalizedSeries
    axis: AxisScale

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "yAxisLabel": self.y_axis_label,
            "labels": self.series.labels,
            "values": self.series.values,
            "axis": {
                "max": self.axis.max,
                "stepSize": self.axis.step_size,
                "unit": self.axis.unit,
            },
        }
