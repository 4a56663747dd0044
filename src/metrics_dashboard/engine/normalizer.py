"""Turn raw series into time-ordered, unit-converted chart series."""

from datetime import datetime, tzinfo
from typing import Optional, Union

from ..exceptions import MalformedResult
from ..utils.logger import get_logger
from .kinds import MetricKind, policy_for
from .models import NormalizedSeries, RawSeriesResult, SeriesPoint, as_utc

logger = get_logger(__name__)

DEFAULT_LABEL_FORMAT = "%H:%M:%S"


def format_time_label(
    timestamp: datetime,
    fmt: str = DEFAULT_LABEL_FORMAT,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Format a timestamp as a chart label.

    Args:
        timestamp: Point timestamp (naive values are taken as UTC)
        fmt: strftime format
        tz: Display timezone. If None, the local timezone.

    Returns:
        Formatted label.
    """
    return as_utc(timestamp).astimezone(tz).strftime(fmt)


def validate_raw(raw: RawSeriesResult) -> None:
    """Raise MalformedResult if the arrays are missing or not the same length."""
    if raw.timestamps is None:
        raise MalformedResult(raw.id, "timestamps missing")
    if raw.values is None:
        raise MalformedResult(raw.id, "values missing")
    if len(raw.timestamps) != len(raw.values):
        raise MalformedResult(
            raw.id,
            f"{len(raw.timestamps)} timestamps but {len(raw.values)} values",
        )


def normalize(
    raw: RawSeriesResult,
    label_format: str = DEFAULT_LABEL_FORMAT,
    tz: Optional[tzinfo] = None,
) -> NormalizedSeries:
    """
    Convert a raw result into a series ordered by ascending timestamp.

    Each value stays paired with the timestamp it was delivered with; the
    pairs are stable-sorted by time, so equal timestamps keep their
    delivered order. No points are dropped or added.

    Args:
        raw: Result as returned by the metrics source
        label_format: strftime format for point labels
        tz: Display timezone for labels. If None, the local timezone.

    Returns:
        NormalizedSeries with one point per raw pair.

    Raises:
        MalformedResult: If arrays are missing or length-mismatched.
    """
    validate_raw(raw)
    pairs = sorted(zip(raw.timestamps, raw.values), key=lambda pair: as_utc(pair[0]))
    points = [
        SeriesPoint(
            timestamp=timestamp,
            label=format_time_label(timestamp, label_format, tz),
            value=value,
        )
        for timestamp, value in pairs
    ]
    return NormalizedSeries(id=raw.id, points=points)


def normalize_safe(
    raw: RawSeriesResult,
    label_format: str = DEFAULT_LABEL_FORMAT,
    tz: Optional[tzinfo] = None,
) -> NormalizedSeries:
    """Like normalize(), but a malformed result yields an empty series."""
    try:
        return normalize(raw, label_format=label_format, tz=tz)
    except MalformedResult as e:
        logger.warning(f"{e}; treating as empty series")
        return NormalizedSeries(id=raw.id)


def convert_value(value: float, kind: Union[MetricKind, str]) -> float:
    """Convert one raw value (bytes, ms, count) to the kind's display unit."""
    return value / policy_for(kind).divisor


def convert_units(series: NormalizedSeries, kind: Union[MetricKind, str]) -> NormalizedSeries:
    """
    Convert every value of a series to the kind's display unit.

    Must run before axis scaling so the axis matches the displayed values.
    """
    policy = policy_for(kind)
    points = [
        point.model_copy(update={"value": point.value / policy.divisor})
        for point in series.points
    ]
    return series.model_copy(update={"points": points, "unit": policy.unit})
