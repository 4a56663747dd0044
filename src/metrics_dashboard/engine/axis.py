"""Axis scaling policy for chart series."""

import math
from typing import Union

from .kinds import MetricKind, policy_for
from .models import AxisScale, NormalizedSeries

# Empty or all-zero series still get a usable axis
MINIMUM_OBSERVED = 1


def compute_axis_scale(series: NormalizedSeries, kind: Union[MetricKind, str]) -> AxisScale:
    """
    Compute the y-axis scale for a (unit-converted) series.

    Fixed-kind metrics such as CPU utilization always get the fixed scale.
    Unbounded kinds round the observed maximum up to the policy's rounding
    unit, add its padding, and divide into target_ticks steps.

    Args:
        series: Series with display-unit values
        kind: Metric kind selecting the policy

    Returns:
        AxisScale with max > 0 and max >= every value in the series.
    """
    policy = policy_for(kind)
    if policy.is_fixed:
        return AxisScale(max=policy.fixed_max, step_size=policy.fixed_step, unit=policy.unit)

    observed = max(max(series.values, default=0), MINIMUM_OBSERVED)
    axis_max = math.ceil(observed / policy.rounding_unit) * policy.rounding_unit + policy.padding
    step_size = max(policy.minimum_step, math.ceil(axis_max / policy.target_ticks))
    return AxisScale(max=axis_max, step_size=step_size, unit=policy.unit)
