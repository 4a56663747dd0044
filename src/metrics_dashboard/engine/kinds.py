"""Metric kinds and their unit and axis policies."""

from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict

BYTES_PER_MB = 1024 * 1024
BYTES_PER_GB = 1024 * 1024 * 1024


class MetricKind(str, Enum):
    """Category of measurement; selects unit conversion and axis policy."""

    CPU_UTILIZATION = "cpu_utilization"
    NETWORK_THROUGHPUT = "network_throughput"
    CONNECTIONS = "connections"
    MEMORY = "memory"
    STORAGE = "storage"
    DURATION = "duration"
    COUNT = "count"


class KindPolicy(BaseModel):
    """
    Display unit and axis policy for one metric kind.

    Fixed policies (fixed_max set) ignore the data range. Unbounded policies
    round the observed maximum up to rounding_unit, add padding, and pick a
    step giving roughly target_ticks ticks, never below minimum_step.
    """

    model_config = ConfigDict(frozen=True)

    unit: str
    divisor: float = 1
    fixed_max: Optional[float] = None
    fixed_step: Optional[float] = None
    rounding_unit: float = 1
    padding: float = 0
    target_ticks: int = 10
    minimum_step: float = 1

    @property
    def is_fixed(self) -> bool:
        return self.fixed_max is not None


KIND_POLICIES: Dict[MetricKind, KindPolicy] = {
    MetricKind.CPU_UTILIZATION: KindPolicy(unit="%", fixed_max=100, fixed_step=10),
    MetricKind.NETWORK_THROUGHPUT: KindPolicy(
        unit="B/s", rounding_unit=500, padding=500, target_ticks=6
    ),
    MetricKind.CONNECTIONS: KindPolicy(unit="count", padding=5),
    MetricKind.MEMORY: KindPolicy(
        unit="MB", divisor=BYTES_PER_MB, rounding_unit=100, minimum_step=100
    ),
    MetricKind.STORAGE: KindPolicy(
        unit="GB", divisor=BYTES_PER_GB, rounding_unit=100, minimum_step=100
    ),
    MetricKind.DURATION: KindPolicy(unit="ms", rounding_unit=100, target_ticks=5),
    MetricKind.COUNT: KindPolicy(unit="count"),
}


def policy_for(kind: Union[MetricKind, str]) -> KindPolicy:
    """Look up the policy for a metric kind (enum or its string value)."""
    return KIND_POLICIES[MetricKind(kind)]
