"""Per-resource descriptor table: which metrics each dashboard view charts."""

from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .kinds import MetricKind
from .models import Dimension, Statistic


class ResourceKind(str, Enum):
    EC2 = "ec2"
    RDS = "rds"
    S3 = "s3"
    LAMBDA = "lambda"


class MetricDescriptor(BaseModel):
    """One chart in a resource view."""

    model_config = ConfigDict(frozen=True)

    query_id: str
    metric_name: str
    statistic: Statistic = Statistic.AVERAGE
    kind: MetricKind
    title: str
    y_axis_label: str
    extra_dimensions: Tuple[Dimension, ...] = ()


class ResourceDescriptor(BaseModel):
    """Namespace, identifying dimension, defaults and chart list for a resource kind."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    namespace: str
    dimension_name: str
    default_period: int = 300
    default_window_hours: float = 3
    metrics: Tuple[MetricDescriptor, ...]

    def metric(self, query_id: str) -> MetricDescriptor:
        for metric in self.metrics:
            if metric.query_id == query_id:
                return metric
        raise KeyError(f"{self.display_name} has no metric with id {query_id!r}")

    def select(self, query_ids: Optional[Sequence[str]] = None) -> List[MetricDescriptor]:
        """
        Pick a subset of metrics, preserving the requested order.

        Args:
            query_ids: Metric ids to keep. If None, keeps all metrics.

        Returns:
            Selected metric descriptors.

        Raises:
            ValueError: If an id is not part of this resource.
        """
        if query_ids is None:
            return list(self.metrics)
        try:
            return [self.metric(query_id) for query_id in query_ids]
        except KeyError as e:
            raise ValueError(str(e.args[0])) from e


def _cpu(title: str = "CPU Utilization") -> MetricDescriptor:
    return MetricDescriptor(
        query_id="cpu",
        metric_name="CPUUtilization",
        kind=MetricKind.CPU_UTILIZATION,
        title=title,
        y_axis_label="CPU Usage (%)",
    )


EC2_DESCRIPTOR = ResourceDescriptor(
    name=ResourceKind.EC2.value,
    display_name="EC2 Instance",
    namespace="AWS/EC2",
    dimension_name="InstanceId",
    metrics=(
        _cpu(),
        MetricDescriptor(
            query_id="networkIn",
            metric_name="NetworkIn",
            kind=MetricKind.NETWORK_THROUGHPUT,
            title="Network In",
            y_axis_label="Bytes per Second",
        ),
        MetricDescriptor(
            query_id="networkOut",
            metric_name="NetworkOut",
            kind=MetricKind.NETWORK_THROUGHPUT,
            title="Network Out",
            y_axis_label="Bytes per Second",
        ),
    ),
)

RDS_DESCRIPTOR = ResourceDescriptor(
    name=ResourceKind.RDS.value,
    display_name="RDS Instance",
    namespace="AWS/RDS",
    dimension_name="DBInstanceIdentifier",
    metrics=(
        _cpu(),
        MetricDescriptor(
            query_id="connections",
            metric_name="DatabaseConnections",
            kind=MetricKind.CONNECTIONS,
            title="Database Connections",
            y_axis_label="Number of Connections",
        ),
        MetricDescriptor(
            query_id="freeMemory",
            metric_name="FreeableMemory",
            kind=MetricKind.MEMORY,
            title="Free Memory",
            y_axis_label="Memory (MB)",
        ),
        MetricDescriptor(
            query_id="freeStorage",
            metric_name="FreeStorageSpace",
            kind=MetricKind.STORAGE,
            title="Free Storage Space",
            y_axis_label="Storage (GB)",
        ),
    ),
)

LAMBDA_DESCRIPTOR = ResourceDescriptor(
    name=ResourceKind.LAMBDA.value,
    display_name="Lambda Function",
    namespace="AWS/Lambda",
    dimension_name="FunctionName",
    metrics=(
        MetricDescriptor(
            query_id="invocations",
            metric_name="Invocations",
            statistic=Statistic.SUM,
            kind=MetricKind.COUNT,
            title="Function Invocations",
            y_axis_label="Number of Invocations",
        ),
        MetricDescriptor(
            query_id="duration",
            metric_name="Duration",
            kind=MetricKind.DURATION,
            title="Execution Duration",
            y_axis_label="Duration (milliseconds)",
        ),
        MetricDescriptor(
            query_id="errors",
            metric_name="Errors",
            statistic=Statistic.SUM,
            kind=MetricKind.COUNT,
            title="Function Errors",
            y_axis_label="Number of Errors",
        ),
    ),
)

# S3 storage metrics are published once a day
S3_DESCRIPTOR = ResourceDescriptor(
    name=ResourceKind.S3.value,
    display_name="S3 Bucket",
    namespace="AWS/S3",
    dimension_name="BucketName",
    default_period=86400,
    default_window_hours=168,
    metrics=(
        MetricDescriptor(
            query_id="bucketSize",
            metric_name="BucketSizeBytes",
            kind=MetricKind.STORAGE,
            title="Bucket Size",
            y_axis_label="Storage (GB)",
            extra_dimensions=(Dimension(name="StorageType", value="StandardStorage"),),
        ),
        MetricDescriptor(
            query_id="objectCount",
            metric_name="NumberOfObjects",
            kind=MetricKind.COUNT,
            title="Object Count",
            y_axis_label="Number of Objects",
            extra_dimensions=(Dimension(name="StorageType", value="AllStorageTypes"),),
        ),
    ),
)

RESOURCE_DESCRIPTORS: Dict[ResourceKind, ResourceDescriptor] = {
    ResourceKind.EC2: EC2_DESCRIPTOR,
    ResourceKind.RDS: RDS_DESCRIPTOR,
    ResourceKind.S3: S3_DESCRIPTOR,
    ResourceKind.LAMBDA: LAMBDA_DESCRIPTOR,
}

ResourceRef = Union[ResourceKind, str, ResourceDescriptor]


def describe(resource: ResourceRef) -> ResourceDescriptor:
    """
    Resolve a resource reference to its descriptor.

    Custom descriptors pass through unchanged, which is how ad-hoc views
    (any namespace, any metric) reuse the same pipeline.
    """
    if isinstance(resource, ResourceDescriptor):
        return resource
    return RESOURCE_DESCRIPTORS[ResourceKind(resource)]
