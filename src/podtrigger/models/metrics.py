# src/podtrigger/models/metrics.py
"""
Pydantic data models shared by the normalizer, the collectors, the
aggregator and the scaler. Configuration models are immutable; pod and
metric records are transient snapshots fetched on every evaluation.
"""

from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..utils.k8s_utils import format_quantity, is_binary_si

SCALED_OBJECT = "ScaledObject"
SCALED_JOB = "ScaledJob"

POD_RUNNING = "Running"


class MetricTargetType(str, Enum):
    """Target types understood by the autoscaling/v2 API."""

    UTILIZATION = "Utilization"
    AVERAGE_VALUE = "AverageValue"
    VALUE = "Value"


class MetricSourceType(str, Enum):
    RESOURCE = "Resource"
    CONTAINER_RESOURCE = "ContainerResource"


class ScalerConfig(BaseModel):
    """
    Raw trigger configuration as handed over by the orchestration layer.
    """

    trigger_metadata: Dict[str, str] = Field(default_factory=dict, description="Trigger metadata key/values.")
    metric_type: Optional[str] = Field(None, description="Structured metric type of the trigger.")
    scalable_object_type: str = Field("", description="ScaledObject or ScaledJob.")
    scalable_object_name: str = Field("", description="Name of the scalable object.")
    scalable_object_namespace: str = Field("", description="Namespace of the scalable object.")


class ParsedTarget(BaseModel):
    """
    Validated, typed trigger metadata. Exactly one of average_value /
    average_utilization is set, matching metric_type; same for the
    activation pair.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    metric_type: MetricTargetType
    value: str
    activation_value: str
    average_value: Optional[Decimal] = None
    average_utilization: Optional[int] = None
    activation_average_value: Optional[Decimal] = None
    activation_average_utilization: Optional[int] = None
    container_name: str = ""
    scalable_object_type: str = ""
    namespace: str = ""
    scale_target_name: str = ""
    scale_target_kind: str = ""


class ScaleTargetRef(BaseModel):
    name: str
    kind: str = ""
    api_version: Optional[str] = None


class ScaledObjectInfo(BaseModel):
    """The parts of a ScaledObject the resolver needs."""

    name: str
    namespace: str
    scale_target_ref: Optional[ScaleTargetRef] = None


class WorkloadInfo(BaseModel):
    """A Deployment or StatefulSet reduced to its pod selector."""

    name: str
    namespace: str
    kind: str
    match_labels: Dict[str, str] = Field(default_factory=dict)


class PodRecord(BaseModel):
    """
    A pod with its per-container resource requests
    (container name -> resource name -> quantity in base units).
    """

    name: str = Field(..., description="The name of the Kubernetes pod.")
    namespace: str = Field(..., description="The namespace the pod belongs to.")
    phase: Optional[str] = Field(None, description="The pod phase, e.g. Running.")
    containers: Dict[str, Dict[str, Decimal]] = Field(default_factory=dict)


class PodMetricsRecord(BaseModel):
    """
    A metrics-server sample for one pod
    (container name -> resource name -> usage in base units).
    """

    pod_name: str = Field(..., description="The name of the Kubernetes pod.")
    namespace: str = Field("", description="The namespace the pod belongs to.")
    containers: Dict[str, Dict[str, Decimal]] = Field(default_factory=dict)


class AggregateResult(BaseModel):
    average_value: Optional[Decimal] = None
    average_utilization: Optional[int] = None
    pod_count: int = 0


class MetricTarget(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: MetricTargetType
    average_utilization: Optional[int] = Field(None, alias="averageUtilization")
    average_value: Optional[str] = Field(None, alias="averageValue")


class ResourceMetricSource(BaseModel):
    name: str
    target: MetricTarget


class ContainerResourceMetricSource(BaseModel):
    name: str
    target: MetricTarget
    container: str


class MetricSpec(BaseModel):
    """A metric specification in the shape of autoscaling/v2 MetricSpec."""

    model_config = ConfigDict(populate_by_name=True)

    type: MetricSourceType
    resource: Optional[ResourceMetricSource] = None
    container_resource: Optional[ContainerResourceMetricSource] = Field(None, alias="containerResource")

    @classmethod
    def for_target(cls, resource_name: str, target: ParsedTarget) -> "MetricSpec":
        metric_target = MetricTarget(
            type=target.metric_type,
            average_utilization=target.average_utilization,
            average_value=(
                format_quantity(target.average_value, binary=is_binary_si(target.value))
                if target.average_value is not None
                else None
            ),
        )
        if target.container_name:
            return cls(
                type=MetricSourceType.CONTAINER_RESOURCE,
                container_resource=ContainerResourceMetricSource(
                    name=resource_name, target=metric_target, container=target.container_name
                ),
            )
        return cls(
            type=MetricSourceType.RESOURCE,
            resource=ResourceMetricSource(name=resource_name, target=metric_target),
        )

    def to_k8s(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


MetricSnapshot = List[PodMetricsRecord]
