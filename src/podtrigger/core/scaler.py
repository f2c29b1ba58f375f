# src/podtrigger/core/scaler.py
"""
The resource scaler: decides whether a workload is active based on the
average usage or utilization of one pod resource (cpu or memory).
"""

import logging
from typing import List, Tuple

from ..collectors.base_collector import ClusterObjectStore, PodMetricsProvider
from ..models.metrics import SCALED_JOB, MetricSpec, MetricTargetType, ParsedTarget, ScalerConfig
from .aggregator import average_utilization, average_value
from .exceptions import ConfigError
from .matcher import PodMetricsMatcher
from .metadata import parse_resource_metadata
from .resolver import WorkloadResolver
from .telemetry import evaluation_counter, tracer

logger = logging.getLogger(__name__)


class ResourceScaler:
    """
    Evaluates activity for one cpu/memory trigger. The parsed target is
    immutable, so one instance may serve concurrent evaluations.
    """

    def __init__(
        self,
        target: ParsedTarget,
        resource_name: str,
        cluster: ClusterObjectStore,
        metrics_provider: PodMetricsProvider,
    ):
        self.target = target
        self.resource_name = resource_name
        self.matcher = PodMetricsMatcher(cluster, metrics_provider)

    def get_metric_spec_for_scaling(self) -> List[MetricSpec]:
        """Returns the metric spec for the HPA: container-scoped when a container is set."""
        return [MetricSpec.for_target(self.resource_name, self.target)]

    async def _get_average_value(self, metric_name: str):
        pods, selector = await self.matcher.list_pods(self.target)
        snapshot = await self.matcher.list_metrics(selector, self.target.namespace)
        return average_value(pods, snapshot, self.target.container_name, metric_name)

    async def _get_average_utilization(self, metric_name: str):
        pods, selector = await self.matcher.list_pods(self.target)
        snapshot = await self.matcher.list_metrics(selector, self.target.namespace)
        return average_utilization(pods, snapshot, self.target.container_name, metric_name)

    async def _is_active(self, metric_name: str) -> bool:
        if self.target.metric_type == MetricTargetType.AVERAGE_VALUE:
            result = await self._get_average_value(metric_name)
            logger.debug(
                "Average %s value %s over %d pods (activation %s)",
                metric_name,
                result.average_value,
                result.pod_count,
                self.target.activation_average_value,
            )
            return result.average_value > self.target.activation_average_value

        if self.target.metric_type == MetricTargetType.UTILIZATION:
            result = await self._get_average_utilization(metric_name)
            logger.debug(
                "Average %s utilization %d%% over %d pods (activation %d%%)",
                metric_name,
                result.average_utilization,
                result.pod_count,
                self.target.activation_average_utilization,
            )
            return result.average_utilization > self.target.activation_average_utilization

        raise ConfigError(f"no matching resource metric found for {self.resource_name}")

    async def get_metrics_and_activity(self, metric_name: str) -> Tuple[list, bool]:
        """
        Returns (metric values, is_active). Metric values are always empty:
        this scaler only reports activity.
        """
        if self.target.scalable_object_type == SCALED_JOB:
            return [], False

        with tracer.start_as_current_span("podtrigger.evaluate") as span:
            span.set_attribute("podtrigger.resource", self.resource_name)
            span.set_attribute("podtrigger.metric_type", self.target.metric_type.value)
            try:
                is_active = await self._is_active(metric_name)
            except Exception as e:
                evaluation_counter.add(1, {"resource": self.resource_name, "outcome": "error"})
                span.record_exception(e)
                raise

        evaluation_counter.add(
            1, {"resource": self.resource_name, "outcome": "active" if is_active else "inactive"}
        )
        return [], is_active

    async def close(self):
        """Nothing to release."""
        return None


async def new_resource_scaler(
    resource_name: str,
    scaler_config: ScalerConfig,
    cluster: ClusterObjectStore,
    metrics_provider: PodMetricsProvider,
) -> ResourceScaler:
    """
    Builds a ResourceScaler from raw trigger configuration.

    Raises:
        ConfigError: If the metadata cannot be parsed.
        NotFoundError: If the ScaledObject cannot be found.
    """
    try:
        target = await parse_resource_metadata(scaler_config, WorkloadResolver(cluster))
    except ConfigError as e:
        raise ConfigError(f"error parsing {resource_name} metadata: {e}") from e

    return ResourceScaler(target, resource_name, cluster, metrics_provider)
