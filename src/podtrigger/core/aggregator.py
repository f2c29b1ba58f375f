# src/podtrigger/core/aggregator.py
"""
Reduces joined pod/metric records into a single scaling signal.

Two modes are supported:
- average value: the mean absolute usage across contributing pods,
  computed at nano resolution.
- average utilization: the integer mean of per-pod usage/request
  percentages. This is an average of percentages, not the ratio of summed
  usage to summed requests; the two differ when pods have different requests.

Only Running pods with a metrics sample contribute. Pods (or containers)
without a sample are skipped rather than treated as errors.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from ..models.metrics import POD_RUNNING, AggregateResult, MetricSnapshot, PodMetricsRecord, PodRecord
from ..utils.k8s_utils import from_nano, milli_value, nano_value, unit_value
from .exceptions import NoActivePodsError, UnsupportedMetricError
from .matcher import get_container_metrics, get_pod_metrics, index_pod_metrics

logger = logging.getLogger(__name__)

CPU_METRIC_NAME = "cpu"
MEMORY_METRIC_NAME = "memory"
SUPPORTED_METRIC_NAMES = (CPU_METRIC_NAME, MEMORY_METRIC_NAME)


def _check_metric_name(metric_name: str) -> str:
    if metric_name not in SUPPORTED_METRIC_NAMES:
        raise UnsupportedMetricError(f"unsupported metric name: {metric_name}")
    return metric_name


def _scaled(metric_name: str, quantity: Decimal) -> int:
    """CPU in milli-cores, memory in bytes."""
    if metric_name == CPU_METRIC_NAME:
        return milli_value(quantity)
    return unit_value(quantity)


def _usage(container_usage: Dict[str, Decimal], metric_name: str) -> Decimal:
    return container_usage.get(metric_name, Decimal(0))


def _pod_usage(pod_metrics: PodMetricsRecord, metric_name: str) -> Decimal:
    return sum((_usage(usage, metric_name) for usage in pod_metrics.containers.values()), Decimal(0))


def _container_capacity(pod: PodRecord, container_name: str, metric_name: str) -> int:
    requests = pod.containers.get(container_name) or {}
    if metric_name not in requests:
        return 0
    return _scaled(metric_name, requests[metric_name])


def _pod_capacity(pod: PodRecord, metric_name: str) -> int:
    return sum(
        _scaled(metric_name, requests[metric_name]) for requests in pod.containers.values() if metric_name in requests
    )


def _div(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator < 0) == (denominator < 0) else -quotient


def calculate_average(total: Decimal, count: int) -> Decimal:
    """Divides a total by a pod count at nano resolution (integer division)."""
    if count == 0:
        return Decimal(0)
    return from_nano(_div(nano_value(total), count))


def _running(pods: List[PodRecord]):
    for pod in pods:
        if pod.phase != POD_RUNNING:
            logger.debug(f"Skipping pod '{pod.name}' in phase {pod.phase}.")
            continue
        yield pod


def average_value(
    pods: List[PodRecord],
    snapshot: MetricSnapshot,
    container_name: Optional[str],
    metric_name: str,
) -> AggregateResult:
    """
    Averages the absolute usage of the named resource across Running pods.

    Raises:
        UnsupportedMetricError: If metric_name is not cpu or memory.
        NoActivePodsError: If no pod contributed.
    """
    index = index_pod_metrics(snapshot)
    total = Decimal(0)
    pod_count = 0

    for pod in _running(pods):
        pod_metrics = get_pod_metrics(index, pod.name)
        if pod_metrics is None:
            logger.debug(f"Skipping pod '{pod.name}': metrics not available.")
            continue

        _check_metric_name(metric_name)
        if container_name:
            container_usage = get_container_metrics(pod_metrics, container_name)
            if container_usage is None:
                logger.debug(f"Skipping pod '{pod.name}': no metrics for container '{container_name}'.")
                continue
            value = _usage(container_usage, metric_name)
        else:
            value = _pod_usage(pod_metrics, metric_name)

        total += value
        pod_count += 1

    if pod_count == 0:
        raise NoActivePodsError("no running pods found")

    return AggregateResult(average_value=calculate_average(total, pod_count), pod_count=pod_count)


def average_utilization(
    pods: List[PodRecord],
    snapshot: MetricSnapshot,
    container_name: Optional[str],
    metric_name: str,
) -> AggregateResult:
    """
    Averages per-pod utilization (usage * 100 / request) across Running pods.
    Pods without a request for the resource do not contribute.

    Raises:
        UnsupportedMetricError: If metric_name is not cpu or memory.
        NoActivePodsError: If no pod contributed.
    """
    index = index_pod_metrics(snapshot)
    total_utilization = 0
    pod_count = 0

    for pod in _running(pods):
        pod_metrics = get_pod_metrics(index, pod.name)
        if pod_metrics is None:
            logger.debug(f"Skipping pod '{pod.name}': metrics not available.")
            continue

        _check_metric_name(metric_name)
        if container_name:
            container_usage = get_container_metrics(pod_metrics, container_name)
            if container_usage is None:
                logger.debug(f"Skipping pod '{pod.name}': no metrics for container '{container_name}'.")
                continue
            metric_value = _scaled(metric_name, _usage(container_usage, metric_name))
            capacity = _container_capacity(pod, container_name, metric_name)
        else:
            metric_value = sum(
                _scaled(metric_name, _usage(usage, metric_name)) for usage in pod_metrics.containers.values()
            )
            capacity = _pod_capacity(pod, metric_name)

        if capacity == 0:
            logger.debug(f"Skipping pod '{pod.name}': no {metric_name} request.")
            continue

        total_utilization += _div(metric_value * 100, capacity)
        pod_count += 1

    if pod_count == 0:
        raise NoActivePodsError("no running pods found with non-zero capacity")

    return AggregateResult(average_utilization=_div(total_utilization, pod_count), pod_count=pod_count)
