# src/podtrigger/core/matcher.py
"""
Discovers the pods of the scale target and joins them with their metrics.
Unmatched pods and containers yield None; callers skip them.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..collectors.base_collector import ClusterObjectStore, PodMetricsProvider
from ..models.metrics import MetricSnapshot, ParsedTarget, PodMetricsRecord, PodRecord
from .exceptions import ListingError, NotFoundError, UnsupportedWorkloadError

logger = logging.getLogger(__name__)

SUPPORTED_WORKLOAD_KINDS = ("Deployment", "StatefulSet")


class PodMetricsMatcher:
    def __init__(self, cluster: ClusterObjectStore, metrics_provider: PodMetricsProvider):
        self.cluster = cluster
        self.metrics_provider = metrics_provider

    async def list_pods(self, target: ParsedTarget) -> Tuple[List[PodRecord], Dict[str, str]]:
        """
        Lists the pods selected by the target workload's pod-template selector.

        Raises:
            UnsupportedWorkloadError: If the target kind is not a Deployment or StatefulSet.
            NotFoundError: If the workload does not exist.
            ListingError: If the workload or pods cannot be listed.
        """
        kind = target.scale_target_kind
        if kind not in SUPPORTED_WORKLOAD_KINDS:
            raise UnsupportedWorkloadError(
                f"unsupported scale target kind '{kind}', expected one of {', '.join(SUPPORTED_WORKLOAD_KINDS)}"
            )

        try:
            workload = await self.cluster.get_workload(kind, target.namespace, target.scale_target_name)
        except NotFoundError as e:
            raise NotFoundError(f"failed to get {kind.lower()}: {e}") from e
        except ListingError as e:
            raise ListingError(f"failed to get {kind.lower()}: {e}") from e
        selector = dict(workload.match_labels)

        try:
            pods = await self.cluster.list_pods(target.namespace, selector)
        except ListingError as e:
            raise ListingError(f"failed to list pods: {e}") from e

        return pods, selector

    async def list_metrics(self, selector: Dict[str, str], namespace: str) -> MetricSnapshot:
        try:
            return await self.metrics_provider.list_pod_metrics(namespace, selector)
        except ListingError as e:
            raise ListingError(f"failed to list pod metrics: {e}") from e


def index_pod_metrics(snapshot: MetricSnapshot) -> Dict[str, PodMetricsRecord]:
    """Indexes a snapshot by pod name; the first record for a name wins."""
    index: Dict[str, PodMetricsRecord] = {}
    for record in snapshot:
        index.setdefault(record.pod_name, record)
    return index


def get_pod_metrics(index: Dict[str, PodMetricsRecord], pod_name: str) -> Optional[PodMetricsRecord]:
    return index.get(pod_name)


def get_container_metrics(pod_metrics: PodMetricsRecord, container_name: str) -> Optional[Dict[str, Decimal]]:
    return pod_metrics.containers.get(container_name)
