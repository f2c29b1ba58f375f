# src/podtrigger/collectors/pod_metrics_collector.py
"""
Collects current pod resource usage from the resource metrics API
(metrics.k8s.io, served by metrics-server).
"""

import logging
from typing import Dict

from kubernetes_asyncio.client.rest import ApiException

from ..core.config import config
from ..core.exceptions import ListingError
from ..core.k8s_client import get_custom_objects_api
from ..models.metrics import MetricSnapshot, PodMetricsRecord
from ..utils.k8s_utils import format_label_selector, parse_optional_quantity
from .base_collector import PodMetricsProvider

logger = logging.getLogger(__name__)


def _to_pod_metrics_record(item: dict) -> PodMetricsRecord:
    metadata = item.get("metadata") or {}
    pod_name = metadata.get("name", "")
    containers = {}
    for container in item.get("containers") or []:
        usage = container.get("usage") or {}
        try:
            containers[container.get("name", "")] = {
                resource: parse_optional_quantity(quantity) for resource, quantity in usage.items()
            }
        except ValueError as e:
            raise ListingError(f"malformed quantity in metrics for pod '{pod_name}': {e}") from e
    return PodMetricsRecord(
        pod_name=pod_name,
        namespace=metadata.get("namespace", ""),
        containers=containers,
    )


class PodMetricsCollector(PodMetricsProvider):
    """
    Lists PodMetrics objects through the CustomObjects API.
    """

    def __init__(self):
        self._api = None

    async def _ensure_client(self):
        """Lazily initialize the Kubernetes client."""
        if self._api:
            return self._api

        self._api = await get_custom_objects_api()
        if not self._api:
            logger.warning("PodMetricsCollector could not initialize Kubernetes client.")
        return self._api

    async def list_pod_metrics(self, namespace: str, selector: Dict[str, str]) -> MetricSnapshot:
        api = await self._ensure_client()
        if not api:
            raise ListingError("Kubernetes client not configured.")

        try:
            response = await api.list_namespaced_custom_object(
                config.METRICS_API_GROUP,
                config.METRICS_API_VERSION,
                namespace,
                "pods",
                label_selector=format_label_selector(selector),
            )
        except ApiException as e:
            raise ListingError(f"Metrics API error while listing pod metrics: {e}") from e

        records = [_to_pod_metrics_record(item) for item in response.get("items") or []]
        logger.debug(f"Collected {len(records)} pod metrics samples in '{namespace}'.")
        return records

    async def close(self):
        """Close the Kubernetes API client if it exists."""
        if self._api:
            await self._api.api_client.close()
            logger.debug("PodMetricsCollector Kubernetes client closed.")
            self._api = None
