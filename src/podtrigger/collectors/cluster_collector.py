# src/podtrigger/collectors/cluster_collector.py
"""
Reads ScaledObjects, workloads and pods from the Kubernetes API.
"""

import logging
from typing import Dict, List

from kubernetes_asyncio.client.rest import ApiException

from ..core.config import config
from ..core.exceptions import ListingError, NotFoundError, UnsupportedWorkloadError
from ..core.k8s_client import get_apps_v1_api, get_core_v1_api, get_custom_objects_api
from ..models.metrics import PodRecord, ScaledObjectInfo, ScaleTargetRef, WorkloadInfo
from ..utils.k8s_utils import format_label_selector, parse_optional_quantity
from .base_collector import ClusterObjectStore

logger = logging.getLogger(__name__)


def _raise_for_api_error(e: ApiException, what: str):
    if e.status == 404:
        raise NotFoundError(f"{what} not found: {e.reason}") from e
    raise ListingError(f"Kubernetes API error while reading {what}: {e}") from e


def _to_pod_record(pod) -> PodRecord:
    containers: Dict[str, Dict] = {}
    if pod.spec and pod.spec.containers:
        for container in pod.spec.containers:
            requests = (container.resources.requests if container.resources else None) or {}
            try:
                containers[container.name] = {
                    resource: parse_optional_quantity(quantity) for resource, quantity in requests.items()
                }
            except ValueError as e:
                raise ListingError(f"malformed quantity in requests of pod '{pod.metadata.name}': {e}") from e
    return PodRecord(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        phase=pod.status.phase if pod.status else None,
        containers=containers,
    )


class KubernetesClusterCollector(ClusterObjectStore):
    """
    Cluster object store backed by the CoreV1, AppsV1 and CustomObjects APIs.
    Clients are created lazily on first use.
    """

    def __init__(self):
        self._core_api = None
        self._apps_api = None
        self._custom_api = None

    async def _ensure_core(self):
        if not self._core_api:
            self._core_api = await get_core_v1_api()
        if not self._core_api:
            raise ListingError("Kubernetes client not configured.")
        return self._core_api

    async def _ensure_apps(self):
        if not self._apps_api:
            self._apps_api = await get_apps_v1_api()
        if not self._apps_api:
            raise ListingError("Kubernetes client not configured.")
        return self._apps_api

    async def _ensure_custom(self):
        if not self._custom_api:
            self._custom_api = await get_custom_objects_api()
        if not self._custom_api:
            raise ListingError("Kubernetes client not configured.")
        return self._custom_api

    async def get_scaled_object(self, namespace: str, name: str) -> ScaledObjectInfo:
        api = await self._ensure_custom()
        try:
            obj = await api.get_namespaced_custom_object(
                config.SCALED_OBJECT_GROUP,
                config.SCALED_OBJECT_VERSION,
                namespace,
                config.SCALED_OBJECT_PLURAL,
                name,
            )
        except ApiException as e:
            _raise_for_api_error(e, f"scaledobject {namespace}/{name}")

        ref = (obj.get("spec") or {}).get("scaleTargetRef")
        return ScaledObjectInfo(
            name=name,
            namespace=namespace,
            scale_target_ref=(
                ScaleTargetRef(name=ref.get("name", ""), kind=ref.get("kind", ""), api_version=ref.get("apiVersion"))
                if ref
                else None
            ),
        )

    async def get_workload(self, kind: str, namespace: str, name: str) -> WorkloadInfo:
        api = await self._ensure_apps()
        try:
            if kind == "Deployment":
                workload = await api.read_namespaced_deployment(name, namespace)
            elif kind == "StatefulSet":
                workload = await api.read_namespaced_stateful_set(name, namespace)
            else:
                raise UnsupportedWorkloadError(f"unsupported workload kind: {kind}")
        except ApiException as e:
            _raise_for_api_error(e, f"{kind.lower()} {namespace}/{name}")

        selector = workload.spec.selector if workload.spec else None
        return WorkloadInfo(
            name=name,
            namespace=namespace,
            kind=kind,
            match_labels=(selector.match_labels if selector else None) or {},
        )

    async def list_pods(self, namespace: str, selector: Dict[str, str]) -> List[PodRecord]:
        api = await self._ensure_core()
        label_selector = format_label_selector(selector)
        try:
            pod_list = await api.list_namespaced_pod(namespace, label_selector=label_selector, watch=False)
        except ApiException as e:
            raise ListingError(f"Kubernetes API error while listing pods: {e}") from e

        pods = [_to_pod_record(pod) for pod in pod_list.items]
        logger.debug(f"Listed {len(pods)} pods in '{namespace}' matching '{label_selector}'.")
        return pods

    async def close(self):
        """Close the Kubernetes API clients if they exist."""
        for api in (self._core_api, self._apps_api, self._custom_api):
            if api:
                await api.api_client.close()
        self._core_api = self._apps_api = self._custom_api = None
        logger.debug("KubernetesClusterCollector clients closed.")
