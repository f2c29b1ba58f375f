# tests/conftest.py

from decimal import Decimal
from typing import Dict, List, Optional

import pytest

from podtrigger.collectors.base_collector import ClusterObjectStore, PodMetricsProvider
from podtrigger.core.exceptions import ListingError, NotFoundError
from podtrigger.models.metrics import (
    PodMetricsRecord,
    PodRecord,
    ScaledObjectInfo,
    ScaleTargetRef,
    WorkloadInfo,
)
from podtrigger.utils.k8s_utils import parse_quantity

SELECT_LABELS = {"app": "test-deployment"}


def _quantities(values: Dict[str, str]) -> Dict[str, Decimal]:
    return {name: parse_quantity(value) for name, value in values.items()}


def make_pod(
    name: str = "test-deployment-1",
    cpu_request: Optional[str] = None,
    memory_request: Optional[str] = None,
    phase: str = "Running",
    container: str = "test-container",
    extra_containers: Optional[Dict[str, Dict[str, str]]] = None,
) -> PodRecord:
    """Builds a pod with one container and optional extra containers."""
    requests = {}
    if cpu_request is not None:
        requests["cpu"] = cpu_request
    if memory_request is not None:
        requests["memory"] = memory_request
    containers = {container: _quantities(requests)}
    for extra_name, extra_requests in (extra_containers or {}).items():
        containers[extra_name] = _quantities(extra_requests)
    return PodRecord(name=name, namespace="test-namespace", phase=phase, containers=containers)


def make_pod_metrics(
    name: str = "test-deployment-1",
    cpu: Optional[str] = None,
    memory: Optional[str] = None,
    container: str = "test-container",
    extra_containers: Optional[Dict[str, Dict[str, str]]] = None,
) -> PodMetricsRecord:
    usage = {}
    if cpu is not None:
        usage["cpu"] = cpu
    if memory is not None:
        usage["memory"] = memory
    containers = {container: _quantities(usage)}
    for extra_name, extra_usage in (extra_containers or {}).items():
        containers[extra_name] = _quantities(extra_usage)
    return PodMetricsRecord(pod_name=name, namespace="test-namespace", containers=containers)


class FakeClusterStore(ClusterObjectStore):
    """In-memory cluster object store that records the calls made to it."""

    def __init__(
        self,
        pods: Optional[List[PodRecord]] = None,
        target_kind: str = "Deployment",
        scale_target_ref: bool = True,
    ):
        self.pods = pods or []
        self.scaled_objects = {
            ("test-namespace", "test-name"): ScaledObjectInfo(
                name="test-name",
                namespace="test-namespace",
                scale_target_ref=(
                    ScaleTargetRef(name="test-deployment", kind=target_kind, api_version="apps/v1")
                    if scale_target_ref
                    else None
                ),
            )
        }
        self.workloads = {
            ("Deployment", "test-namespace", "test-deployment"): WorkloadInfo(
                name="test-deployment", namespace="test-namespace", kind="Deployment", match_labels=SELECT_LABELS
            ),
            ("StatefulSet", "test-namespace", "test-deployment"): WorkloadInfo(
                name="test-deployment", namespace="test-namespace", kind="StatefulSet", match_labels=SELECT_LABELS
            ),
        }
        self.list_pods_error: Optional[Exception] = None
        self.calls: List[str] = []

    async def get_scaled_object(self, namespace, name):
        self.calls.append("get_scaled_object")
        try:
            return self.scaled_objects[(namespace, name)]
        except KeyError:
            raise NotFoundError(f"scaledobject {namespace}/{name} not found")

    async def get_workload(self, kind, namespace, name):
        self.calls.append("get_workload")
        try:
            return self.workloads[(kind, namespace, name)]
        except KeyError:
            raise NotFoundError(f"{kind} {namespace}/{name} not found")

    async def list_pods(self, namespace, selector):
        self.calls.append("list_pods")
        if self.list_pods_error:
            raise self.list_pods_error
        return list(self.pods)


class FakeMetricsProvider(PodMetricsProvider):
    def __init__(self, records: Optional[List[PodMetricsRecord]] = None):
        self.records = records or []
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    async def list_pod_metrics(self, namespace, selector):
        self.calls.append((namespace, dict(selector)))
        if self.error:
            raise self.error
        return list(self.records)


@pytest.fixture
def cluster():
    return FakeClusterStore(pods=[make_pod(cpu_request="400m")])


@pytest.fixture
def metrics_provider():
    return FakeMetricsProvider([make_pod_metrics(cpu="500m")])


@pytest.fixture
def listing_error():
    return ListingError("connection refused")
