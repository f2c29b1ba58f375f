# src/podtrigger/collectors/base_collector.py
"""
Abstract interfaces for the two collaborators the scaler reads from: the
cluster object store and the pod metrics provider. Keeping them abstract
lets the scaler run against the Kubernetes API or an in-memory fake.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from ..models.metrics import MetricSnapshot, PodRecord, ScaledObjectInfo, WorkloadInfo


class ClusterObjectStore(ABC):
    """
    Read access to cluster objects.
    """

    @abstractmethod
    async def get_scaled_object(self, namespace: str, name: str) -> ScaledObjectInfo:
        """
        Fetches a ScaledObject.

        Raises:
            NotFoundError: If the object does not exist.
            ListingError: If the API cannot be reached.
        """
        pass

    @abstractmethod
    async def get_workload(self, kind: str, namespace: str, name: str) -> WorkloadInfo:
        """
        Fetches a Deployment or StatefulSet and its pod selector.

        Raises:
            NotFoundError: If the workload does not exist.
            ListingError: If the API cannot be reached.
        """
        pass

    @abstractmethod
    async def list_pods(self, namespace: str, selector: Dict[str, str]) -> List[PodRecord]:
        """
        Lists the pods in a namespace that match every label of the selector.
        """
        pass

    async def close(self):
        """
        Clean up resources (e.g., close API clients).
        """
        pass


class PodMetricsProvider(ABC):
    """
    Read access to point-in-time pod resource usage.
    """

    @abstractmethod
    async def list_pod_metrics(self, namespace: str, selector: Dict[str, str]) -> MetricSnapshot:
        """
        Lists the current usage samples of the pods matching the selector.
        """
        pass

    async def close(self):
        pass
