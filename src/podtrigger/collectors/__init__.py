from .base_collector import ClusterObjectStore, PodMetricsProvider
from .cluster_collector import KubernetesClusterCollector
from .pod_metrics_collector import PodMetricsCollector

__all__ = [
    "ClusterObjectStore",
    "PodMetricsProvider",
    "KubernetesClusterCollector",
    "PodMetricsCollector",
]
