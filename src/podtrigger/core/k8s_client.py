# src/podtrigger/core/k8s_client.py
"""
Kubernetes API access for the collectors. The client configuration is
loaded once per process: in-cluster service account first, local
kubeconfig second.
"""

import asyncio
import logging
from typing import Callable, Optional, TypeVar

from kubernetes_asyncio import client, config

logger = logging.getLogger(__name__)

Api = TypeVar("Api")

_load_lock: Optional[asyncio.Lock] = None
_loaded = False


async def _load_config() -> bool:
    try:
        config.load_incluster_config()
        logger.info("Using in-cluster service account credentials.")
        return True
    except config.ConfigException:
        logger.debug("Not running inside a cluster; trying kubeconfig.")

    try:
        await config.load_kube_config()
        logger.info("Using credentials from kubeconfig.")
        return True
    except config.ConfigException as e:
        logger.warning(f"No usable Kubernetes credentials: {e}")
        return False


async def ensure_k8s_config() -> bool:
    """True once credentials are loaded; concurrent callers share one attempt."""
    global _load_lock, _loaded

    if _loaded:
        return True
    if _load_lock is None:
        _load_lock = asyncio.Lock()

    async with _load_lock:
        if not _loaded:
            _loaded = await _load_config()
    return _loaded


async def _build(factory: Callable[[], Api]) -> Optional[Api]:
    if await ensure_k8s_config():
        return factory()
    return None


async def get_core_v1_api() -> Optional[client.CoreV1Api]:
    """Pods."""
    return await _build(client.CoreV1Api)


async def get_apps_v1_api() -> Optional[client.AppsV1Api]:
    """Deployments and StatefulSets."""
    return await _build(client.AppsV1Api)


async def get_custom_objects_api() -> Optional[client.CustomObjectsApi]:
    """ScaledObjects and metrics.k8s.io PodMetrics."""
    return await _build(client.CustomObjectsApi)
