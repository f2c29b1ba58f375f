# src/podtrigger/core/resolver.py

import logging
from typing import Tuple

from ..collectors.base_collector import ClusterObjectStore
from .exceptions import ConfigError

logger = logging.getLogger(__name__)


class WorkloadResolver:
    """
    Resolves a ScaledObject to the name and kind of the workload it scales.
    """

    def __init__(self, cluster: ClusterObjectStore):
        self.cluster = cluster

    async def resolve(self, object_name: str, object_namespace: str) -> Tuple[str, str]:
        """
        Returns the (name, kind) of the ScaledObject's scaleTargetRef, verbatim.

        Raises:
            NotFoundError: If the ScaledObject does not exist.
            ConfigError: If the ScaledObject has no scaleTargetRef.
        """
        scaled_object = await self.cluster.get_scaled_object(object_namespace, object_name)
        ref = scaled_object.scale_target_ref
        if ref is None:
            raise ConfigError(f"scaled object {object_name} has no scale target ref")

        logger.debug(f"ScaledObject {object_namespace}/{object_name} targets {ref.kind} '{ref.name}'.")
        return ref.name, ref.kind
