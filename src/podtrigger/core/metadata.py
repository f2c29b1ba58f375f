# src/podtrigger/core/metadata.py
"""
Normalizes raw trigger metadata into a validated ParsedTarget.
"""

import logging
import re
from typing import Optional

from ..models.metrics import SCALED_OBJECT, MetricTargetType, ParsedTarget, ScalerConfig
from ..utils.k8s_utils import parse_quantity
from .exceptions import ConfigError
from .resolver import WorkloadResolver

logger = logging.getLogger(__name__)

DEFAULT_ACTIVATION_VALUE = "0"

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

_LEGACY_TYPES = {
    "AverageValue": MetricTargetType.AVERAGE_VALUE,
    "Utilization": MetricTargetType.UTILIZATION,
}


def _legacy_metric_type(raw_type: str) -> MetricTargetType:
    """
    Maps the deprecated 'type' metadata field onto a metric type.

    Deprecated: remove together with the 'type' field; 'metricType' replaces it.
    """
    logger.info("The 'type' setting is DEPRECATED and will be removed in a later release - Use 'metricType' instead.")
    metric_type = _LEGACY_TYPES.get(raw_type)
    if metric_type is None:
        raise ConfigError(f"unknown metric type: {raw_type}, allowed values are 'Utilization' or 'AverageValue'")
    return metric_type


def resolve_metric_type(raw_type: Optional[str], structured_type: Optional[str]) -> MetricTargetType:
    """Picks the single metric type from the legacy or the structured field."""
    if raw_type and structured_type:
        raise ConfigError("only one of 'type' (deprecated) and 'metricType' may be set")
    if raw_type:
        return _legacy_metric_type(raw_type)
    if not structured_type:
        raise ConfigError("metricType is required")

    try:
        return MetricTargetType(structured_type)
    except ValueError as e:
        raise ConfigError(
            f"unknown metric type: {structured_type}, allowed values are 'Utilization' or 'AverageValue'"
        ) from e


def parse_utilization(value: str) -> int:
    """Parses a base-10 integer that fits in 32 bits."""
    if not _INTEGER_RE.fullmatch(value):
        raise ConfigError(f"invalid utilization value: {value!r}")
    number = int(value)
    if number < _INT32_MIN or number > _INT32_MAX:
        raise ConfigError(f"utilization value out of range: {value!r}")
    return number


def _parse_average_value(value: str, field: str):
    try:
        return parse_quantity(value)
    except ValueError as e:
        raise ConfigError(f"invalid quantity for '{field}': {e}") from e


async def parse_resource_metadata(scaler_config: ScalerConfig, resolver: WorkloadResolver) -> ParsedTarget:
    """
    Validates the trigger metadata and, for ScaledObjects, resolves the
    scale target through the resolver.

    Raises:
        ConfigError: On missing, malformed or contradictory metadata.
    """
    metadata = scaler_config.trigger_metadata
    metric_type = resolve_metric_type(metadata.get("type"), scaler_config.metric_type)

    value = metadata.get("value")
    if not value:
        raise ConfigError("missing required parameter 'value'")
    activation_value = metadata.get("activationValue") or DEFAULT_ACTIVATION_VALUE

    fields = {}
    if metric_type == MetricTargetType.AVERAGE_VALUE:
        fields["average_value"] = _parse_average_value(value, "value")
        fields["activation_average_value"] = _parse_average_value(activation_value, "activationValue")
    elif metric_type == MetricTargetType.UTILIZATION:
        fields["average_utilization"] = parse_utilization(value)
        fields["activation_average_utilization"] = parse_utilization(activation_value)
    else:
        raise ConfigError(
            f"unsupported metric type: {metric_type.value}, allowed values are 'Utilization' or 'AverageValue'"
        )

    scale_target_name, scale_target_kind = "", ""
    if scaler_config.scalable_object_type == SCALED_OBJECT:
        scale_target_name, scale_target_kind = await resolver.resolve(
            scaler_config.scalable_object_name, scaler_config.scalable_object_namespace
        )

    return ParsedTarget(
        metric_type=metric_type,
        value=value,
        activation_value=activation_value,
        container_name=metadata.get("containerName") or "",
        scalable_object_type=scaler_config.scalable_object_type,
        namespace=scaler_config.scalable_object_namespace,
        scale_target_name=scale_target_name,
        scale_target_kind=scale_target_kind,
        **fields,
    )
