# tests/core/test_metadata.py
"""
Tests for trigger metadata normalization.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from podtrigger.core.exceptions import ConfigError, NotFoundError
from podtrigger.core.metadata import (
    DEFAULT_ACTIVATION_VALUE,
    parse_resource_metadata,
    parse_utilization,
    resolve_metric_type,
)
from podtrigger.core.resolver import WorkloadResolver
from podtrigger.models.metrics import MetricTargetType, ScalerConfig

VALID_METADATA = {"type": "Utilization", "value": "50", "activationValue": "40"}
VALID_CONTAINER_METADATA = {"type": "Utilization", "value": "50", "containerName": "foo"}


@pytest.fixture
def resolver():
    mock_resolver = MagicMock(spec=WorkloadResolver)
    mock_resolver.resolve = AsyncMock(return_value=("test-deployment", "Deployment"))
    return mock_resolver


@pytest.mark.parametrize(
    "metric_type, metadata, is_error",
    [
        (None, {}, True),
        (None, VALID_METADATA, False),
        (None, VALID_CONTAINER_METADATA, False),
        (None, {"type": "Utilization", "value": "50"}, False),
        ("Utilization", {"value": "50"}, False),
        (None, {"type": "AverageValue", "value": "50"}, False),
        ("AverageValue", {"value": "50"}, False),
        (None, {"type": "AverageValue", "value": "50", "activationValue": "40"}, False),
        (None, {"type": "Value", "value": "50"}, True),
        ("Value", {"value": "50"}, True),
        (None, {"type": "AverageValue"}, True),
        (None, {"type": "xxx", "value": "50"}, True),
        ("Utilization", {"type": "Utilization", "value": "50"}, True),
        ("Utilization", {"value": ""}, True),
        ("Utilization", {"value": "fifty"}, True),
        ("Utilization", {"value": "2147483648"}, True),
        ("AverageValue", {"value": "not-a-quantity"}, True),
        ("AverageValue", {"value": "100m", "activationValue": "1x"}, True),
        (None, {"type": "utilization", "value": "50"}, True),
    ],
)
@pytest.mark.asyncio
async def test_parse_resource_metadata(metric_type, metadata, is_error, resolver):
    scaler_config = ScalerConfig(trigger_metadata=metadata, metric_type=metric_type)
    if is_error:
        with pytest.raises(ConfigError):
            await parse_resource_metadata(scaler_config, resolver)
    else:
        target = await parse_resource_metadata(scaler_config, resolver)
        assert target.metric_type in (MetricTargetType.UTILIZATION, MetricTargetType.AVERAGE_VALUE)


@pytest.mark.asyncio
async def test_utilization_target_sets_only_utilization_fields(resolver):
    target = await parse_resource_metadata(ScalerConfig(trigger_metadata=VALID_METADATA), resolver)

    assert target.metric_type == MetricTargetType.UTILIZATION
    assert target.average_utilization == 50
    assert target.activation_average_utilization == 40
    assert target.average_value is None
    assert target.activation_average_value is None


@pytest.mark.asyncio
async def test_average_value_target_parses_quantities(resolver):
    scaler_config = ScalerConfig(
        trigger_metadata={"value": "500m", "activationValue": "1Gi"}, metric_type="AverageValue"
    )
    target = await parse_resource_metadata(scaler_config, resolver)

    assert target.average_value == Decimal("0.5")
    assert target.activation_average_value == Decimal(1024**3)
    assert target.average_utilization is None
    assert target.activation_average_utilization is None


@pytest.mark.asyncio
@pytest.mark.parametrize("activation", [None, ""])
async def test_activation_value_defaults_to_zero(resolver, activation):
    metadata = {"value": "50"}
    if activation is not None:
        metadata["activationValue"] = activation
    target = await parse_resource_metadata(ScalerConfig(trigger_metadata=metadata, metric_type="Utilization"), resolver)

    assert target.activation_value == DEFAULT_ACTIVATION_VALUE
    assert target.activation_average_utilization == 0


@pytest.mark.asyncio
async def test_container_name_is_kept_verbatim(resolver):
    target = await parse_resource_metadata(ScalerConfig(trigger_metadata=VALID_CONTAINER_METADATA), resolver)
    assert target.container_name == "foo"


@pytest.mark.asyncio
async def test_scaled_object_resolves_scale_target(resolver):
    scaler_config = ScalerConfig(
        trigger_metadata=VALID_METADATA,
        scalable_object_type="ScaledObject",
        scalable_object_name="test-name",
        scalable_object_namespace="test-namespace",
    )
    target = await parse_resource_metadata(scaler_config, resolver)

    resolver.resolve.assert_awaited_once_with("test-name", "test-namespace")
    assert target.scale_target_name == "test-deployment"
    assert target.scale_target_kind == "Deployment"
    assert target.namespace == "test-namespace"
    assert target.scalable_object_type == "ScaledObject"


@pytest.mark.asyncio
async def test_scaled_job_does_not_resolve(resolver):
    scaler_config = ScalerConfig(
        trigger_metadata=VALID_METADATA,
        scalable_object_type="ScaledJob",
        scalable_object_name="test-job",
        scalable_object_namespace="test-namespace",
    )
    target = await parse_resource_metadata(scaler_config, resolver)

    resolver.resolve.assert_not_awaited()
    assert target.scale_target_kind == ""


@pytest.mark.asyncio
async def test_resolver_errors_propagate_unchanged(resolver):
    error = NotFoundError("scaledobject test-namespace/test-name not found")
    resolver.resolve.side_effect = error
    scaler_config = ScalerConfig(
        trigger_metadata=VALID_METADATA,
        scalable_object_type="ScaledObject",
        scalable_object_name="test-name",
        scalable_object_namespace="test-namespace",
    )

    with pytest.raises(NotFoundError) as exc_info:
        await parse_resource_metadata(scaler_config, resolver)
    assert exc_info.value is error


def test_resolve_metric_type_rejects_both_fields():
    with pytest.raises(ConfigError, match="only one of"):
        resolve_metric_type("Utilization", "AverageValue")


def test_resolve_metric_type_requires_one_field():
    with pytest.raises(ConfigError, match="metricType is required"):
        resolve_metric_type(None, None)


def test_legacy_type_logs_deprecation(caplog):
    with caplog.at_level("INFO"):
        assert resolve_metric_type("AverageValue", None) == MetricTargetType.AVERAGE_VALUE
    assert "DEPRECATED" in caplog.text


@pytest.mark.parametrize(
    "value, expected",
    [("50", 50), ("0", 0), ("-5", -5), ("+7", 7), ("2147483647", 2147483647), ("-2147483648", -2147483648)],
)
def test_parse_utilization(value, expected):
    assert parse_utilization(value) == expected


@pytest.mark.parametrize("value", ["2147483648", "-2147483649", "5.0", " 5", "1_000", "0x10", ""])
def test_parse_utilization_rejects(value):
    with pytest.raises(ConfigError):
        parse_utilization(value)
