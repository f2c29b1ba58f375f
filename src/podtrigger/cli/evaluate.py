# src/podtrigger/cli/evaluate.py
"""
The `evaluate` and `spec` commands: build a resource scaler from command
line options, then report its activity or its metric spec.
"""

import asyncio
import json
import logging
from typing import Dict, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from ..collectors.cluster_collector import KubernetesClusterCollector
from ..collectors.pod_metrics_collector import PodMetricsCollector
from ..core.config import config
from ..core.exceptions import PodTriggerError
from ..core.scaler import new_resource_scaler
from ..core.telemetry import initialize_telemetry
from ..models.metrics import SCALED_JOB, SCALED_OBJECT, ScalerConfig

logger = logging.getLogger(__name__)

console = Console()

ResourceArg = Annotated[str, typer.Argument(help="Resource to scale on: 'cpu' or 'memory'.")]
NamespaceOpt = Annotated[str, typer.Option("--namespace", "-n", help="Namespace of the scalable object.")]
NameOpt = Annotated[str, typer.Option("--name", help="Name of the ScaledObject (or ScaledJob).")]
ValueOpt = Annotated[str, typer.Option("--value", help="Target value (quantity or percentage).")]
MetricTypeOpt = Annotated[
    Optional[str], typer.Option("--metric-type", help="Target type: 'Utilization' or 'AverageValue'.")
]
LegacyTypeOpt = Annotated[Optional[str], typer.Option("--type", help="DEPRECATED: use --metric-type.")]
ActivationOpt = Annotated[Optional[str], typer.Option("--activation-value", help="Activation threshold.")]
ContainerOpt = Annotated[Optional[str], typer.Option("--container", help="Scale on a single container.")]
JobOpt = Annotated[bool, typer.Option("--scaled-job", help="Treat the scalable object as a ScaledJob.")]


def build_scaler_config(
    namespace: str,
    name: str,
    value: str,
    metric_type: Optional[str],
    legacy_type: Optional[str],
    activation_value: Optional[str],
    container: Optional[str],
    scaled_job: bool,
) -> ScalerConfig:
    """Maps CLI options onto raw trigger configuration."""
    metadata: Dict[str, str] = {"value": value}
    if legacy_type:
        metadata["type"] = legacy_type
    if activation_value:
        metadata["activationValue"] = activation_value
    if container:
        metadata["containerName"] = container

    return ScalerConfig(
        trigger_metadata=metadata,
        metric_type=metric_type,
        scalable_object_type=SCALED_JOB if scaled_job else SCALED_OBJECT,
        scalable_object_name=name,
        scalable_object_namespace=namespace,
    )


async def _evaluate(resource: str, scaler_config: ScalerConfig, metric_name: str) -> Tuple[bool, list]:
    cluster = KubernetesClusterCollector()
    metrics_provider = PodMetricsCollector()
    try:
        scaler = await new_resource_scaler(resource, scaler_config, cluster, metrics_provider)
        _, is_active = await asyncio.wait_for(
            scaler.get_metrics_and_activity(metric_name), timeout=config.EVALUATION_TIMEOUT_SECONDS
        )
        specs = [s.to_k8s() for s in scaler.get_metric_spec_for_scaling()]
        await scaler.close()
        return is_active, specs
    finally:
        await cluster.close()
        await metrics_provider.close()


async def _spec(resource: str, scaler_config: ScalerConfig) -> list:
    cluster = KubernetesClusterCollector()
    try:
        scaler = await new_resource_scaler(resource, scaler_config, cluster, PodMetricsCollector())
        return [s.to_k8s() for s in scaler.get_metric_spec_for_scaling()]
    finally:
        await cluster.close()


def evaluate(
    resource: ResourceArg,
    namespace: NamespaceOpt = "default",
    name: NameOpt = "",
    value: ValueOpt = "",
    metric_type: MetricTypeOpt = None,
    legacy_type: LegacyTypeOpt = None,
    activation_value: ActivationOpt = None,
    container: ContainerOpt = None,
    scaled_job: JobOpt = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON.")] = False,
    telemetry: Annotated[bool, typer.Option("--telemetry", help="Export traces and metrics via OTLP.")] = False,
):
    """
    Evaluate once whether the target workload is active.
    """
    if telemetry:
        initialize_telemetry()

    scaler_config = build_scaler_config(
        namespace, name, value, metric_type, legacy_type, activation_value, container, scaled_job
    )
    try:
        is_active, specs = asyncio.run(_evaluate(resource, scaler_config, resource))
    except PodTriggerError as e:
        logger.error(f"Evaluation failed: {e}")
        raise typer.Exit(code=1)
    except asyncio.TimeoutError:
        logger.error(f"Evaluation timed out after {config.EVALUATION_TIMEOUT_SECONDS}s")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps({"active": is_active, "metricSpecs": specs}))
        return

    table = Table(title=f"{resource} trigger for {namespace}/{name}")
    table.add_column("Active", justify="center")
    table.add_column("Target type")
    table.add_column("Target")
    for s in specs:
        source = s.get("resource") or s.get("containerResource")
        target = source["target"]
        table.add_row(
            "[green]yes[/green]" if is_active else "[yellow]no[/yellow]",
            target["type"],
            str(target.get("averageUtilization", target.get("averageValue", ""))),
        )
    console.print(table)


def spec(
    resource: ResourceArg,
    namespace: NamespaceOpt = "default",
    name: NameOpt = "",
    value: ValueOpt = "",
    metric_type: MetricTypeOpt = None,
    legacy_type: LegacyTypeOpt = None,
    activation_value: ActivationOpt = None,
    container: ContainerOpt = None,
    scaled_job: JobOpt = False,
):
    """
    Print the metric spec the autoscaler would register for this trigger.
    """
    scaler_config = build_scaler_config(
        namespace, name, value, metric_type, legacy_type, activation_value, container, scaled_job
    )
    try:
        specs = asyncio.run(_spec(resource, scaler_config))
    except PodTriggerError as e:
        logger.error(f"Could not build metric spec: {e}")
        raise typer.Exit(code=1)

    typer.echo(json.dumps(specs, indent=2))
