"""Terraform JSON rendering for logmetrics.

Renders an ExpansionResult as a Terraform JSON configuration (*.tf.json) made of
google_logging_metric and google_monitoring_alert_policy resources, plus
outputs mapping each user key to the created resource name.
"""

import json
import logging
from typing import Any, Dict, Optional

import click

from modules.config import monitoring_config as mc
from modules.exceptions import ExportError
from modules.models import (
    AlertPolicySpecification,
    ConditionSpecification,
    ExpansionResult,
    MetricSpecification,
)
from modules.utils.string_utils import seconds_string, terraform_identifier

# Configure logging
logger = logging.getLogger(__name__)

METRIC_RESOURCE = "google_logging_metric"
POLICY_RESOURCE = "google_monitoring_alert_policy"


def _metric_block(spec: MetricSpecification, project_id: Optional[str]) -> Dict[str, Any]:
    block: Dict[str, Any] = {
        "name": spec.name,
        "description": spec.description,
        "filter": spec.filter,
        "metric_descriptor": {
            "metric_kind": spec.metric_kind,
            "value_type": spec.value_type,
            "labels": [
                {
                    "key": label.key,
                    "value_type": label.value_type,
                    "description": label.description,
                }
                for label in spec.labels
            ],
        },
        "label_extractors": dict(spec.label_extractors),
    }
    if project_id:
        block["project"] = project_id
    return block


def _condition_block(condition: ConditionSpecification) -> Dict[str, Any]:
    return {
        "display_name": condition.display_name,
        "condition_threshold": {
            "filter": condition.filter,
            "duration": seconds_string(condition.duration),
            "comparison": condition.comparison,
            "threshold_value": condition.threshold,
            "trigger": {"count": condition.trigger_count},
            "aggregations": [
                {
                    "alignment_period": condition.alignment_period,
                    "per_series_aligner": condition.aligner,
                    "cross_series_reducer": condition.reducer,
                    "group_by_fields": list(condition.group_by_fields),
                }
            ],
        },
    }


def _policy_block(
    spec: AlertPolicySpecification,
    metric_addresses: Dict[str, str],
    project_id: Optional[str],
) -> Dict[str, Any]:
    block: Dict[str, Any] = {
        "display_name": spec.display_name,
        "combiner": spec.combiner,
        "conditions": [_condition_block(c) for c in spec.conditions],
        "alert_strategy": {
            "auto_close": spec.auto_close,
            "notification_channel_strategy": [
                {"renotify_interval": spec.renotify_interval}
            ],
        },
        "notification_channels": list(spec.notification_channels),
    }
    if spec.severity in mc.PROVIDER_SEVERITIES:
        block["severity"] = spec.severity
    if spec.documentation is not None:
        block["documentation"] = {
            "content": spec.documentation.content,
            "mime_type": spec.documentation.mime_type,
        }
    depends_on = [
        metric_addresses[name]
        for name in spec.depends_on_metrics
        if name in metric_addresses
    ]
    if depends_on:
        block["depends_on"] = depends_on
    if project_id:
        block["project"] = project_id
    return block


def _address(key: str, taken: Dict[str, str]) -> str:
    """Terraform identifier for key, refusing one already used by another key."""
    address = terraform_identifier(key)
    if address in taken and taken[address] != key:
        raise ExportError(
            "Keys map to the same Terraform resource name",
            context={"address": address, "keys": f"{taken[address]}, {key}"},
        )
    taken[address] = key
    return address


def render_terraform_json(
    result: ExpansionResult, project_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build a Terraform JSON document for the specifications.

    Args:
        result: Expanded specifications
        project_id: Optional project set on every resource

    Returns:
        dict: Terraform JSON configuration

    Raises:
        ExportError: If two keys map to the same Terraform resource name
    """
    metrics: Dict[str, Any] = {}
    metric_addresses: Dict[str, str] = {}
    metric_outputs: Dict[str, str] = {}
    taken: Dict[str, str] = {}
    for key, spec in result.metrics.items():
        address = _address(key, taken)
        metric_outputs[key] = f"${{{METRIC_RESOURCE}.{address}.name}}"
        metrics[address] = _metric_block(spec, project_id)
        metric_addresses[spec.name] = f"{METRIC_RESOURCE}.{address}"

    policies: Dict[str, Any] = {}
    taken = {}
    policy_outputs: Dict[str, str] = {}
    combined_outputs: Dict[str, str] = {}
    for key, spec in result.alert_policies.items():
        address = _address(f"indicator_{key}", taken)
        policies[address] = _policy_block(spec, metric_addresses, project_id)
        policy_outputs[key] = f"${{{POLICY_RESOURCE}.{address}.name}}"
    for key, spec in result.combined_alert_policies.items():
        address = _address(f"combined_{key}", taken)
        policies[address] = _policy_block(spec, metric_addresses, project_id)
        combined_outputs[key] = f"${{{POLICY_RESOURCE}.{address}.name}}"

    resources: Dict[str, Any] = {}
    if metrics:
        resources[METRIC_RESOURCE] = metrics
    if policies:
        resources[POLICY_RESOURCE] = policies

    document: Dict[str, Any] = {
        "output": {
            "log_based_metric_names": {"value": metric_outputs},
            "alert_policy_names": {"value": policy_outputs},
            "combined_alert_policy_names": {"value": combined_outputs},
        }
    }
    if resources:
        document["resource"] = resources
    return document


def export_terraform_json(
    result: ExpansionResult, outfile: str, project_id: Optional[str] = None
) -> str:
    """
    Write the Terraform JSON document to outfile.

    Args:
        result: Expanded specifications
        outfile: Target path; '.tf.json' is appended when missing
        project_id: Optional project set on every resource

    Returns:
        str: Path written

    Raises:
        ExportError: If the file cannot be written
    """
    if not outfile.endswith(".tf.json"):
        outfile += ".tf.json"
    document = render_terraform_json(result, project_id)
    try:
        with open(outfile, "w") as f:
            json.dump(document, f, indent=2, sort_keys=True)
    except OSError as e:
        raise ExportError(
            "Cannot write Terraform JSON", context={"outfile": outfile, "error": str(e)}
        ) from e
    click.echo(f"\nExporting Terraform configuration into file {outfile}")
    logger.info(f"Wrote {outfile}")
    return outfile
