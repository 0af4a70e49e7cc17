"""
Provisioning hand-off for logmetrics.

Hands fully resolved specifications to a provisioning collaborator and
reports the created resource names. The collaborator is the system of record:
errors it raises (google.api_core exceptions for GcpCollaborator) propagate
unchanged, with no retry and no rollback. Specification values the
Cloud Monitoring API has no enum member for raise ProvisioningError before
any request is sent for that resource.
"""

from typing import Dict, List, Protocol, Tuple
import logging

from google.api import label_pb2, metric_pb2
from google.cloud import monitoring_v3
from google.cloud.logging_v2.services.metrics_service_v2 import MetricsServiceV2Client
from google.cloud.logging_v2.types import LogMetric
from google.protobuf import duration_pb2
from tqdm import tqdm

from modules.config import monitoring_config as mc
from modules.exceptions import ProvisioningError
from modules.models import (
    AlertPolicySpecification,
    ConditionSpecification,
    ExpansionResult,
    MetricSpecification,
    ProvisioningOutputs,
)
from modules.utils.string_utils import duration_to_seconds

# Configure logging
logger = logging.getLogger(__name__)


class MonitoringCollaborator(Protocol):
    """Creates resources from specifications and returns their names."""

    def create_metric(self, spec: MetricSpecification) -> str:
        ...

    def create_alert_policy(self, spec: AlertPolicySpecification) -> str:
        ...


def _member(enum, name: str, field: str):
    try:
        return enum[name]
    except KeyError:
        raise ProvisioningError(
            f"Unsupported {field} '{name}'", context={"supported": ", ".join(enum.__members__)}
        ) from None


def _severity(name: str) -> monitoring_v3.AlertPolicy.Severity:
    if name not in mc.PROVIDER_SEVERITIES:
        return monitoring_v3.AlertPolicy.Severity.SEVERITY_UNSPECIFIED
    return monitoring_v3.AlertPolicy.Severity[name]


def _duration(value: str) -> duration_pb2.Duration:
    return duration_pb2.Duration(seconds=duration_to_seconds(value))


class GcpCollaborator:
    """
    Collaborator backed by the Cloud Logging and Cloud Monitoring APIs.

    Args:
        project_id: Project that owns the metrics and alert policies
        metrics_client: Optional MetricsServiceV2Client (created when omitted)
        alert_client: Optional AlertPolicyServiceClient (created when omitted)
    """

    def __init__(self, project_id: str, metrics_client=None, alert_client=None):
        self.project_id = project_id
        self.parent = f"projects/{project_id}"
        self.metrics_client = metrics_client or MetricsServiceV2Client()
        self.alert_client = alert_client or monitoring_v3.AlertPolicyServiceClient()

    def build_log_metric(self, spec: MetricSpecification) -> LogMetric:
        descriptor = metric_pb2.MetricDescriptor(
            metric_kind=metric_pb2.MetricDescriptor.MetricKind.Value(spec.metric_kind),
            value_type=metric_pb2.MetricDescriptor.ValueType.Value(spec.value_type),
            labels=[
                label_pb2.LabelDescriptor(
                    key=label.key,
                    value_type=label_pb2.LabelDescriptor.ValueType.Value(label.value_type),
                    description=label.description or "",
                )
                for label in spec.labels
            ],
        )
        return LogMetric(
            name=spec.name,
            description=spec.description,
            filter=spec.filter,
            metric_descriptor=descriptor,
            label_extractors=dict(spec.label_extractors),
        )

    def _build_condition(
        self, condition: ConditionSpecification
    ) -> monitoring_v3.AlertPolicy.Condition:
        return monitoring_v3.AlertPolicy.Condition(
            display_name=condition.display_name,
            condition_threshold=monitoring_v3.AlertPolicy.Condition.MetricThreshold(
                filter=condition.filter,
                comparison=monitoring_v3.ComparisonType[condition.comparison],
                threshold_value=float(condition.threshold),
                duration=_duration(condition.duration),
                trigger=monitoring_v3.AlertPolicy.Condition.Trigger(
                    count=condition.trigger_count
                ),
                aggregations=[
                    monitoring_v3.Aggregation(
                        alignment_period=_duration(condition.alignment_period),
                        per_series_aligner=_member(
                            monitoring_v3.Aggregation.Aligner, condition.aligner, "aligner"
                        ),
                        cross_series_reducer=_member(
                            monitoring_v3.Aggregation.Reducer, condition.reducer, "reducer"
                        ),
                        group_by_fields=list(condition.group_by_fields),
                    )
                ],
            ),
        )

    def build_alert_policy(self, spec: AlertPolicySpecification) -> monitoring_v3.AlertPolicy:
        policy = monitoring_v3.AlertPolicy(
            display_name=spec.display_name,
            severity=_severity(spec.severity),
            combiner=monitoring_v3.AlertPolicy.ConditionCombinerType[spec.combiner],
            conditions=[self._build_condition(c) for c in spec.conditions],
            notification_channels=list(spec.notification_channels),
            alert_strategy=monitoring_v3.AlertPolicy.AlertStrategy(
                auto_close=_duration(spec.auto_close),
                notification_channel_strategy=[
                    monitoring_v3.AlertPolicy.AlertStrategy.NotificationChannelStrategy(
                        notification_channel_names=list(spec.notification_channels),
                        renotify_interval=_duration(spec.renotify_interval),
                    )
                ],
            ),
        )
        if spec.documentation is not None:
            policy.documentation = monitoring_v3.AlertPolicy.Documentation(
                content=spec.documentation.content,
                mime_type=spec.documentation.mime_type,
            )
        return policy

    def create_metric(self, spec: MetricSpecification) -> str:
        created = self.metrics_client.create_log_metric(
            parent=self.parent, metric=self.build_log_metric(spec)
        )
        return created.name

    def create_alert_policy(self, spec: AlertPolicySpecification) -> str:
        created = self.alert_client.create_alert_policy(
            name=self.parent, alert_policy=self.build_alert_policy(spec)
        )
        return created.name


def apply_specifications(
    result: ExpansionResult,
    collaborator: MonitoringCollaborator,
    progress: bool = False,
) -> ProvisioningOutputs:
    """
    Create every specified resource through the collaborator.

    Metrics are created first so alert policies can reference them, then
    individual alert policies, then combined alert policies, each in input order.

    Args:
        result: Expanded specifications
        collaborator: Provisioning collaborator
        progress: Show a tqdm progress bar

    Returns:
        ProvisioningOutputs with created names keyed by user key
    """
    work: List[Tuple[str, str, object]] = []
    work.extend(("metrics", key, spec) for key, spec in result.metrics.items())
    work.extend(
        ("alert_policies", key, spec) for key, spec in result.alert_policies.items()
    )
    work.extend(
        ("combined_alert_policies", key, spec)
        for key, spec in result.combined_alert_policies.items()
    )

    created: Dict[str, Dict[str, str]] = {
        "metrics": {},
        "alert_policies": {},
        "combined_alert_policies": {},
    }
    for category, key, spec in tqdm(
        work, desc="Provisioning", unit="resource", disable=not progress
    ):
        if category == "metrics":
            name = collaborator.create_metric(spec)
        else:
            name = collaborator.create_alert_policy(spec)
        logger.debug(f"Created {category} '{key}': {name}")
        created[category][key] = name

    logger.info(f"Provisioned {len(work)} resource(s)")
    return ProvisioningOutputs(
        metrics=created["metrics"],
        alert_policies=created["alert_policies"],
        combined_alert_policies=created["combined_alert_policies"],
    )

