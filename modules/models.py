"""
Typed configuration and specification models for logmetrics.

Input models (Indicator, CombinedPolicy, ...) are built from validated variables
by modules.config_loader. Output specifications are produced by
modules.expander, are frozen, and expose to_dict() for serialization.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


# ============================================================================
# Resource target
# ============================================================================


@dataclass(frozen=True)
class ServiceTarget:
    """A Cloud Run service."""

    name: str


@dataclass(frozen=True)
class JobTarget:
    """A Cloud Run job."""

    name: str


ResourceTarget = Union[ServiceTarget, JobTarget]


@dataclass(frozen=True)
class ResourceIdentity:
    """
    Identity values derived from a ResourceTarget.

    Args:
        resource_type: Monitored resource type (cloud_run_revision | cloud_run_job)
        resource_label_key: Resource label holding the name (service_name | job_name)
        resource_value: The service or job name
    """

    resource_type: str
    resource_label_key: str
    resource_value: str


# ============================================================================
# Input models
# ============================================================================


@dataclass
class Label:
    key: str
    value_type: str = "STRING"
    description: Optional[str] = None


@dataclass
class AlertCondition:
    """Alert condition embedded in an indicator. duration, threshold, aligner and reducer are required."""

    duration: Optional[str] = None
    threshold: Optional[float] = None
    aligner: Optional[str] = None
    reducer: Optional[str] = None
    filter: Optional[str] = None
    group_by_fields: Optional[List[str]] = None
    policy_name: Optional[str] = None
    policy_severity: str = "ERROR"
    runbook_url: Optional[str] = None


@dataclass
class Indicator:
    filter: str
    metric_kind: str
    value_type: str
    label_extractors: Dict[str, str] = field(default_factory=dict)
    labels: List[Label] = field(default_factory=list)
    description: Optional[str] = None
    alert_condition: Optional[AlertCondition] = None


@dataclass
class ConditionSettings:
    duration: Optional[str] = None
    threshold: Optional[float] = None
    aligner: Optional[str] = None
    reducer: Optional[str] = None
    group_by_fields: Optional[List[str]] = None


@dataclass
class CombinedPolicy:
    display_name: str
    severity: str = "ERROR"
    metrics: List[str] = field(default_factory=list)
    filter: Optional[str] = None
    condition_settings: Optional[ConditionSettings] = None
    runbook_url: Optional[str] = None


@dataclass
class MonitoringConfig:
    """Fully typed configuration for one expansion run."""

    target: ResourceTarget
    indicators: Dict[str, Indicator] = field(default_factory=dict)
    combined_policies: Dict[str, CombinedPolicy] = field(default_factory=dict)
    feature_enabled: bool = False
    default_group_by: List[str] = field(default_factory=list)
    default_runbook_url: Optional[str] = None
    notification_channels: List[str] = field(default_factory=list)
    project_id: Optional[str] = None


# ============================================================================
# Output specifications
# ============================================================================


@dataclass(frozen=True)
class LabelSpecification:
    key: str
    value_type: str
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "value_type": self.value_type,
            "description": self.description,
        }


@dataclass(frozen=True)
class MetricSpecification:
    name: str
    description: str
    filter: str
    metric_kind: str
    value_type: str
    labels: Tuple[LabelSpecification, ...]
    label_extractors: Tuple[Tuple[str, str], ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "filter": self.filter,
            "metric_kind": self.metric_kind,
            "value_type": self.value_type,
            "labels": [label.to_dict() for label in self.labels],
            "label_extractors": dict(self.label_extractors),
        }


@dataclass(frozen=True)
class ConditionSpecification:
    display_name: str
    filter: str
    duration: str
    threshold: float
    aligner: str
    reducer: str
    group_by_fields: Tuple[str, ...]
    comparison: str = "COMPARISON_GT"
    alignment_period: str = "60s"
    trigger_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "filter": self.filter,
            "duration": self.duration,
            "threshold": self.threshold,
            "comparison": self.comparison,
            "alignment_period": self.alignment_period,
            "aligner": self.aligner,
            "reducer": self.reducer,
            "group_by_fields": list(self.group_by_fields),
            "trigger_count": self.trigger_count,
        }


@dataclass(frozen=True)
class DocumentationSpecification:
    content: str
    mime_type: str = "text/markdown"

    def to_dict(self) -> Dict[str, Any]:
        return {"content": self.content, "mime_type": self.mime_type}


@dataclass(frozen=True)
class AlertPolicySpecification:
    display_name: str
    severity: str
    conditions: Tuple[ConditionSpecification, ...]
    notification_channels: Tuple[str, ...] = ()
    documentation: Optional[DocumentationSpecification] = None
    depends_on_metrics: Tuple[str, ...] = ()
    combiner: str = "OR"
    auto_close: str = "86400s"
    renotify_interval: str = "86400s"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "severity": self.severity,
            "combiner": self.combiner,
            "conditions": [c.to_dict() for c in self.conditions],
            "auto_close": self.auto_close,
            "renotify_interval": self.renotify_interval,
            "notification_channels": list(self.notification_channels),
            "documentation": (
                self.documentation.to_dict() if self.documentation else None
            ),
            "depends_on_metrics": list(self.depends_on_metrics),
        }


@dataclass(frozen=True)
class ExpansionResult:
    """Three ordered collections of specifications keyed by user-supplied keys."""

    metrics: Dict[str, MetricSpecification]
    alert_policies: Dict[str, AlertPolicySpecification]
    combined_alert_policies: Dict[str, AlertPolicySpecification]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metrics": {k: v.to_dict() for k, v in self.metrics.items()},
            "alert_policies": {
                k: v.to_dict() for k, v in self.alert_policies.items()
            },
            "combined_alert_policies": {
                k: v.to_dict() for k, v in self.combined_alert_policies.items()
            },
        }


@dataclass(frozen=True)
class ProvisioningOutputs:
    """Created resource names keyed by user-supplied keys, one mapping per category."""

    metrics: Dict[str, str]
    alert_policies: Dict[str, str]
    combined_alert_policies: Dict[str, str]

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {
            "log_based_metric_names": dict(self.metrics),
            "alert_policy_names": dict(self.alert_policies),
            "combined_alert_policy_names": dict(self.combined_alert_policies),
        }
