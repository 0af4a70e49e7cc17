"""Specification expansion for logmetrics.

This module turns validated indicators and combined policies into fully resolved
metric and alert-policy specifications. Expansion is a pure function of its
inputs: equal inputs always yield equal specifications, in input order.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from modules.config import monitoring_config as mc
from modules.models import (
    AlertCondition,
    AlertPolicySpecification,
    CombinedPolicy,
    ConditionSettings,
    ConditionSpecification,
    DocumentationSpecification,
    ExpansionResult,
    Indicator,
    LabelSpecification,
    MetricSpecification,
    MonitoringConfig,
    ResourceIdentity,
)
from modules.resolver import resolve
from modules.utils.settings_utils import first_set, merge_layers
from modules.utils.string_utils import metric_filter, metric_name, rewrite_resource_type

# Configure logging
logger = logging.getLogger(__name__)


def build_documentation(
    specific_url: Optional[str], default_url: Optional[str]
) -> Optional[DocumentationSpecification]:
    """Attach a runbook link: entry-specific URL, else the global default, else nothing."""
    url = first_set(specific_url, default_url)
    if url is None:
        return None
    return DocumentationSpecification(
        content=f"Runbook: {url}", mime_type=mc.DOCUMENTATION_MIME_TYPE
    )


def resolve_condition_settings(
    overrides: Optional[Mapping[str, object]], default_group_by: Sequence[str]
) -> Dict[str, object]:
    """Merge hard-coded defaults, the default group-by and entry overrides, field by field."""
    return merge_layers(
        mc.DEFAULT_CONDITION_SETTINGS,
        {"group_by_fields": list(default_group_by)},
        overrides,
    )


def build_condition(
    display_name: str, condition_filter: str, settings: Mapping[str, object]
) -> ConditionSpecification:
    return ConditionSpecification(
        display_name=display_name,
        filter=condition_filter,
        duration=settings["duration"],
        threshold=settings["threshold"],
        aligner=settings["aligner"],
        reducer=settings["reducer"],
        group_by_fields=tuple(settings["group_by_fields"]),
        comparison=mc.COMPARISON,
        alignment_period=mc.ALIGNMENT_PERIOD,
        trigger_count=mc.TRIGGER_COUNT,
    )


def _policy(
    display_name: str,
    severity: str,
    conditions: List[ConditionSpecification],
    documentation: Optional[DocumentationSpecification],
    notification_channels: Sequence[str],
    depends_on_metrics: Sequence[str],
) -> AlertPolicySpecification:
    return AlertPolicySpecification(
        display_name=display_name,
        severity=severity,
        conditions=tuple(conditions),
        notification_channels=tuple(notification_channels),
        documentation=documentation,
        depends_on_metrics=tuple(depends_on_metrics),
        combiner=mc.COMBINER,
        auto_close=mc.AUTO_CLOSE,
        renotify_interval=mc.RENOTIFY_INTERVAL,
    )


def build_metric(
    identity: ResourceIdentity, key: str, indicator: Indicator
) -> MetricSpecification:
    """Build the log-based metric specification for one indicator."""
    return MetricSpecification(
        name=metric_name(identity.resource_value, key),
        description=indicator.description or f"Custom metric for {key}",
        filter=rewrite_resource_type(indicator.filter, identity.resource_type),
        metric_kind=indicator.metric_kind,
        value_type=indicator.value_type,
        labels=tuple(
            LabelSpecification(
                key=label.key,
                value_type=label.value_type,
                description=label.description,
            )
            for label in indicator.labels
        ),
        label_extractors=tuple(indicator.label_extractors.items()),
    )


def build_indicator_policy(
    identity: ResourceIdentity,
    key: str,
    condition: AlertCondition,
    default_group_by: Sequence[str],
    default_runbook_url: Optional[str] = None,
    notification_channels: Sequence[str] = (),
) -> AlertPolicySpecification:
    """Build the alert policy watching the metric of one indicator."""
    name = metric_name(identity.resource_value, key)
    if condition.filter:
        condition_filter = rewrite_resource_type(condition.filter, identity.resource_type)
    else:
        condition_filter = metric_filter(
            name,
            identity.resource_type,
            identity.resource_label_key,
            identity.resource_value,
        )
    settings = resolve_condition_settings(
        {
            "duration": condition.duration,
            "threshold": condition.threshold,
            "aligner": condition.aligner,
            "reducer": condition.reducer,
            "group_by_fields": condition.group_by_fields,
        },
        default_group_by,
    )
    return _policy(
        display_name=condition.policy_name or f"Metric-{name}",
        severity=condition.policy_severity or mc.DEFAULT_SEVERITY,
        conditions=[build_condition(f"{key} monitoring", condition_filter, settings)],
        documentation=build_documentation(condition.runbook_url, default_runbook_url),
        notification_channels=notification_channels,
        depends_on_metrics=[name],
    )


def _settings_overrides(settings: Optional[ConditionSettings]) -> Optional[Dict[str, object]]:
    if settings is None:
        return None
    return {
        "duration": settings.duration,
        "threshold": settings.threshold,
        "aligner": settings.aligner,
        "reducer": settings.reducer,
        "group_by_fields": settings.group_by_fields,
    }


def build_combined_policy(
    identity: ResourceIdentity,
    policy: CombinedPolicy,
    default_group_by: Sequence[str],
    default_runbook_url: Optional[str] = None,
    notification_channels: Sequence[str] = (),
) -> AlertPolicySpecification:
    """
    Build a combined alert policy.

    A custom filter yields exactly one condition and takes precedence over
    metrics. Otherwise one condition per listed metric is generated, in list
    order. With neither, the policy has no conditions.
    """
    settings = resolve_condition_settings(
        _settings_overrides(policy.condition_settings), default_group_by
    )
    conditions: List[ConditionSpecification] = []
    depends_on: List[str] = []
    if policy.filter is not None:
        conditions.append(
            build_condition(
                f"{policy.display_name} condition",
                rewrite_resource_type(policy.filter, identity.resource_type),
                settings,
            )
        )
    else:
        for metric in policy.metrics:
            name = metric_name(identity.resource_value, metric)
            depends_on.append(name)
            conditions.append(
                build_condition(
                    f"{metric} monitoring",
                    metric_filter(
                        name,
                        identity.resource_type,
                        identity.resource_label_key,
                        identity.resource_value,
                    ),
                    settings,
                )
            )
    return _policy(
        display_name=policy.display_name,
        severity=policy.severity or mc.DEFAULT_SEVERITY,
        conditions=conditions,
        documentation=build_documentation(policy.runbook_url, default_runbook_url),
        notification_channels=notification_channels,
        depends_on_metrics=depends_on,
    )


def expand(
    identity: ResourceIdentity,
    indicators: Mapping[str, Indicator],
    combined_policies: Mapping[str, CombinedPolicy],
    feature_enabled: bool,
    default_group_by: Sequence[str] = tuple(mc.DEFAULT_GROUP_BY_FIELDS),
    default_runbook_url: Optional[str] = None,
    notification_channels: Sequence[str] = (),
) -> ExpansionResult:
    """Expand indicators and combined policies into specifications.

    Metrics are always produced. Alert policies, individual and combined, are
    only produced when feature_enabled is true.

    Args:
        identity: Resolved resource identity
        indicators: Indicator definitions keyed by user key
        combined_policies: Combined policy definitions keyed by user key
        feature_enabled: enable_advanced_log_based_json_indicators
        default_group_by: Group-by fields used when none are configured
        default_runbook_url: Runbook linked when an entry names none
        notification_channels: Channels attached to every alert policy

    Returns:
        ExpansionResult with metrics, alert_policies and combined_alert_policies
    """
    metrics: Dict[str, MetricSpecification] = {}
    alert_policies: Dict[str, AlertPolicySpecification] = {}
    combined: Dict[str, AlertPolicySpecification] = {}

    for key, indicator in indicators.items():
        metrics[key] = build_metric(identity, key, indicator)
        if feature_enabled and indicator.alert_condition is not None:
            alert_policies[key] = build_indicator_policy(
                identity,
                key,
                indicator.alert_condition,
                default_group_by,
                default_runbook_url,
                notification_channels,
            )
            logger.debug(f"Indicator '{key}' expanded with alert policy")

    if feature_enabled:
        for key, policy in combined_policies.items():
            combined[key] = build_combined_policy(
                identity,
                policy,
                default_group_by,
                default_runbook_url,
                notification_channels,
            )
            if not combined[key].conditions:
                logger.warning(f"Combined policy '{key}' has no conditions")
    elif combined_policies or any(i.alert_condition for i in indicators.values()):
        logger.info(
            "Alert policies skipped: enable_advanced_log_based_json_indicators is false"
        )

    logger.info(
        f"Expanded {len(metrics)} metric(s), {len(alert_policies)} alert policy(ies), "
        f"{len(combined)} combined alert policy(ies)"
    )
    return ExpansionResult(
        metrics=metrics, alert_policies=alert_policies, combined_alert_policies=combined
    )


def expand_config(config: MonitoringConfig) -> Tuple[ResourceIdentity, ExpansionResult]:
    """Resolve the target of a loaded configuration and expand it."""
    identity = resolve(config.target)
    result = expand(
        identity,
        config.indicators,
        config.combined_policies,
        config.feature_enabled,
        config.default_group_by,
        config.default_runbook_url,
        config.notification_channels,
    )
    return identity, result
