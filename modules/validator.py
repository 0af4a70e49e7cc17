"""
Input validation for logmetrics.

Checks the raw variables (as loaded from variable files) against every rule
before any model or specification is built. All violations are collected and
reported together in a single ConfigurationError.
"""

import logging
import re
from numbers import Number
from typing import Any, Dict, List, Mapping, Optional

from modules.config import monitoring_config as mc
from modules.exceptions import ConfigurationError
from modules.utils.string_utils import metric_name

# Configure logging
logger = logging.getLogger(__name__)


def _matches(pattern: str, value: Any) -> bool:
    return isinstance(value, str) and re.match(pattern, value) is not None


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def validate_target(service_name: Optional[str], job_name: Optional[str]) -> List[str]:
    """Exactly one of service_name and job_name must be a non-empty string."""
    if bool(service_name) == bool(job_name):
        return ["Exactly one of service_name or job_name must be set"]
    return []


def validate_alert_condition(key: str, condition: Any) -> List[str]:
    """Validate the alert_condition block of indicator `key`."""
    where = f"indicator '{key}' alert_condition"
    if not isinstance(condition, Mapping):
        return [f"{where} must be an object"]

    errors: List[str] = [
        f"{where}: {name} is required"
        for name in mc.REQUIRED_CONDITION_FIELDS
        if condition.get(name) is None
    ]
    duration = condition.get("duration")
    if duration is not None and not _matches(mc.DURATION_PATTERN, duration):
        errors.append(
            f"{where}: duration '{duration}' must match {mc.DURATION_PATTERN} (e.g. 60s, 5m)"
        )
    threshold = condition.get("threshold")
    if threshold is not None and (not _is_number(threshold) or threshold < 0):
        errors.append(f"{where}: threshold must be a number >= 0, got {threshold!r}")
    policy_name = condition.get("policy_name")
    if policy_name is not None and not _matches(mc.POLICY_NAME_PATTERN, policy_name):
        errors.append(
            f"{where}: policy_name '{policy_name}' may only contain letters, digits, hyphens, underscores and spaces"
        )
    aligner = condition.get("aligner")
    if aligner is not None and not _matches(mc.ALIGNER_PATTERN, aligner):
        errors.append(f"{where}: aligner '{aligner}' must match {mc.ALIGNER_PATTERN}")
    reducer = condition.get("reducer")
    if reducer is not None and not _matches(mc.REDUCER_PATTERN, reducer):
        errors.append(f"{where}: reducer '{reducer}' must match {mc.REDUCER_PATTERN}")
    severity = condition.get("policy_severity")
    if severity is not None and severity not in mc.SEVERITIES:
        errors.append(
            f"{where}: policy_severity '{severity}' must be one of {', '.join(mc.SEVERITIES)}"
        )
    group_by = condition.get("group_by_fields")
    if group_by is not None and not _is_string_list(group_by):
        errors.append(f"{where}: group_by_fields must be a list of strings")
    return errors


def validate_labels(key: str, indicator: Mapping[str, Any]) -> List[str]:
    """Validate labels, label_extractors and their 1:1 correspondence."""
    where = f"indicator '{key}'"
    errors: List[str] = []

    extractors = indicator.get("label_extractors")
    if not isinstance(extractors, Mapping) or not extractors:
        errors.append(f"{where}: label_extractors must be a non-empty map")
        extractors = {}
    for extractor_key in extractors:
        if not _matches(mc.LABEL_KEY_PATTERN, extractor_key):
            errors.append(
                f"{where}: label_extractors key '{extractor_key}' must match {mc.LABEL_KEY_PATTERN}"
            )

    labels = indicator.get("labels")
    if not isinstance(labels, list) or not labels:
        errors.append(f"{where}: labels must be a non-empty list")
        labels = []

    label_keys: List[str] = []
    for position, label in enumerate(labels):
        if not isinstance(label, Mapping):
            errors.append(f"{where}: labels[{position}] must be an object")
            continue
        label_key = label.get("key")
        if not _matches(mc.LABEL_KEY_PATTERN, label_key):
            errors.append(
                f"{where}: labels[{position}] key {label_key!r} must match {mc.LABEL_KEY_PATTERN}"
            )
        value_type = label.get("value_type", mc.DEFAULT_LABEL_VALUE_TYPE)
        if value_type not in mc.LABEL_VALUE_TYPES:
            errors.append(
                f"{where}: labels[{position}] value_type '{value_type}' must be one of {', '.join(mc.LABEL_VALUE_TYPES)}"
            )
        if label_key in label_keys:
            errors.append(f"{where}: duplicate label key '{label_key}'")
        label_keys.append(label_key)

    if len(labels) != len(extractors):
        errors.append(
            f"{where}: labels ({len(labels)}) and label_extractors ({len(extractors)}) must have the same number of entries"
        )
    missing = [k for k in extractors if k not in label_keys]
    unextracted = [k for k in label_keys if isinstance(k, str) and k not in extractors]
    if missing:
        errors.append(
            f"{where}: label_extractors without a matching label: {', '.join(str(k) for k in missing)}"
        )
    if unextracted:
        errors.append(
            f"{where}: labels without a matching label_extractor: {', '.join(str(k) for k in unextracted)}"
        )
    return errors


def validate_indicator(key: str, indicator: Any, resource_value: Optional[str]) -> List[str]:
    """Validate one entry of advanced_log_based_json_indicators."""
    where = f"indicator '{key}'"
    errors: List[str] = []
    if not _matches(mc.INDICATOR_KEY_PATTERN, key):
        errors.append(
            f"{where}: key may only contain letters, digits, hyphens and underscores"
        )
    if not isinstance(indicator, Mapping):
        return errors + [f"{where} must be an object"]

    if resource_value:
        name = metric_name(resource_value, key)
        if not _matches(mc.METRIC_NAME_PATTERN, name):
            errors.append(
                f"{where}: metric name '{name}' must start with a letter and contain only letters, digits, underscores and hyphens"
            )
        if len(name) > mc.METRIC_NAME_MAX_LENGTH:
            errors.append(
                f"{where}: metric name '{name}' is longer than {mc.METRIC_NAME_MAX_LENGTH} characters"
            )

    metric_kind = indicator.get("metric_kind")
    if metric_kind not in mc.METRIC_KINDS:
        errors.append(
            f"{where}: metric_kind {metric_kind!r} must be one of {', '.join(mc.METRIC_KINDS)}"
        )
    value_type = indicator.get("value_type")
    if value_type not in mc.VALUE_TYPES:
        errors.append(
            f"{where}: value_type {value_type!r} must be one of {', '.join(mc.VALUE_TYPES)}"
        )
    description = indicator.get("description")
    if description is not None and (
        not isinstance(description, str) or len(description) > mc.DESCRIPTION_MAX_LENGTH
    ):
        errors.append(
            f"{where}: description must be a string of at most {mc.DESCRIPTION_MAX_LENGTH} characters"
        )
    log_filter = indicator.get("filter")
    if not isinstance(log_filter, str) or not log_filter.strip():
        errors.append(f"{where}: filter is required")

    errors.extend(validate_labels(key, indicator))

    condition = indicator.get("alert_condition")
    if condition is not None:
        errors.extend(validate_alert_condition(key, condition))
    return errors


def validate_combined_policy(key: str, policy: Any) -> List[str]:
    """Validate one entry of combined_alert_policies."""
    where = f"combined policy '{key}'"
    errors: List[str] = []
    if not _matches(mc.POLICY_KEY_PATTERN, key):
        errors.append(
            f"{where}: key may only contain letters, digits, hyphens and underscores"
        )
    if not isinstance(policy, Mapping):
        return errors + [f"{where} must be an object"]

    severity = policy.get("severity")
    if severity is not None and severity not in mc.SEVERITIES:
        errors.append(
            f"{where}: severity '{severity}' must be one of {', '.join(mc.SEVERITIES)}"
        )

    settings = policy.get("condition_settings")
    if settings is not None:
        if not isinstance(settings, Mapping):
            errors.append(f"{where}: condition_settings must be an object")
        else:
            duration = settings.get("duration")
            if duration is not None and not _matches(mc.DURATION_PATTERN, duration):
                errors.append(
                    f"{where}: condition_settings duration '{duration}' must match {mc.DURATION_PATTERN}"
                )
            threshold = settings.get("threshold")
            if threshold is not None and (not _is_number(threshold) or threshold < 0):
                errors.append(
                    f"{where}: condition_settings threshold must be a number >= 0, got {threshold!r}"
                )
            group_by = settings.get("group_by_fields")
            if group_by is not None and not _is_string_list(group_by):
                errors.append(
                    f"{where}: condition_settings group_by_fields must be a list of strings"
                )

    metrics = policy.get("metrics") or []
    if not _is_string_list(metrics):
        errors.append(f"{where}: metrics must be a list of indicator names")
    log_filter = policy.get("filter")
    if log_filter is not None and (not isinstance(log_filter, str) or not log_filter.strip()):
        errors.append(f"{where}: filter must be a non-empty string")
    if not metrics and log_filter is None:
        errors.append(f"{where}: either metrics or filter must be provided")
    return errors


def validate_variables(variables: Dict[str, Any]) -> None:
    """
    Validate the full set of input variables.

    Every rule is checked; violations are accumulated rather than raised on
    first failure so the user sees all problems at once.

    Args:
        variables: Variables with defaults applied (see config_loader.apply_defaults)

    Raises:
        ConfigurationError: If any rule is violated, carrying every message
    """
    errors: List[str] = []
    service_name = variables.get("service_name")
    job_name = variables.get("job_name")
    errors.extend(validate_target(service_name, job_name))
    resource_value = service_name or job_name

    if not isinstance(variables.get("enable_advanced_log_based_json_indicators"), bool):
        errors.append("enable_advanced_log_based_json_indicators must be true or false")

    indicators = variables.get("advanced_log_based_json_indicators")
    if not isinstance(indicators, Mapping):
        errors.append("advanced_log_based_json_indicators must be a map")
        indicators = {}
    for key, indicator in indicators.items():
        errors.extend(validate_indicator(key, indicator, resource_value))

    policies = variables.get("combined_alert_policies")
    if not isinstance(policies, Mapping):
        errors.append("combined_alert_policies must be a map")
        policies = {}
    for key, policy in policies.items():
        errors.extend(validate_combined_policy(key, policy))
        if isinstance(policy, Mapping) and _is_string_list(policy.get("metrics") or []):
            for name in policy.get("metrics") or []:
                if name not in indicators:
                    logger.warning(
                        f"Combined policy '{key}' references metric '{name}' which is not a defined indicator"
                    )

    if not _is_string_list(variables.get("default_alert_group_by_fields")):
        errors.append("default_alert_group_by_fields must be a list of strings")
    if not _is_string_list(variables.get("notification_channels")):
        errors.append("notification_channels must be a list of strings")

    if errors:
        logger.debug(f"Validation failed with {len(errors)} violation(s)")
        raise ConfigurationError(errors)
    logger.info(
        f"Validated {len(indicators)} indicator(s) and {len(policies)} combined policy(ies)"
    )
