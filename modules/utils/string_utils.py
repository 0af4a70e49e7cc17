"""String utilities for logmetrics.

This module provides the filter-string and naming helpers shared by the
expander, the Terraform JSON renderer and the GCP collaborator.
"""

import re

from modules.config import monitoring_config


def rewrite_resource_type(log_filter: str, resource_type: str) -> str:
    """Replace every literal resource.type="cloud_run_revision" with resource_type.

    No other part of the filter is touched.

    Args:
        log_filter: User supplied log or monitoring filter
        resource_type: Resolved monitored resource type

    Returns:
        Filter with the placeholder clause rewritten
    """
    return log_filter.replace(
        monitoring_config.RESOURCE_TYPE_PLACEHOLDER, f'resource.type="{resource_type}"'
    )


def metric_name(resource_value: str, key: str) -> str:
    """Name of the log-based metric for an indicator, e.g. 'svc-errors'."""
    return f"{resource_value}-{key}"


def metric_type(name: str) -> str:
    """Fully qualified metric type of a user-defined log-based metric."""
    return f"{monitoring_config.USER_METRIC_PREFIX}{name}"


def metric_filter(
    name: str, resource_type: str, resource_label_key: str, resource_value: str
) -> str:
    """Build the monitoring filter selecting a log-based metric on one resource.

    Examples:
        >>> metric_filter("svc-errors", "cloud_run_revision", "service_name", "svc")
        'metric.type="logging.googleapis.com/user/svc-errors" AND resource.type="cloud_run_revision" AND resource.label.service_name="svc"'
    """
    return (
        f'metric.type="{metric_type(name)}"'
        f' AND resource.type="{resource_type}"'
        f' AND resource.label.{resource_label_key}="{resource_value}"'
    )


def duration_to_seconds(duration: str) -> int:
    """Convert a duration such as '60s', '5m', '1h' or '1d' to seconds.

    Raises:
        ValueError: If the duration does not match ^[0-9]+[smhd]$
    """
    if not re.match(monitoring_config.DURATION_PATTERN, duration or ""):
        raise ValueError(f"Invalid duration: {duration!r}")
    return int(duration[:-1]) * monitoring_config.DURATION_UNIT_SECONDS[duration[-1]]


def seconds_string(duration: str) -> str:
    """Normalize a duration to the '<n>s' form the monitoring API expects."""
    return f"{duration_to_seconds(duration)}s"


def terraform_identifier(key: str) -> str:
    """Turn a user key into a valid Terraform resource name.

    Terraform names must start with a letter or underscore and contain only
    letters, digits, underscores and hyphens.
    """
    name = re.sub(r"[^a-zA-Z0-9_-]", "_", key)
    if not re.match(r"^[a-zA-Z_]", name):
        name = "_" + name
    return name
