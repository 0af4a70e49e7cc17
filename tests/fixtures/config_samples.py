"""Fixture factories for generating configuration test samples.

Variables mirror what modules.config_loader reads from variable files:

    {
        "service_name": str | None,
        "job_name": str | None,
        "enable_advanced_log_based_json_indicators": bool,
        "advanced_log_based_json_indicators": dict[str, dict],
        "combined_alert_policies": dict[str, dict],
        ...
    }
"""

import copy
import sys
from pathlib import Path
from typing import Any, Dict, Optional

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from modules.config_loader import apply_defaults

VARFILE_DIR = Path(__file__).parent / "varfiles"


def errors_indicator(with_alert: bool = True) -> Dict[str, Any]:
    """Create the 'errors' indicator: DELTA/INT64 with one error_type label.

    Args:
        with_alert: Include an alert_condition block

    Returns:
        dict: Indicator variable value
    """
    indicator = {
        "filter": 'resource.type="cloud_run_revision" AND severity>=ERROR',
        "metric_kind": "DELTA",
        "value_type": "INT64",
        "label_extractors": {"error_type": "EXTRACT(jsonPayload.error_type)"},
        "labels": [
            {"key": "error_type", "value_type": "STRING", "description": "Error type"}
        ],
    }
    if with_alert:
        indicator["alert_condition"] = {
            "duration": "60s",
            "threshold": 1,
            "aligner": "ALIGN_RATE",
            "reducer": "REDUCE_SUM",
        }
    return indicator


def service_variables(
    service_name: str = "svc",
    feature_enabled: bool = True,
    indicators: Optional[Dict[str, Any]] = None,
    policies: Optional[Dict[str, Any]] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    """Create a complete, valid variable set for a Cloud Run service.

    Returns:
        dict: Variables with defaults applied
    """
    variables = {
        "service_name": service_name,
        "enable_advanced_log_based_json_indicators": feature_enabled,
        "advanced_log_based_json_indicators": (
            {"errors": errors_indicator()} if indicators is None else indicators
        ),
        "combined_alert_policies": {} if policies is None else policies,
    }
    variables.update(overrides)
    return apply_defaults(copy.deepcopy(variables))


def job_variables(job_name: str = "nightly", **kwargs: Any) -> Dict[str, Any]:
    """Create a complete, valid variable set for a Cloud Run job."""
    variables = service_variables(**kwargs)
    variables["service_name"] = None
    variables["job_name"] = job_name
    return variables
