"""
Configuration Loader Module for logmetrics

This module loads input variables from Terraform variable files (.tfvars,
.tfvars.json) or YAML files, applies TF_VAR_ environment overrides and
defaults, and builds the typed MonitoringConfig used by the expander.

"""

from typing import Any, Dict, Iterable, List, Mapping, Optional
import copy
import json
import logging
from pathlib import Path

import yaml

from modules.config import monitoring_config
from modules.exceptions import VariableFileError
from modules.models import (
    AlertCondition,
    CombinedPolicy,
    ConditionSettings,
    Indicator,
    Label,
    MonitoringConfig,
)
from modules.resolver import target_from_variables
from modules.utils.terraform_utils import getvar, tfvar_read
from modules.validator import validate_variables

# Configure logging
logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


def read_variable_file(filepath: str) -> Dict[str, Any]:
    """
    Parse one variable file according to its extension.

    Args:
        filepath: Path to a .tfvars, .tfvars.json/.json or .yaml/.yml file

    Returns:
        dict: Variables defined in the file

    Raises:
        VariableFileError: If the file is missing, unparsable, or not a mapping
    """
    path = Path(filepath)
    if not path.exists():
        raise VariableFileError(
            "Variable file not found", context={"filepath": filepath}
        )

    suffix = path.suffix.lower()
    try:
        if suffix in YAML_SUFFIXES:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        elif suffix in JSON_SUFFIXES:
            with open(path, "r") as f:
                data = json.load(f)
        else:
            data = tfvar_read(str(path))
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise VariableFileError(
            "Failed to parse variable file",
            context={"error": str(e), "filepath": filepath},
        ) from e

    if not isinstance(data, dict):
        raise VariableFileError(
            "Variable file must define a map of variables",
            context={"filepath": filepath},
        )
    logger.debug(f"Read {len(data)} variable(s) from {filepath}")
    return data


def load_variables(varfiles: Iterable[str]) -> Dict[str, Any]:
    """
    Load and merge variable files, later files overriding earlier ones.

    Unknown variables are ignored with a warning, as terraform does for
    undeclared values in .tfvars files.

    Args:
        varfiles: Variable file paths in precedence order (lowest first)

    Returns:
        dict: Merged variables (no defaults applied, no env overrides)
    """
    variables: Dict[str, Any] = {}
    for varfile in varfiles:
        for name, value in read_variable_file(varfile).items():
            if name not in monitoring_config.VARIABLE_DEFAULTS:
                logger.warning(f"Ignoring unknown variable '{name}' in {varfile}")
                continue
            variables[name] = value
    return variables


def apply_defaults(variables: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Resolve every known variable: TF_VAR_ environment, then file value, then default.

    Args:
        variables: Variables read from files

    Returns:
        dict: Complete variable set
    """
    resolved: Dict[str, Any] = {}
    for name, default in monitoring_config.VARIABLE_DEFAULTS.items():
        value = getvar(name, dict(variables), None)
        resolved[name] = copy.deepcopy(default) if value is None else value
    return resolved


def _build_alert_condition(data: Optional[Mapping[str, Any]]) -> Optional[AlertCondition]:
    if data is None:
        return None
    return AlertCondition(
        duration=data.get("duration"),
        threshold=data.get("threshold"),
        aligner=data.get("aligner"),
        reducer=data.get("reducer"),
        filter=data.get("filter"),
        group_by_fields=data.get("group_by_fields"),
        policy_name=data.get("policy_name"),
        policy_severity=data.get("policy_severity") or monitoring_config.DEFAULT_SEVERITY,
        runbook_url=data.get("runbook_url"),
    )


def _build_indicator(data: Mapping[str, Any]) -> Indicator:
    labels = [
        Label(
            key=label["key"],
            value_type=label.get("value_type") or monitoring_config.DEFAULT_LABEL_VALUE_TYPE,
            description=label.get("description"),
        )
        for label in data.get("labels") or []
    ]
    return Indicator(
        filter=data["filter"],
        metric_kind=data["metric_kind"],
        value_type=data["value_type"],
        label_extractors=dict(data.get("label_extractors") or {}),
        labels=labels,
        description=data.get("description"),
        alert_condition=_build_alert_condition(data.get("alert_condition")),
    )


def _build_combined_policy(key: str, data: Mapping[str, Any]) -> CombinedPolicy:
    settings = data.get("condition_settings")
    return CombinedPolicy(
        display_name=data.get("display_name") or key,
        severity=data.get("severity") or monitoring_config.DEFAULT_SEVERITY,
        metrics=list(data.get("metrics") or []),
        filter=data.get("filter"),
        condition_settings=(
            ConditionSettings(
                duration=settings.get("duration"),
                threshold=settings.get("threshold"),
                aligner=settings.get("aligner"),
                reducer=settings.get("reducer"),
                group_by_fields=settings.get("group_by_fields"),
            )
            if settings is not None
            else None
        ),
        runbook_url=data.get("runbook_url"),
    )


def build_config(variables: Mapping[str, Any]) -> MonitoringConfig:
    """
    Build the typed MonitoringConfig from validated variables.

    Args:
        variables: Complete variable set that passed validate_variables()

    Returns:
        MonitoringConfig
    """
    indicators = {
        key: _build_indicator(value)
        for key, value in variables["advanced_log_based_json_indicators"].items()
    }
    policies = {
        key: _build_combined_policy(key, value)
        for key, value in variables["combined_alert_policies"].items()
    }
    return MonitoringConfig(
        target=target_from_variables(variables["service_name"], variables["job_name"]),
        indicators=indicators,
        combined_policies=policies,
        feature_enabled=variables["enable_advanced_log_based_json_indicators"],
        default_group_by=list(variables["default_alert_group_by_fields"]),
        default_runbook_url=variables["default_runbook_url"],
        notification_channels=list(variables["notification_channels"]),
        project_id=variables["project_id"],
    )


def load_config(varfiles: Iterable[str]) -> MonitoringConfig:
    """
    Load, validate and build the configuration in one step.

    Raises:
        VariableFileError: If a variable file cannot be read
        ConfigurationError: If the variables violate any rule
    """
    paths: List[str] = list(varfiles)
    variables = apply_defaults(load_variables(paths))
    validate_variables(variables)
    config = build_config(variables)
    logger.info(
        f"Loaded configuration from {len(paths)} file(s): "
        f"{len(config.indicators)} indicator(s), {len(config.combined_policies)} combined policy(ies)"
    )
    return config
