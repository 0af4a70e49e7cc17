"""Terraform-style variable utilities for logmetrics.

This module reads Terraform variable files (.tfvars in HCL2 or JSON form) and
resolves variable values, honouring TF_VAR_ environment overrides the way the
terraform binary does.
"""

import json
import os
import re
from contextlib import suppress
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import hcl2

from modules.exceptions import VariableFileError

_INTERPOLATION = re.compile(r"^\$\{(.*)\}$", re.DOTALL)


def getvar(variable_name: str, all_variables_dict: Dict[str, Any], default: Any = None) -> Any:
    """Retrieve a variable value from the environment or variables dictionary.

    A TF_VAR_<name> environment variable takes precedence over the dictionary.
    Complex values in the environment are JSON decoded, as terraform does for
    map and list variables.

    Args:
        variable_name: Name of the variable (without leading ``var.`` prefix)
        all_variables_dict: Dictionary of parsed variables
        default: Value returned when the variable is not set anywhere

    Returns:
        Resolved variable value or ``default``
    """
    if not variable_name:
        return default

    env_var = os.getenv(f"TF_VAR_{variable_name}")
    if env_var is not None:
        return decode_env_value(env_var)

    if variable_name in all_variables_dict:
        return all_variables_dict[variable_name]
    for key in all_variables_dict:
        if key.lower() == variable_name.lower():
            return all_variables_dict[key]
    return default


def decode_env_value(raw: str) -> Any:
    """Decode a TF_VAR_ value: JSON for maps, lists and booleans, verbatim otherwise."""
    stripped = raw.strip()
    if stripped in ("true", "false"):
        return stripped == "true"
    if stripped.startswith(("{", "[")):
        with suppress(json.JSONDecodeError):
            return json.loads(stripped)
    return raw


@lru_cache(maxsize=None)
def _parser_keeps_quotes() -> bool:
    """Whether the installed python-hcl2 returns string literals with their quotes."""
    return hcl2.loads('probe = "x"\n').get("probe") == '"x"'


def normalize_hcl_value(value: Any, keep_quotes: Optional[bool] = None) -> Any:
    """Unwrap parser artefacts from HCL2 values.

    Newer python-hcl2 releases keep the surrounding quotes of string literals
    and wrap expressions such as null in ${...}. Both are removed recursively,
    from keys as well as values.
    """
    if keep_quotes is None:
        keep_quotes = _parser_keeps_quotes()
    if isinstance(value, dict):
        return {
            normalize_hcl_value(k, keep_quotes): normalize_hcl_value(v, keep_quotes)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [normalize_hcl_value(v, keep_quotes) for v in value]
    if isinstance(value, str):
        match = _INTERPOLATION.match(value)
        if match:
            inner = match.group(1).strip()
            if inner == "null":
                return None
            if inner in ("true", "false"):
                return inner == "true"
            return value
        if (
            keep_quotes
            and len(value) >= 2
            and value.startswith('"')
            and value.endswith('"')
        ):
            return value[1:-1].replace('\\"', '"')
    return value


def tfvar_read(filepath: str) -> Dict[str, Any]:
    """Read and parse a Terraform variable file (.tfvars).

    Args:
        filepath: Path to .tfvars file (HCL or JSON format)

    Returns:
        dict: Parsed variable definitions

    Raises:
        VariableFileError: If the file does not exist or cannot be parsed
    """
    if not Path(filepath).exists():
        raise VariableFileError(
            "Variable file not found", context={"filepath": filepath}
        )

    # Try parsing as JSON first
    with suppress(json.JSONDecodeError):
        with open(filepath, "r") as f:
            return json.load(f)

    try:
        with open(filepath, "r") as f:
            parsed_data = hcl2.load(f)
    except Exception as e:
        raise VariableFileError(
            "Failed to parse variable file",
            context={"error": str(e), "filepath": filepath},
        ) from e
    return normalize_hcl_value(parsed_data)
