"""Utility modules for logmetrics.

This package contains utility modules for filter strings and naming,
Terraform variable handling, and layered settings resolution.
"""

from .string_utils import (
    rewrite_resource_type,
    metric_name,
    metric_type,
    metric_filter,
    duration_to_seconds,
    seconds_string,
    terraform_identifier,
)
from .terraform_utils import getvar, tfvar_read, normalize_hcl_value
from .settings_utils import merge_layers, first_set

__all__ = [
    # String utilities
    "rewrite_resource_type",
    "metric_name",
    "metric_type",
    "metric_filter",
    "duration_to_seconds",
    "seconds_string",
    "terraform_identifier",
    # Terraform utilities
    "getvar",
    "tfvar_read",
    "normalize_hcl_value",
    # Settings utilities
    "merge_layers",
    "first_set",
]
