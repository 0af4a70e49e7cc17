"""
Cloud Run monitoring constants for logmetrics.

Enumerations, name patterns, defaults and the fixed alert-policy values shared by
the validator, the expander, the Terraform JSON renderer and the GCP
collaborator.

**Resource targets:**
- Cloud Run services are monitored through `cloud_run_revision` resources
  labelled with `service_name`
- Cloud Run jobs are monitored through `cloud_run_job` resources labelled with
  `job_name`
"""

# ============================================================================
# Resource targets
# ============================================================================

SERVICE_RESOURCE_TYPE = "cloud_run_revision"
SERVICE_LABEL_KEY = "service_name"
JOB_RESOURCE_TYPE = "cloud_run_job"
JOB_LABEL_KEY = "job_name"

# Literal substring rewritten to the resolved resource type in user filters
RESOURCE_TYPE_PLACEHOLDER = f'resource.type="{SERVICE_RESOURCE_TYPE}"'

# Prefix of user-defined log-based metric types
USER_METRIC_PREFIX = "logging.googleapis.com/user/"

# ============================================================================
# Enumerations
# ============================================================================

METRIC_KINDS = ["GAUGE", "DELTA", "CUMULATIVE"]
VALUE_TYPES = ["BOOL", "INT64", "DOUBLE", "STRING", "DISTRIBUTION", "MONEY"]
LABEL_VALUE_TYPES = ["STRING", "BOOL", "INT64"]
SEVERITIES = ["INFO", "WARNING", "ERROR", "CRITICAL"]

# Cloud Monitoring has no INFO severity; such policies are created unspecified
PROVIDER_SEVERITIES = ["WARNING", "ERROR", "CRITICAL"]

# ============================================================================
# Patterns and limits
# ============================================================================

INDICATOR_KEY_PATTERN = r"^[a-zA-Z0-9-_]+$"
POLICY_KEY_PATTERN = r"^[a-zA-Z0-9-_]+$"
# Derived names are "{resource}-{key}" so the joining hyphen is allowed
METRIC_NAME_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_-]*$"
METRIC_NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 256
LABEL_KEY_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_]*$"
DURATION_PATTERN = r"^[0-9]+[smhd]$"
ALIGNER_PATTERN = r"^ALIGN_[A-Z_]+$"
REDUCER_PATTERN = r"^REDUCE_[A-Z_]+$"
POLICY_NAME_PATTERN = r"^[a-zA-Z0-9-_ ]+$"

DURATION_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

# ============================================================================
# Defaults
# ============================================================================

DEFAULT_SEVERITY = "ERROR"
DEFAULT_LABEL_VALUE_TYPE = "STRING"
DEFAULT_GROUP_BY_FIELDS = ["resource.label.location"]

# Indicator alert conditions must set these; combined policies default them
REQUIRED_CONDITION_FIELDS = ["duration", "threshold", "aligner", "reducer"]

# Lowest-precedence layer of every alert condition
DEFAULT_CONDITION_SETTINGS = {
    "duration": "60s",
    "threshold": 1,
    "aligner": "ALIGN_RATE",
    "reducer": "REDUCE_SUM",
}

# Variables recognised in variable files and TF_VAR_ environment overrides
VARIABLE_DEFAULTS = {
    "project_id": None,
    "service_name": None,
    "job_name": None,
    "enable_advanced_log_based_json_indicators": False,
    "advanced_log_based_json_indicators": {},
    "combined_alert_policies": {},
    "default_alert_group_by_fields": DEFAULT_GROUP_BY_FIELDS,
    "default_runbook_url": None,
    "notification_channels": [],
}

# ============================================================================
# Fixed alert-policy values
# ============================================================================

COMPARISON = "COMPARISON_GT"
COMBINER = "OR"
ALIGNMENT_PERIOD = "60s"
TRIGGER_COUNT = 1
AUTO_CLOSE = "86400s"
RENOTIFY_INTERVAL = "86400s"
DOCUMENTATION_MIME_TYPE = "text/markdown"
