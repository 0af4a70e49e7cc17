"""Custom exception types for logmetrics.

Every error the CLI reports to the user derives from LogMetricsError. The
optional context names what the error is about (variable file, indicator key,
Terraform address) and is appended to the message in brackets.

Exception Hierarchy:
    LogMetricsError (base)
    ├── ConfigurationError - Input variables violate one or more rules
    ├── VariableFileError - Variable file missing or unparsable
    ├── ExportError - Terraform JSON document cannot be built or written
    └── ProvisioningError - Specification value the monitoring API cannot express

Errors raised by the provisioning collaborator itself (google.api_core
exceptions) are not wrapped and propagate unchanged.
"""

from typing import Any, Dict, List, Optional


class LogMetricsError(Exception):
    """Base exception for logmetrics.

    Args:
        message: What went wrong, in terms of the monitoring configuration
        context: Where it went wrong, e.g. {"varfile": "prod.tfvars"}
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        where = "; ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} [{where}]"


class ConfigurationError(LogMetricsError):
    """Raised when input variables fail validation.

    Carries every violated rule so the user sees all problems at once.

    Examples:
        - Both service_name and job_name set
        - Labels and label_extractors with different keys
        - Alert condition duration "5 minutes"
    """

    def __init__(
        self,
        violations: List[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.violations = list(violations)
        count = len(self.violations)
        summary = f"{count} configuration error{'s' if count != 1 else ''}"
        message = summary + ":\n" + "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(message, context)


class VariableFileError(LogMetricsError):
    """Raised when a variable file cannot be read or parsed.

    Examples:
        - File does not exist
        - Invalid HCL2 syntax in .tfvars
        - Top level of a YAML/JSON file is not a mapping
    """

    pass


class ExportError(LogMetricsError):
    """Raised when the Terraform JSON document cannot be written."""

    pass


class ProvisioningError(LogMetricsError):
    """Raised when a specification cannot be turned into an API request.

    Examples:
        - Aligner "ALIGN_FOO" matches the aligner pattern but is not an
          Aggregation.Aligner member
    """

    pass
