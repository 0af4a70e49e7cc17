"""Resource identity resolution for logmetrics.

Maps the single monitored Cloud Run service or job to the resource type,
resource label key and resource value used in every filter string and metric
name.
"""

from typing import Optional

from modules.config import monitoring_config
from modules.models import JobTarget, ResourceIdentity, ResourceTarget, ServiceTarget


def target_from_variables(
    service_name: Optional[str], job_name: Optional[str]
) -> ResourceTarget:
    """Build a ResourceTarget from the service_name/job_name variables.

    Args:
        service_name: Cloud Run service name or None/empty
        job_name: Cloud Run job name or None/empty

    Returns:
        ServiceTarget or JobTarget

    Raises:
        ValueError: If not exactly one of the two names is set. The validator
            reports this case as a ConfigurationError before this is reached.
    """
    if service_name and not job_name:
        return ServiceTarget(service_name)
    if job_name and not service_name:
        return JobTarget(job_name)
    raise ValueError("Exactly one of service_name or job_name must be set")


def resolve(target: ResourceTarget) -> ResourceIdentity:
    """Derive resource type, label key and value for a target.

    Examples:
        >>> resolve(ServiceTarget("svc"))
        ResourceIdentity(resource_type='cloud_run_revision', resource_label_key='service_name', resource_value='svc')
        >>> resolve(JobTarget("nightly")).resource_type
        'cloud_run_job'
    """
    if isinstance(target, ServiceTarget):
        return ResourceIdentity(
            resource_type=monitoring_config.SERVICE_RESOURCE_TYPE,
            resource_label_key=monitoring_config.SERVICE_LABEL_KEY,
            resource_value=target.name,
        )
    if isinstance(target, JobTarget):
        return ResourceIdentity(
            resource_type=monitoring_config.JOB_RESOURCE_TYPE,
            resource_label_key=monitoring_config.JOB_LABEL_KEY,
            resource_value=target.name,
        )
    raise TypeError(f"Unsupported resource target: {target!r}")
