"""End-to-end tests: variable file to provisioning outputs.

Exercises load -> validate -> resolve -> expand -> export/apply with the sample
variable files under tests/fixtures/varfiles.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from modules.config_loader import load_config
from modules.expander import expand_config
from modules.provisioner import apply_specifications
from modules.tfjson import render_terraform_json

VARFILES = Path(__file__).parent.parent / "fixtures" / "varfiles"


class NamingCollaborator:
    def create_metric(self, spec):
        return f"projects/demo-project/metrics/{spec.name}"

    def create_alert_policy(self, spec):
        return f"projects/demo-project/alertPolicies/{spec.display_name.replace(' ', '-')}"


@pytest.fixture(autouse=True)
def clear_tf_vars(monkeypatch):
    import os

    for key in list(os.environ):
        if key.startswith("TF_VAR_"):
            monkeypatch.delenv(key)


def test_service_scenario():
    identity, result = expand_config(load_config([str(VARFILES / "service.tfvars")]))

    assert identity.resource_label_key == "service_name"
    metric = result.metrics["errors"]
    assert metric.name == "svc-errors"
    assert metric.description == "Errors by type"

    policy = result.alert_policies["errors"]
    assert policy.display_name == "Metric-svc-errors"
    condition_filter = policy.conditions[0].filter
    assert 'metric.type="logging.googleapis.com/user/svc-errors"' in condition_filter
    assert 'resource.type="cloud_run_revision"' in condition_filter
    assert 'resource.label.service_name="svc"' in condition_filter

    combined = result.combined_alert_policies["all-errors"]
    assert [c.display_name for c in combined.conditions] == ["errors monitoring"]


def test_job_scenario():
    identity, result = expand_config(load_config([str(VARFILES / "job.yaml")]))

    assert identity.resource_type == "cloud_run_job"
    assert result.metrics["failures"].name == "nightly-export-failures"

    policy = result.alert_policies["failures"]
    assert policy.display_name == "Nightly export failures"
    assert policy.severity == "CRITICAL"
    assert policy.conditions[0].threshold == 0
    assert policy.documentation.content == (
        "Runbook: https://runbooks.example.com/nightly-export"
    )
    assert policy.notification_channels == (
        "projects/demo-project/notificationChannels/123",
    )

    combined = result.combined_alert_policies["slow-tasks"]
    assert len(combined.conditions) == 1
    condition = combined.conditions[0]
    assert condition.filter == (
        'resource.type="cloud_run_job" AND jsonPayload.latency_ms>5000'
    )
    assert condition.threshold == 10
    assert condition.duration == "60s"
    assert condition.aligner == "ALIGN_RATE"
    assert condition.reducer == "REDUCE_SUM"
    assert condition.group_by_fields == ("resource.label.location",)


def test_feature_disabled_by_override():
    _, result = expand_config(
        load_config(
            [str(VARFILES / "service.tfvars"), str(VARFILES / "override.json")]
        )
    )
    assert list(result.metrics) == ["errors"]
    assert result.alert_policies == {}
    assert result.combined_alert_policies == {}


def test_apply_reports_outputs():
    _, result = expand_config(load_config([str(VARFILES / "service.tfvars")]))

    outputs = apply_specifications(result, NamingCollaborator()).to_dict()

    assert outputs == {
        "log_based_metric_names": {
            "errors": "projects/demo-project/metrics/svc-errors"
        },
        "alert_policy_names": {
            "errors": "projects/demo-project/alertPolicies/Metric-svc-errors"
        },
        "combined_alert_policy_names": {
            "all-errors": "projects/demo-project/alertPolicies/All-errors"
        },
    }


def test_repeated_runs_are_byte_identical():
    varfiles = [str(VARFILES / "job.yaml")]
    first = render_terraform_json(expand_config(load_config(varfiles))[1])
    second = render_terraform_json(expand_config(load_config(varfiles))[1])
    assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)
