"""Unit tests for logmetrics.py CLI commands."""

import json
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner
from google.api_core.exceptions import PermissionDenied

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from logmetrics import cli
from modules.exceptions import ProvisioningError

VARFILES = Path(__file__).parent.parent / "fixtures" / "varfiles"
SERVICE_TFVARS = str(VARFILES / "service.tfvars")
JOB_YAML = str(VARFILES / "job.yaml")
INVALID_YAML = str(VARFILES / "invalid.yaml")


class FakeCollaborator:
    def __init__(self, project_id):
        self.project_id = project_id

    def create_metric(self, spec):
        return f"projects/{self.project_id}/metrics/{spec.name}"

    def create_alert_policy(self, spec):
        return f"projects/{self.project_id}/alertPolicies/{spec.display_name}"


class FailingCollaborator(FakeCollaborator):
    def create_metric(self, spec):
        raise PermissionDenied("logging.logMetrics.create denied")


class UnsupportedValueCollaborator(FakeCollaborator):
    def create_alert_policy(self, spec):
        raise ProvisioningError("Unsupported aligner 'ALIGN_FOO'")


class TestValidateCommand(unittest.TestCase):
    """Test the validate command."""

    def setUp(self):
        self.runner = CliRunner()

    def test_valid_file(self):
        result = self.runner.invoke(cli, ["validate", "--varfile", SERVICE_TFVARS])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Configuration is valid", result.output)

    def test_invalid_file_lists_every_violation(self):
        result = self.runner.invoke(cli, ["validate", "--varfile", INVALID_YAML])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("configuration error(s) found", result.output)
        self.assertIn("metric_kind", result.output)
        self.assertIn("either metrics or filter", result.output)

    def test_missing_file(self):
        result = self.runner.invoke(cli, ["validate", "--varfile", "nope.tfvars"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Variable file not found", result.output)

    def test_varfile_required(self):
        result = self.runner.invoke(cli, ["validate"])
        self.assertNotEqual(result.exit_code, 0)


class TestPlanCommand(unittest.TestCase):
    """Test the plan command."""

    def setUp(self):
        self.runner = CliRunner()

    def test_plan_writes_specifications(self):
        with self.runner.isolated_filesystem():
            result = self.runner.invoke(
                cli, ["plan", "--varfile", SERVICE_TFVARS, "--outfile", "specs"]
            )
            self.assertEqual(result.exit_code, 0, result.output)
            with open("specs.json") as f:
                specifications = json.load(f)

        self.assertEqual(specifications["metrics"]["errors"]["name"], "svc-errors")
        self.assertEqual(
            specifications["alert_policies"]["errors"]["display_name"],
            "Metric-svc-errors",
        )
        self.assertEqual(
            specifications["combined_alert_policies"]["all-errors"]["severity"],
            "CRITICAL",
        )

    def test_plan_job_with_override(self):
        with self.runner.isolated_filesystem():
            result = self.runner.invoke(
                cli,
                [
                    "plan",
                    "--varfile",
                    JOB_YAML,
                    "--varfile",
                    str(VARFILES / "override.json"),
                ],
            )
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertTrue(os.path.exists("plan.json"))
            with open("plan.json") as f:
                specifications = json.load(f)

        self.assertEqual(
            specifications["metrics"]["failures"]["filter"],
            'resource.type="cloud_run_job" AND severity>=ERROR',
        )
        self.assertEqual(specifications["alert_policies"], {})


class TestExportCommand(unittest.TestCase):
    """Test the export command."""

    def test_export_terraform_json(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["export", "--varfile", SERVICE_TFVARS])
            self.assertEqual(result.exit_code, 0, result.output)
            with open("monitoring.tf.json") as f:
                document = json.load(f)

        metric = document["resource"]["google_logging_metric"]["errors"]
        self.assertEqual(metric["project"], "demo-project")


class TestApplyCommand(unittest.TestCase):
    """Test the apply command."""

    def setUp(self):
        self.runner = CliRunner()

    @patch("modules.provisioner.GcpCollaborator", FakeCollaborator)
    def test_apply_prints_outputs(self):
        result = self.runner.invoke(cli, ["apply", "--varfile", SERVICE_TFVARS])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("projects/demo-project/metrics/svc-errors", result.output)
        self.assertIn("combined_alert_policy_names", result.output)

    @patch("modules.provisioner.GcpCollaborator", FakeCollaborator)
    def test_project_option_overrides_variable(self):
        result = self.runner.invoke(
            cli, ["apply", "--varfile", SERVICE_TFVARS, "--project", "other"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("projects/other/metrics/svc-errors", result.output)

    def test_apply_requires_project(self):
        result = self.runner.invoke(cli, ["apply", "--varfile", JOB_YAML])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("No project set", result.output)

    @patch("modules.provisioner.GcpCollaborator", FailingCollaborator)
    def test_resource_creation_failure_reported(self):
        result = self.runner.invoke(cli, ["apply", "--varfile", SERVICE_TFVARS])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Resource creation failed", result.output)

    @patch("modules.provisioner.GcpCollaborator", UnsupportedValueCollaborator)
    def test_unsupported_value_reported(self):
        result = self.runner.invoke(cli, ["apply", "--varfile", SERVICE_TFVARS])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Unsupported aligner 'ALIGN_FOO'", result.output)


if __name__ == "__main__":
    unittest.main()
