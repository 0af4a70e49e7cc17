#!/usr/bin/env python
import json
import logging
import sys

import click
from google.api_core.exceptions import GoogleAPICallError

import modules.config_loader as config_loader
import modules.expander as expander
import modules.provisioner as provisioner
import modules.tfjson as tfjson
from modules.exceptions import ConfigurationError, LogMetricsError


__version__ = "0.1"


def my_excepthook(exc_type, exc_value, exc_traceback):
    print(f"Unhandled error: {exc_type.__name__}: {exc_value}")


def _show_banner():
    banner = (
        "\n"
        " _                                _        _          \n"
        "| | ___   __ _ _ __ ___   ___| |_ _ __(_) ___ ___ \n"
        "| |/ _ \\ / _` | '_ ` _ \\ / _ \\ __| '__| |/ __/ __|\n"
        "| | (_) | (_| | | | | | |  __/ |_| |  | | (__\\__ \\\n"
        "|_|\\___/ \\__, |_| |_| |_|\\___|\\__|_|  |_|\\___|___/\n"
        "         |___/                                      \n"
        "\n"
    )
    click.echo(banner)


def _setup(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
        sys.excepthook = my_excepthook


def _error(message: str) -> None:
    click.echo(click.style(f"\nERROR: {message}", fg="red", bold=True))


def _load(varfile: tuple):
    """Load and validate configuration, exiting with every violation on failure."""
    click.echo(click.style("\nLoading variables..", fg="white", bold=True))
    for path in varfile:
        click.echo(f"  Will use variables from file : {path}")
    try:
        config = config_loader.load_config(varfile)
    except ConfigurationError as e:
        _error(f"{len(e.violations)} configuration error(s) found:")
        for violation in e.violations:
            click.echo(click.style(f"  - {violation}", fg="red"))
        sys.exit(1)
    except LogMetricsError as e:
        _error(str(e))
        sys.exit(1)
    return config


def _print_json(title: str, data: dict) -> None:
    click.echo(click.style(f"\n{title}:\n", fg="white", bold=True))
    click.echo(json.dumps(data, indent=4, sort_keys=True))


@click.version_option(version=__version__, prog_name="logmetrics")
@click.group()
def cli():
    """
    logmetrics provisions log-based metrics and alert policies for a Cloud Run service or job

    For help with a specific command type:

    logmetrics [COMMAND] --help

    """
    pass


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Dump exception tracebacks")
@click.option(
    "--varfile",
    multiple=True,
    required=True,
    help="Path to .tfvars, .tfvars.json or YAML variables file",
)
def validate(debug, varfile):
    """Validates indicator and alert policy variables"""
    _setup(debug)
    config = _load(varfile)
    click.echo(
        click.style(
            f"\nConfiguration is valid: {len(config.indicators)} indicator(s), "
            f"{len(config.combined_policies)} combined policy(ies)",
            fg="green",
            bold=True,
        )
    )


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Dump exception tracebacks")
@click.option(
    "--varfile",
    multiple=True,
    required=True,
    help="Path to .tfvars, .tfvars.json or YAML variables file",
)
@click.option(
    "--outfile",
    default="plan",
    help="Filename for output specifications (default plan.json)",
)
def plan(debug, varfile, outfile):
    """Lists Metric and Alert Policy Specifications as JSON"""
    _setup(debug)
    _show_banner()
    config = _load(varfile)
    _, result = expander.expand_config(config)
    specifications = result.to_dict()
    _print_json("Resource specifications", specifications)
    if not outfile.endswith(".json"):
        outfile += ".json"
    click.echo(f"\nExporting specifications into file {outfile}")
    with open(outfile, "w") as f:
        json.dump(specifications, f, indent=4, sort_keys=True)
    click.echo("\nCompleted!")


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Dump exception tracebacks")
@click.option(
    "--varfile",
    multiple=True,
    required=True,
    help="Path to .tfvars, .tfvars.json or YAML variables file",
)
@click.option(
    "--outfile",
    default="monitoring",
    help="Filename for Terraform configuration (default monitoring.tf.json)",
)
def export(debug, varfile, outfile):
    """Writes Terraform JSON for the Metrics and Alert Policies"""
    _setup(debug)
    _show_banner()
    config = _load(varfile)
    _, result = expander.expand_config(config)
    try:
        tfjson.export_terraform_json(result, outfile, config.project_id)
    except LogMetricsError as e:
        _error(str(e))
        sys.exit(1)
    click.echo("\nCompleted!")


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Dump exception tracebacks")
@click.option(
    "--varfile",
    multiple=True,
    required=True,
    help="Path to .tfvars, .tfvars.json or YAML variables file",
)
@click.option("--project", default=None, help="GCP project ID (overrides project_id)")
def apply(debug, varfile, project):
    """Creates the Metrics and Alert Policies in Google Cloud"""
    _setup(debug)
    _show_banner()
    config = _load(varfile)
    project_id = project or config.project_id
    if not project_id:
        _error("No project set. Use --project or the project_id variable.")
        sys.exit(1)
    _, result = expander.expand_config(config)
    click.echo(
        click.style(f"\nProvisioning into project {project_id}..\n", fg="white", bold=True)
    )
    try:
        outputs = provisioner.apply_specifications(
            result, provisioner.GcpCollaborator(project_id), progress=True
        )
    except (GoogleAPICallError, LogMetricsError) as e:
        if debug:
            raise
        _error(f"Resource creation failed: {e}")
        sys.exit(1)
    _print_json("Outputs", outputs.to_dict())
    click.echo("\nCompleted!")


if __name__ == "__main__":
    cli()
