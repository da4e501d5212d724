#!/usr/bin/env python3
"""
Command-line interface for config-tree.

Usage:
    config-tree props -f envs.yaml -t templates --acl acls.properties -d web
    config-tree files -f envs.yaml -t templates -d web --dest ./out
    config-tree hosts --acl acls.properties --host zk1
    config-tree envs --list -f envs.yaml
"""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .config import CoordinationConfig
from .constants import DEFAULT_APP
from .domain import RunResult
from .errors import ConfigError, ConfigTreeError
from .logger import LOG_LEVELS, configure_logging
from .pipeline import (
    FilesRequest,
    HostsRequest,
    PropsRequest,
    run_files,
    run_hosts,
    run_list,
    run_props,
    run_validate,
)

console = Console()
err_console = Console(stderr=True)


def print_error(msg: str):
    err_console.print(f"[red]Error:[/red] {msg}", highlight=False)


def print_warning(msg: str):
    err_console.print(f"[yellow]Warning:[/yellow] {msg}", highlight=False)


def print_success(msg: str):
    console.print(f"[green]{msg}[/green]", highlight=False)


def print_info(msg: str):
    console.print(f"[blue]{msg}[/blue]", highlight=False)


def _coordination_config(host: Optional[str], port: Optional[int], **kwargs) -> CoordinationConfig:
    try:
        return CoordinationConfig(host=host, port=port, **kwargs)
    except ConfigError as e:
        print_error(str(e))
        sys.exit(1)


def _finish(result: RunResult, success: str) -> None:
    if result.sync is not None:
        for error in result.sync.errors:
            print_error(str(error))
    if result.ok:
        print_success(success)
    else:
        print_error(str(result.error))
    sys.exit(result.exit_code)


envs_file_option = click.option(
    "-f", "--envs-file", required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="The file containing the environment definitions.")
template_dir_option = click.option(
    "-t", "--template-dir", required=True,
    type=click.Path(exists=True, file_okay=False),
    help="The directory containing the templates.")
acl_option = click.option(
    "--acl", "acl_file", required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="The file containing ZooKeeper hostname ACLs.")
host_option = click.option("--host", help="The ZooKeeper host to connect to.")
port_option = click.option("--port", type=int, help="The ZooKeeper client port to connect to.")
app_option = click.option("-a", "--app", help=f"The application the settings are for (default: {DEFAULT_APP}).")
env_option = click.option("-e", "--env", help="The environment the deployment belongs to.")
deployment_option = click.option(
    "-d", "--deployment", required=True,
    help="The deployment inside the environment that is being configured.")


@click.group()
@click.version_option(version="0.1.0", prog_name="config-tree")
@click.option("--log-level", type=click.Choice(list(LOG_LEVELS)), help="Logging verbosity.")
def cli(log_level: Optional[str]):
    """Render deployment settings from templates and load them into ZooKeeper.

    Each command has its own --help.
    """
    configure_logging(log_level)


@cli.command()
@envs_file_option
@template_dir_option
@acl_option
@host_option
@port_option
@app_option
@env_option
@deployment_option
@click.argument("templates", nargs=-1)
def props(envs_file, template_dir, acl_file, host, port, app, env, deployment, templates):
    """Load rendered settings for a deployment into ZooKeeper.

    Renders every template in the template directory unless TEMPLATES are
    named explicitly.
    """
    config = _coordination_config(host, port, app=app)
    print_info(f"Connecting to ZooKeeper instance at {config.hosts}")
    result = run_props(PropsRequest(
        envs_file=envs_file,
        template_dir=template_dir,
        acl_file=acl_file,
        deployment=deployment,
        env=env,
        app=app,
        templates=list(templates),
        config=config,
    ))
    where = result.environment.dotted if result.environment else deployment
    _finish(result, f"Done loading data into the {where} environment.")


@cli.command()
@envs_file_option
@template_dir_option
@app_option
@env_option
@deployment_option
@click.option("--dest", required=True, type=click.Path(file_okay=False),
              help="The destination directory for the files.")
@click.argument("templates", nargs=-1)
def files(envs_file, template_dir, app, env, deployment, dest, templates):
    """Write rendered settings for a deployment to a directory."""
    result = run_files(FilesRequest(
        envs_file=envs_file,
        template_dir=template_dir,
        deployment=deployment,
        dest=dest,
        env=env,
        app=app,
        templates=list(templates),
    ))
    _finish(result, f"Wrote {len(result.files)} files to {dest}.")


@cli.command()
@acl_option
@host_option
@port_option
@click.option("--hosts-path", help="Node holding the host list (default: /hosts).")
def hosts(acl_file, host, port, hosts_path):
    """Replace the host list in ZooKeeper with the hosts in the ACL file."""
    config = _coordination_config(host, port, hosts_path=hosts_path)
    print_info(f"Connecting to ZooKeeper instance at {config.hosts}")
    result = run_hosts(HostsRequest(acl_file=acl_file, config=config))
    if result.sync is not None and result.sync.deleted:
        print_info(f"Removed {len(result.sync.deleted)} stale hosts.")
    _finish(result, "Done loading hosts.")


@cli.command()
@click.option("-l", "--list", "list_", is_flag=True, help="List environments.")
@click.option("-v", "--validate", is_flag=True, help="Validate the environments file.")
@envs_file_option
def envs(list_, validate, envs_file):
    """List or validate environment definitions."""
    if list_ == validate:
        print_error("please specify exactly one of --list, --validate")
        sys.exit(1)

    if validate:
        issues = run_validate(envs_file)
        for issue in issues:
            if issue.is_error:
                print_error(issue.message)
            else:
                print_warning(issue.message)
        if any(issue.is_error for issue in issues):
            sys.exit(1)
        print_success(f"{envs_file} is valid.")
        return

    try:
        pairs = run_list(envs_file)
    except ConfigTreeError as e:
        print_error(str(e))
        sys.exit(1)

    table = Table(title="Environments")
    table.add_column("Environment", style="cyan")
    table.add_column("Deployment", style="green")
    for env_name, deployment in pairs:
        table.add_row(env_name, deployment)
    console.print(table)


def main():
    """Main entry point."""
    return cli()


if __name__ == "__main__":
    main()
