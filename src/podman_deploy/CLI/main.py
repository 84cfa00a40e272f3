# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for podman-deploy.
"""
import click
from ..PARSERS.config_loader import ConfigLoader
from ..RUNNERS.podman_runner import PodmanRunner
from ..MANAGERS.deployment_orchestrator import DeploymentOrchestrator, ModeReport
from ..errors import PodmanDeployError

CONFIG_LOCATIONS_HELP = """\b
Config file search locations (in order):
  1. ~/.config/podman_deploy/config.yaml
  2. /etc/podman_deploy/config.yaml
  3. ./config.yaml (current directory)
"""


@click.group(invoke_without_command=True, epilog=CONFIG_LOCATIONS_HELP)
@click.option('--config', 'config_path', default=None, envvar='PODMAN_DEPLOY_CONFIG',
              help='Specify custom config file path')
@click.pass_context
def cli(ctx, config_path):
    """
    Podman Deploy - declarative pods and containers on a single host.

    Reads the desired pods and containers from config.yaml and drives podman
    to create, start, stop and upgrade them.
    """
    ctx.ensure_object(dict)
    if ctx.invoked_subcommand is None:
        click.echo("Error: Mode not specified", err=True)
        click.echo(ctx.get_help())
        ctx.exit(1)

    ctx.obj['config_override'] = config_path
    ctx.obj.setdefault('loader', ConfigLoader())
    ctx.obj.setdefault('runtime', PodmanRunner())


def _orchestrator(ctx) -> DeploymentOrchestrator:
    loader = ctx.obj['loader']
    config_path = loader.find_config(ctx.obj.get('config_override'))
    config = loader.load(config_path)
    return DeploymentOrchestrator(config, config_path, ctx.obj['runtime'], loader=loader)


def _run_mode(ctx, action):
    """
    Runs one mode and turns a propagated failure into exit status 1.
    """
    try:
        report: ModeReport = action(_orchestrator(ctx))
    except PodmanDeployError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if report.warnings:
        click.echo(f"\n{len(report.warnings)} warning(s):")
        for warning in report.warnings:
            click.echo(f"  - {warning}")
    click.echo("\n=== Application completed successfully ===")


@cli.command()
@click.pass_context
def setup(ctx):
    """Install podman, create directories, create pods, pull images, and stop containers/pods."""
    _run_mode(ctx, lambda orchestrator: orchestrator.setup())


@cli.command()
@click.argument('container_name', required=False)
@click.pass_context
def upgrade(ctx, container_name):
    """Check container image versions and upgrade if needed (all, or CONTAINER_NAME)."""
    _run_mode(ctx, lambda orchestrator: orchestrator.upgrade(container_name))


@cli.command()
@click.argument('pod_name', required=False)
@click.pass_context
def start(ctx, pod_name):
    """Start all pods, or POD_NAME."""
    _run_mode(ctx, lambda orchestrator: orchestrator.start(pod_name))


@cli.command()
@click.argument('pod_name', required=False)
@click.pass_context
def stop(ctx, pod_name):
    """Stop all containers and pods, or POD_NAME."""
    _run_mode(ctx, lambda orchestrator: orchestrator.stop(pod_name))


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
