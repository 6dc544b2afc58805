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
Command Line Interface for modprov.
"""
import click
import os
import sys
from ..PARSERS.config_parser import ConfigParser
from ..MANAGERS.orchestrator import Orchestrator
from ..MODELS.errors import DeploymentError
from ..PROVISIONERS.ledger_provisioner import DEFAULT_DEPLOYER, LedgerProvisioner
from ..RUNNERS.deployment_plan import DeploymentPlanner
from ..CONVERTERS.report_writer import ReportWriter


def _fail(error: DeploymentError):
    click.echo(f"Error: {error.kind.value}: {error}")
    sys.exit(1)


@click.group()
@click.option('--file', '-f', default='deploy.yml', help='Deployment config file path')
@click.option('--network', '-n', default=None, help='Network to deploy to')
@click.option('--env-file', default='.env', help='.env file used for ${VAR} interpolation')
@click.pass_context
def cli(ctx, file, network, env_file):
    """
    modprov - provisions a vault, an interest manager and its modules.

    Resources are deployed in dependency order and every module is
    registered with the manager.
    """
    ctx.ensure_object(dict)
    ctx.obj['file'] = file
    if os.path.exists(file):
        parser = ConfigParser(env_file=env_file)
        try:
            ctx.obj['config'] = parser.parse(file, network)
        except DeploymentError as e:
            _fail(e)


@cli.command()
@click.pass_context
def validate(ctx):
    """Validate the deployment config."""
    config = ctx.obj.get('config')
    if not config:
        click.echo(f"Error: {ctx.obj['file']} not found.")
        return
    if config.network is None:
        click.echo(f"Error: network {config.network_name} not found in {ctx.obj['file']}.")
        sys.exit(1)
    modules = config.network.modules
    count = "no module list" if modules is None else f"{len(modules)} module(s)"
    click.echo(f"{ctx.obj['file']} is valid: {config.network_name}, {count}.")


@cli.command()
@click.option('--reconcile-ownership/--no-reconcile-ownership', default=None,
              help='Hand ownership over to the admin (defaults to the config value)')
@click.pass_context
def plan(ctx, reconcile_ownership):
    """Show the deployment steps in order"""
    config = ctx.obj.get('config')
    if not config:
        click.echo(f"Error: {ctx.obj['file']} not found.")
        return
    if reconcile_ownership is not None:
        config = config.model_copy(update={"reconcile_ownership": reconcile_ownership})
    try:
        order = DeploymentPlanner().resolve_order(config)
    except DeploymentError as e:
        _fail(e)
    click.echo(f"{'#':>3} {'ACTION':10} {'RESOURCE':20}")
    click.echo("-" * 35)
    for i, step in enumerate(order, 1):
        click.echo(f"{i:>3} {step.action:10} {step.resource:20}")


@cli.command()
@click.option('--ledger', '-l', default='.modprov/ledger.json', help='Ledger record file')
@click.option('--deployer', default=DEFAULT_DEPLOYER, help='Address signing the transactions')
@click.option('--reconcile-ownership/--no-reconcile-ownership', default=None,
              help='Hand ownership over to the admin (defaults to the config value)')
@click.option('--report', '-r', default=None, help='Write a Markdown deployment report')
@click.pass_context
def deploy(ctx, ledger, deployer, reconcile_ownership, report):
    """Deploy the vault, the manager and all modules."""
    config = ctx.obj.get('config')
    if not config:
        click.echo(f"Error: {ctx.obj['file']} not found.")
        return

    provisioner = LedgerProvisioner(ledger, deployer=deployer, namespace=config.network_name or "local")
    orchestrator = Orchestrator(config, provisioner, reconcile_ownership=reconcile_ownership)
    try:
        result = orchestrator.run()
    except DeploymentError as e:
        _fail(e)

    click.echo(f"Deployed {len(result.modules)} module(s).")
    for name, address in result.address_book().items():
        click.echo(f"{name:25} {address}")
    if report:
        ReportWriter(result).write(report)


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
