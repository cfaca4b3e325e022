#!/usr/bin/env python3
"""
Valhalla Console CLI

Serve the web console and inspect the role/feature registry.
"""

import sys
import click

from cli.core.context import Context
from cli.core.utils import ROLE
from cli.registry.commands import FeatureTableCommand, NavigationCommand, RegistryCheckCommand


pass_context = click.make_pass_decorator(Context, ensure=True)
CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option('--verbose', '-v', is_flag=True, help='Show detailed information')
@pass_context
def cli(ctx: Context, verbose: bool):
    """Valhalla residential-complex administration console"""
    ctx.verbose = verbose


@cli.command()
@click.option('--host', default='127.0.0.1', show_default=True, help='Interface to bind')
@click.option('--port', default=5050, show_default=True, type=int, help='Port to listen on')
@click.option('--debug', is_flag=True, help='Enable the Flask debugger and reloader')
@pass_context
def serve(ctx: Context, host, port, debug):
    """Run the web console."""
    from valhalla.exceptions import ConfigError
    from webapp.run import create_app

    try:
        app = create_app()
    except ConfigError as e:
        ctx.stderr_console.print(f"❌ Configuration error: {e}", style="bold red")
        sys.exit(2)

    ctx.console.print(f"Serving console on http://{host}:{port}", style="green")
    app.run(host=host, port=port, debug=debug)


@cli.command()
@click.option('--role', '-r', 'roles', type=ROLE, multiple=True,
              help='Only show these roles (name or id); repeatable')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json', 'yaml']),
              default='table', show_default=True, help='Output format')
@pass_context
def features(ctx: Context, roles, output_format):
    """Show the feature registry and its permission table."""
    command = FeatureTableCommand(ctx)
    sys.exit(command.execute(roles=list(roles) or None, output_format=output_format))


@cli.command()
@click.option('--role', '-r', 'role_id', type=ROLE, required=True, help='Role name or id')
@pass_context
def nav(ctx: Context, role_id):
    """Show the sidebar, dashboard and default path of a role."""
    command = NavigationCommand(ctx)
    sys.exit(command.execute(role_id=role_id))


@cli.command()
@pass_context
def check(ctx: Context):
    """Validate the feature registry (warnings fail the check)."""
    command = RegistryCheckCommand(ctx)
    sys.exit(command.execute())


if __name__ == '__main__':
    cli()
