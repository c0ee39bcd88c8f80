#!/usr/bin/env python3
"""
journeykit - multi-step form journeys
Main entry point for the CLI
"""

import click

from .journey import journey
from ..core.version import get_version

@click.group()
@click.pass_context
def cli(ctx):
    """journeykit - Run and check multi-step form journeys"""
    ctx.ensure_object(dict)

@cli.command()
def version():
    """Show version information"""
    version_str = get_version()
    click.echo(f"journeykit version {version_str}")

# Add subcommand groups
cli.add_command(journey)

if __name__ == '__main__':
    cli()
