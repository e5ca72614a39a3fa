"""
Command-line interface for clicktoplay.
"""

import logging
import sys
from pathlib import Path

import click

from clicktoplay import __version__
from clicktoplay.cli.scenario import scenario_group
from clicktoplay.cli.utils import format_dict, handle_error, pass_context
from clicktoplay.core.config import Environment, LogLevel
from clicktoplay.core.context import Context

logger = logging.getLogger(__name__)


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(version=__version__, prog_name="clicktoplay")
@click.option(
    '--debug/--no-debug',
    default=False,
    help='Enable debug mode with verbose logging.',
)
@click.option(
    '--env', '-e',
    type=click.Choice(['dev', 'test', 'prod'], case_sensitive=False),
    default='dev',
    help='Environment to run in.',
)
@click.option(
    '--config', '-c',
    type=click.Path(exists=False),
    help='Path to configuration file.',
)
@click.pass_context
def cli(ctx, debug, env, config):
    """clicktoplay - click-to-play plugin activation tracker.

    Runs scripted scenarios against a model of the click-to-play policy.
    """
    if not ctx.obj or not ctx.obj.is_initialized:
        context = Context()

        overrides = {}
        if debug:
            overrides["logging"] = {"level": LogLevel.DEBUG}

        try:
            context.initialize(
                config_file=Path(config) if config else None,
                env=Environment(env.lower()),
                **overrides
            )
        except Exception as e:
            logger.error(f"Failed to initialize context: {e}")
            click.echo(f"Initialization error: {str(e)}", err=True)
            sys.exit(1)

        ctx.obj = context


cli.add_command(scenario_group)


@cli.command()
@pass_context
@handle_error
def config(ctx):
    """Show current configuration."""
    settings_dict = ctx.settings.model_dump(mode="json")

    click.echo("\nCurrent Configuration:")
    click.echo("-" * 50)

    for line in format_dict(settings_dict):
        click.echo(line)


def main():
    """Entry point for the CLI."""
    cli(prog_name="clicktoplay")


if __name__ == "__main__":
    main()
