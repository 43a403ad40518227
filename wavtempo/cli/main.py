# wavtempo/cli/main.py

"""
Main entry point for the wavtempo CLI application.
Uses Click for command-line interface handling.
"""

import logging

import click

from wavtempo.version import __version__
from .base_cmd import ConfigGroup, verbose_option, quiet_option
from .info_cmd import info_cmd
from .stretch_cmd import stretch_cmd

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


@click.group(context_settings=CONTEXT_SETTINGS, cls=ConfigGroup)
@click.version_option(__version__, '-V', '--version', package_name='wavtempo', prog_name='wavtempo')
@verbose_option
@quiet_option
@click.pass_context
def main_cli(ctx, verbose: int, quiet: bool):
    """
    wavtempo: adjust the tempo of mono 16 kHz 16-bit WAV files
    without altering pitch.

    Configuration is loaded from:
    Defaults -> ./wavtempo.toml -> ~/.config/wavtempo/wavtempo.toml -> Env Vars

    Use -v for verbose output, -vv for debug output, -q for quiet mode.
    """
    logger.debug(f"wavtempo CLI group invoked with subcommand '{ctx.invoked_subcommand}'.")


main_cli.add_command(stretch_cmd)
main_cli.add_command(info_cmd)

cli = main_cli

if __name__ == "__main__":
    cli()
