# wavtempo/cli/base_cmd.py

"""
Base setup for CLI commands: configuration loading and logging initialization.
"""

import logging
import sys

import click

from wavtempo.config import load_configuration, WavTempoConfig
from wavtempo.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


class ConfigGroup(click.Group):
    """
    A custom Click Group that loads configuration and sets up logging
    before invoking the group or its subcommands.
    Passes the config via the context object (ctx.obj['config']).
    """
    def invoke(self, ctx: click.Context):
        if ctx.obj is None:
            ctx.obj = {}

        try:
            if 'config' not in ctx.obj:
                ctx.obj['config'] = load_configuration()
            config: WavTempoConfig = ctx.obj['config']

            verbosity = 0
            if ctx.params.get('quiet', False):
                verbosity = -1
            elif ctx.params.get('verbose', 0) > 0:
                verbosity = ctx.params['verbose']
            setup_logging(config, verbosity)
            logger.debug("Logging setup complete in ConfigGroup.")
        except Exception as e:
            # Only setup errors land here; command errors propagate to Click
            logging.getLogger("wavtempo.error").critical(f"Critical error during CLI setup: {e!r}", exc_info=True)
            print(f"CRITICAL SETUP ERROR: {e!r}", file=sys.stderr)
            ctx.exit(1)

        return super().invoke(ctx)


# --- Common CLI Options ---
verbose_option = click.option(
    '-v', '--verbose',
    count=True,
    help="Increase verbosity level (-v for INFO, -vv for DEBUG)."
)
quiet_option = click.option(
    '-q', '--quiet',
    is_flag=True,
    default=False,
    help="Suppress all console output except critical errors."
)
