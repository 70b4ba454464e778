"""CLI interface for autocheck"""

import click
import json
import logging
import sys

from autocheck import __version__
from autocheck.config import get_config
from autocheck.errors import ConfigurationError
from autocheck.grader import PACKAGE_LOGGER, Grader

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(version=__version__)
@click.argument("config", required=False, type=click.Path())
@click.option("--debug", is_flag=True, default=False, help="Log every parsing and pipeline step")
@click.option("--show-config", is_flag=True, default=False, help="Print the default settings and exit")
def main(config, debug, show_config):
    """autocheck - grade C++ assignments from a test configuration

    CONFIG is the configuration file listing compile rules, outputs and testcases.
    """
    if show_config:
        click.echo(json.dumps(get_config(), indent=2))
        return

    if not config:
        click.echo(main.get_help(click.get_current_context()))
        click.echo("\nFormat: autocheck [config filename]")
        sys.exit(1)

    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO)
    if debug:
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)

    click.echo("Welcome to autocheck!")
    try:
        with Grader() as grader:
            grader.load(config)
    except ConfigurationError as e:
        click.echo(f"[ERROR] {e}")
        sys.exit(1)

    click.echo(f"\n[OK] Ran {len(grader.tests)} testcases: "
               f"{grader.earned_points:g} of {grader.total_points:g} points ({grader.percent}%)")


if __name__ == "__main__":
    main()
