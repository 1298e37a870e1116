"""
Webnotes CLI.

Primary entry point. Global options control logging and whether the remote
store may be used; subcommands map one-to-one onto storage operations.

Usage:
    webnotes --help
    webnotes notes list
    webnotes --offline folders create "Work"
    webnotes --debug sync migrate
"""

import click
import structlog

from webnotes import __version__
from webnotes.cli.commands import folders, notes, settings, sync
from webnotes.cli.context import CliContext
from webnotes.core.config import validate_project_root
from webnotes.core.logging import get_logger, setup_logging


@click.group()
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--offline",
    is_flag=True,
    help="Do not contact the remote service; use local storage only.",
)
@click.version_option(__version__, prog_name="webnotes")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool, offline: bool) -> None:
    """
    Webnotes CLI.

    Notes are kept on this machine until you sign in. Once signed in and
    online they are stored in your account, and local notes are migrated
    there automatically.

    \b
    Examples:
        webnotes notes create --title "Groceries" --content "milk"
        webnotes notes list
        webnotes notes pin <id>
        webnotes folders create Work
        webnotes settings set --theme light
        webnotes sync status
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    obj = ctx.ensure_object(CliContext)
    obj.offline = obj.offline or offline

    logger.debug(
        "CLI invoked",
        extra={"command": ctx.invoked_subcommand, "offline": obj.offline, "log_level": log_level},
    )


cli.add_command(notes)
cli.add_command(folders)
cli.add_command(settings)
cli.add_command(sync)


def main() -> None:
    cli(obj=CliContext())


if __name__ == "__main__":
    main()
