"""
Click-based CLI for enroll.

This module provides the main Click command group and serves as the
entry point for the enroll CLI.

Usage:
    from enroll.cli import cli
    cli()  # Invokes the CLI
"""

from __future__ import annotations

import click

from ..core.exceptions import EnrollException
from .context import EnrollContext, to_click_exception

# Version is loaded from package metadata
try:
    from importlib.metadata import version

    __version__ = version("enroll-cli")
except Exception:
    __version__ = "0.1.0"


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="enroll")
@click.option("--verbose", "-v", is_flag=True, help="Log each step to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """enroll - register a license server with the account service

    \b
    Usage:
        enroll register SERVER_URL USERNAME PASSWORD SERVER_NAME
    """
    ctx.ensure_object(dict)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)
    else:
        try:
            ctx.obj = EnrollContext.create(verbose=verbose)
        except EnrollException as e:
            raise to_click_exception(e) from e


def register_commands() -> None:
    """Register all CLI commands with the main group."""
    from .commands import COMMANDS

    for cmd in COMMANDS:
        cli.add_command(cmd)


# Register commands at module load time
register_commands()


__all__ = [
    "EnrollContext",
    "__version__",
    "cli",
    "register_commands",
]
