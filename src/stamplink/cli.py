"""Command-line interface for stamplink.

This module provides commands for issuing security stamps and for
generating and checking validation tokens with the configured key.
"""

import sys
from typing import NoReturn

import click

from stamplink import __version__
from stamplink.core.config import get_settings
from stamplink.core.logging import configure_logging, get_logger
from stamplink.domain.exceptions import InputValidationError
from stamplink.domain.services.security_stamp import new_security_stamp
from stamplink.domain.services.token_provider import DataProtectorTokenProvider

purpose_option = click.option(
    "--purpose",
    required=True,
    help="Use case the token is for, e.g. ConfirmEmail",
)
resource_id_option = click.option(
    "--resource-id",
    required=True,
    help="Identifier of the resource the token is for",
)
security_stamp_option = click.option(
    "--security-stamp",
    required=True,
    help="Current security stamp of the resource",
)


@click.group()
@click.version_option(version=__version__, prog_name="stamplink")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides STAMPLINK_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """stamplink - short-lived, tamper-proof validation tokens."""
    settings = get_settings()
    if log_level is not None:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)
    ctx.obj = settings


@cli.command("new-stamp")
def new_stamp() -> None:
    """Print a new random security stamp."""
    click.echo(new_security_stamp())


@cli.command()
@purpose_option
@resource_id_option
@security_stamp_option
@click.pass_obj
def generate(settings, purpose: str, resource_id: str, security_stamp: str) -> None:
    """Generate a validation token."""
    provider = DataProtectorTokenProvider.from_settings(settings)
    try:
        token = provider.generate(purpose, resource_id, security_stamp)
    except InputValidationError as e:
        raise click.UsageError(str(e)) from e
    click.echo(token)


@cli.command()
@click.argument("token")
@purpose_option
@resource_id_option
@security_stamp_option
@click.pass_obj
def validate(settings, token: str, purpose: str, resource_id: str, security_stamp: str) -> None:
    """Check a validation token.

    Prints "valid" and exits 0, or prints "invalid" and exits 1.
    """
    provider = DataProtectorTokenProvider.from_settings(settings)
    is_valid = provider.validate(token, purpose, resource_id, security_stamp)

    get_logger(__name__).debug("Token checked from CLI", valid=is_valid)
    click.echo("valid" if is_valid else "invalid")
    if not is_valid:
        sys.exit(1)


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `stamplink` command is run
    or when using `python -m stamplink`.
    """
    cli()
