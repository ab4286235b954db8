"""
Native Click implementation of the register command.

Usage: enroll register SERVER_URL USERNAME PASSWORD SERVER_NAME

Registers a license server with the account service.
"""

import click
from pydantic import ValidationError

from ...core.exceptions import EnrollException
from ...core.interfaces.fetcher import IPageFetcher
from ...core.interfaces.logger import ILogger
from ...core.models.registration import Credentials, ServerIdentity
from ...services.registration import RegistrationFlow
from ..context import EnrollContext, to_click_exception


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


@click.command("register")
@click.argument("server_url")
@click.argument("username")
@click.argument("password")
@click.argument("server_name")
@click.pass_obj
def register(
    ctx: EnrollContext,
    server_url: str,
    username: str,
    password: str,
    server_name: str,
) -> None:
    """Register a license server with the account service.

    Waits for the license server at SERVER_URL to come up, signs in to the
    account service as USERNAME, picks SERVER_NAME from the account's server
    list and confirms the registration.

    \b
    Examples:

        enroll register http://localhost:8111 me@example.com s3cret "Build farm"
    """
    try:
        credentials = Credentials(username=username, password=password)
        server = ServerIdentity(server_url=server_url, server_name=server_name)
    except ValidationError as e:
        raise click.UsageError(_format_validation_error(e)) from e

    flow = RegistrationFlow(
        fetcher=ctx.container.resolve(IPageFetcher),  # type: ignore[type-abstract]
        logger=ctx.container.resolve(ILogger),  # type: ignore[type-abstract]
    )

    try:
        state = flow.run(credentials, server)
    except EnrollException as e:
        raise to_click_exception(e) from e

    target = state.target
    click.echo(f"Registered license server: {target.server_url}")
    click.echo(f"  Server UID: {target.server_uid}")
    click.echo(f"  Customer:   {target.customer_id}")
    click.echo(f"  Confirmed:  {state.callback_url}")
