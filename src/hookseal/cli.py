"""Hookseal CLI - sign and verify webhook payloads from the command line."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click
import structlog
from rich.console import Console
from rich.table import Table

from hookseal import __version__
from hookseal.core.config import get_settings
from hookseal.webhooks import (
    VerifierType,
    VerifyOptions,
    WebhookError,
    sign_payload,
    verify_signature,
)

console = Console()

VERIFIER_CHOICES = [t.value for t in VerifierType] + [t.tag for t in VerifierType]


def _configure_logging(log_level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
    )


def _load_payload(payload: str, as_json: bool) -> Any:
    if not as_json:
        return payload
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"PAYLOAD is not valid JSON: {e}", param_hint="PAYLOAD") from e


def _secret_or_default(secret: str | None) -> str:
    return secret if secret is not None else get_settings().secret


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    help="Log level (default: warning)",
)
def main(verbose: bool, log_level: str):
    """Hookseal - sign and verify webhook signatures.

    Secrets default to the WEBHOOK_SECRET environment variable.
    """
    _configure_logging("debug" if verbose else log_level)


@main.command()
@click.argument("verifier_type", metavar="TYPE", type=click.Choice(VERIFIER_CHOICES))
@click.argument("payload")
@click.option("--secret", "-s", default=None, help="Shared secret (default: $WEBHOOK_SECRET)")
@click.option("--timestamp", type=int, default=None, help="Timestamp in epoch ms (timestampScheme)")
@click.option("--issuer", default=None, help="JWT issuer claim")
@click.option("--json", "as_json", is_flag=True, help="Parse PAYLOAD as JSON before signing")
def sign(
    verifier_type: str,
    payload: str,
    secret: str | None,
    timestamp: int | None,
    issuer: str | None,
    as_json: bool,
):
    """Sign PAYLOAD and print the signature."""
    options = VerifyOptions.from_settings(get_settings(), timestamp=timestamp, issuer=issuer)
    try:
        signature = sign_payload(
            verifier_type,
            payload=_load_payload(payload, as_json),
            secret=_secret_or_default(secret),
            options=options,
        )
    except WebhookError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    click.echo(signature)


@main.command()
@click.argument("verifier_type", metavar="TYPE", type=click.Choice(VERIFIER_CHOICES))
@click.argument("payload")
@click.argument("signature")
@click.option("--secret", "-s", default=None, help="Shared secret (default: $WEBHOOK_SECRET)")
@click.option("--tolerance", type=int, default=None, help="Allowed timestamp drift in ms")
@click.option("--issuer", default=None, help="Required JWT issuer")
@click.option("--json", "as_json", is_flag=True, help="Parse PAYLOAD as JSON before verifying")
def verify(
    verifier_type: str,
    payload: str,
    signature: str,
    secret: str | None,
    tolerance: int | None,
    issuer: str | None,
    as_json: bool,
):
    """Verify SIGNATURE for PAYLOAD. Exits non-zero on failure."""
    overrides: dict[str, Any] = {"issuer": issuer}
    if tolerance is not None:
        overrides["tolerance"] = tolerance
    options = VerifyOptions.from_settings(get_settings(), **overrides)

    try:
        verify_signature(
            verifier_type,
            payload=_load_payload(payload, as_json),
            signature=signature,
            secret=_secret_or_default(secret),
            options=options,
        )
    except WebhookError as e:
        console.print(f"[red]Verification failed:[/red] {e}")
        sys.exit(1)

    console.print("[green]Signature verified[/green]")


@main.command()
def types():
    """List supported verifier types."""
    table = Table(title="Verifier Types")
    table.add_column("Name", style="cyan")
    table.add_column("Tag")
    for verifier_type in VerifierType:
        table.add_row(verifier_type.value, verifier_type.tag)
    console.print(table)


@main.command()
def version():
    """Show version information."""
    console.print(f"[bold]Version:[/bold] {__version__}")
    console.print(f"[bold]Python:[/bold] {sys.version}")


if __name__ == "__main__":
    main()
