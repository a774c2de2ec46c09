"""Share-token commands (export/import the planner bundle as a copyable string)."""

from __future__ import annotations

import typer

from clashplan.cli._state import session
from clashplan.cli._utils import console, fail
from clashplan.storage import SHARE_KEYS, decode_token, encode_token, validate_shared_values

share_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Share planner state.")


@share_app.command("export")
def export_token(
    ctx: typer.Context,
    compress: bool = typer.Option(True, "--compress/--no-compress", help="Deflate before encoding."),
) -> None:
    """Print a token carrying the current queue, builders and schedule."""
    store = session(ctx).store
    if all(store.get(key) is None for key in SHARE_KEYS):
        fail("Nothing to share yet; add builders or tasks first")
    typer.echo(encode_token(store, SHARE_KEYS, compress=compress))


@share_app.command("import")
def import_token(
    ctx: typer.Context,
    token: str = typer.Argument(..., help="Token produced by 'share export'."),
) -> None:
    """Replace the local planner bundle with the one carried by ``token``."""
    current = session(ctx)
    if not decode_token(
        current.store, token, validate=lambda values: validate_shared_values(values, current.now)
    ):
        fail("Share token could not be read; local data was left unchanged")
    console.print("[green]Planner state imported.[/green]")
