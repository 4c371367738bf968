"""drafts command: list reviews saved for later."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("drafts")
@click.pass_context
def drafts_cmd(ctx):
    """Show saved review drafts, most recent first."""
    from redraft_store.noop import NoOpStore

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None or isinstance(store, NoOpStore):
        raise click.UsageError("Draft saving is disabled. Set 'drafts: local' in .redraft.yml.")

    records = store.list_drafts()
    if not records:
        console.print("[yellow]No saved drafts.[/yellow]")
        return

    table = Table(title="Saved reviews", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=8)
    table.add_column("File")
    table.add_column("Size", justify="right", width=8)
    table.add_column("Saved At", width=20)

    for r in reversed(records):
        table.add_row(f"#{r.pr_number}", r.path, str(r.size), r.saved_at[:19].replace("T", " "))

    console.print(table)
