"""haudit show <snapshot> - Show the releases recorded in a snapshot."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from helm_audit.cli import runtime
from helm_audit.cli.options import OutputOption, StoreOption
from helm_audit.output.formatters import output_snapshot

app = typer.Typer()


@app.callback(invoke_without_command=True)
def show(
    ref: str = typer.Argument("latest", help="Snapshot id, 'latest' or 'previous'"),
    output: str = OutputOption,
    store_dir: Optional[Path] = StoreOption,
) -> None:
    """Show the releases recorded in a stored snapshot."""
    runtime.check_output(output)
    store = runtime.open_store(store_dir)
    with runtime.exit_on_error():
        snapshot_id = store.resolve(ref)
        snap = store.load(snapshot_id)
    output_snapshot(snap, output, title=f"Snapshot {snapshot_id} ({snap.taken_at:%Y-%m-%d %H:%M:%S})")
