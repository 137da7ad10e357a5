"""haudit prune - Apply a retention policy to stored snapshots."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer

from helm_audit.cli import runtime
from helm_audit.cli.options import StoreOption
from helm_audit.models.snapshot import RetentionPolicy

app = typer.Typer()


@app.callback(invoke_without_command=True)
def prune(
    keep_last: Optional[int] = typer.Option(None, "--keep-last", min=0, help="Keep only the newest N snapshots"),
    max_age_days: Optional[float] = typer.Option(
        None, "--max-age-days", min=0, help="Delete snapshots older than this many days",
    ),
    store_dir: Optional[Path] = StoreOption,
) -> None:
    """Delete stored snapshots rejected by the retention policy."""
    if keep_last is None and max_age_days is None:
        raise typer.BadParameter("give --keep-last and/or --max-age-days")
    policy = RetentionPolicy(
        keep_last=keep_last,
        max_age=timedelta(days=max_age_days) if max_age_days is not None else None,
    )
    store = runtime.open_store(store_dir)
    with runtime.exit_on_error():
        removed = store.prune(policy)

    if removed:
        typer.echo(f"Pruned {len(removed)} snapshot(s): {', '.join(str(r.id) for r in removed)}")
    else:
        typer.echo("Nothing to prune.")
