"""haudit snapshot - Capture and store the current release inventory."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from helm_audit.cli import runtime
from helm_audit.cli.options import ContextOption, NamespaceOption, OutputOption, StoreOption, TimeoutOption
from helm_audit.config.settings import settings
from helm_audit.core.audit import capture_snapshot
from helm_audit.output.formatters import output_snapshot

app = typer.Typer()
console = Console()


@app.callback(invoke_without_command=True)
def snapshot(
    output: str = OutputOption,
    namespace: Optional[List[str]] = NamespaceOption,
    context: Optional[str] = ContextOption,
    store_dir: Optional[Path] = StoreOption,
    timeout: Optional[float] = TimeoutOption,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the new snapshot id"),
) -> None:
    """Inventory every Helm release and save the result as a snapshot."""
    runtime.check_output(output)
    store = runtime.open_store(store_dir)
    with runtime.exit_on_error():
        inventory = runtime.build_inventory(context, namespace)
        with console.status("[bold cyan]Collecting Helm releases…"):
            snap = capture_snapshot(
                inventory,
                timeout if timeout is not None else settings.fetch_timeout,
                context=inventory.context,
            )
        ref = store.save(snap)

    if quiet:
        typer.echo(str(ref.id))
        return
    output_snapshot(snap, output, title=f"Snapshot {ref.id}")
    if output == "table":
        console.print(f"\n[green]Saved snapshot {ref.id}[/green] ({ref.release_count} releases) to {store.directory}")
