"""haudit list - List stored snapshots."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from helm_audit.cli import runtime
from helm_audit.cli.options import OutputOption, StoreOption
from helm_audit.output.formatters import output_snapshots

app = typer.Typer()


@app.callback(invoke_without_command=True)
def list_snapshots(
    output: str = OutputOption,
    store_dir: Optional[Path] = StoreOption,
) -> None:
    """List stored snapshots, newest last."""
    runtime.check_output(output)
    store = runtime.open_store(store_dir)
    with runtime.exit_on_error():
        refs = store.list()
    output_snapshots(refs, output)
