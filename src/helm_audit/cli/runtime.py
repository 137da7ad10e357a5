"""Wiring shared by the commands: store, inventory, logging and error exits."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from helm_audit.config.settings import settings
from helm_audit.core.errors import AuditError
from helm_audit.core.inventory import ClusterInventory
from helm_audit.core.k8s_client import K8sClient
from helm_audit.core.snapshot_store import FileSnapshotStore

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)

EXIT_ERROR = 1
EXIT_DRIFT = 2


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )
    if not verbose:
        # urllib3 retries are noisy at WARNING on unreachable clusters
        logging.getLogger("urllib3").setLevel(logging.ERROR)


def open_store(path: Optional[Path]) -> FileSnapshotStore:
    return FileSnapshotStore(path or settings.snapshot_dir)


def build_inventory(context: Optional[str], namespaces: Optional[list[str]]) -> ClusterInventory:
    return ClusterInventory(K8sClient(context=context), namespaces=namespaces)


def check_output(output: str) -> None:
    from helm_audit.output.formatters import OUTPUT_FORMATS
    if output not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"must be one of: {', '.join(OUTPUT_FORMATS)}", param_hint="--output")


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Report AuditError on stderr and exit with code 1."""
    try:
        yield
    except AuditError as exc:
        logger.debug("Command failed", exc_info=True)
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=EXIT_ERROR) from exc
