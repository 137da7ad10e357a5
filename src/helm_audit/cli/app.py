"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import typer

from helm_audit.cli.runtime import configure_logging

app = typer.Typer(
    name="haudit",
    help="Helm Audit - Snapshot Helm releases and detect drift between snapshots.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose)


def _register_commands() -> None:
    from helm_audit.cli.commands.snapshot_cmd import app as snapshot_app
    from helm_audit.cli.commands.list_cmd import app as list_app
    from helm_audit.cli.commands.show_cmd import app as show_app
    from helm_audit.cli.commands.diff_cmd import app as diff_app
    from helm_audit.cli.commands.audit_cmd import app as audit_app
    from helm_audit.cli.commands.prune_cmd import app as prune_app

    app.add_typer(snapshot_app, name="snapshot", help="Capture and store a release snapshot")
    app.add_typer(list_app, name="list", help="List stored snapshots")
    app.add_typer(show_app, name="show", help="Show the releases in a snapshot")
    app.add_typer(diff_app, name="diff", help="Compare two snapshots")
    app.add_typer(audit_app, name="audit", help="Snapshot the cluster and report drift")
    app.add_typer(prune_app, name="prune", help="Apply a retention policy to snapshots")


_register_commands()


def main() -> None:
    app()
