"""Shared CLI options."""

from __future__ import annotations

import typer

from helm_audit.config.settings import settings

OutputOption = typer.Option(settings.default_output, "--output", "-o", help="Output format: table, json, yaml, text")
NamespaceOption = typer.Option(
    None, "--namespace", "-n", help="Kubernetes namespace to inventory; repeatable (default: all)",
)
ContextOption = typer.Option(None, "--context", help="Kubernetes context name")
StoreOption = typer.Option(None, "--store", help="Snapshot directory (default: $HELM_AUDIT_HOME/snapshots)")
TimeoutOption = typer.Option(
    None, "--timeout", help="Abort the inventory pass after this many seconds", min=0.1,
)
FailOnDriftOption = typer.Option(False, "--fail-on-drift", help="Exit with code 2 when drift is found")
ShowUnchangedOption = typer.Option(False, "--show-unchanged", help="Include unchanged releases in the output")
