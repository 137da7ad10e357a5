"""Application configuration and defaults."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path


def _default_snapshot_dir() -> Path:
    """Return the default snapshot directory for the current platform.

    Checks HELM_AUDIT_HOME first, then the platform data directory,
    mirroring how helm resolves its own cache and config homes.
    """
    home = os.environ.get("HELM_AUDIT_HOME", "")
    if home:
        return Path(home) / "snapshots"
    system = platform.system()
    if system == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "helm-audit" / "snapshots"
        return Path.home() / "AppData" / "Roaming" / "helm-audit" / "snapshots"
    # Linux / macOS
    xdg = os.environ.get("XDG_DATA_HOME", "")
    if xdg:
        return Path(xdg) / "helm-audit" / "snapshots"
    return Path.home() / ".local" / "share" / "helm-audit" / "snapshots"


def _default_storage_driver() -> str:
    driver = os.environ.get("HELM_DRIVER", "").lower()
    if driver in ("configmap", "configmaps"):
        return "configmaps"
    return "secrets"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


@dataclass
class Settings:
    snapshot_dir: Path = field(default_factory=_default_snapshot_dir)
    storage_driver: str = field(default_factory=_default_storage_driver)  # "secrets" or "configmaps"
    default_output: str = "table"
    helm_label_selector: str = "owner=helm"
    secret_type: str = "helm.sh/release.v1"
    fetch_timeout: float = field(default_factory=lambda: _env_float("HELM_AUDIT_TIMEOUT", 60.0))
    request_timeout: float = 30.0
    max_workers: int = 4
    # Report same-revision values changes as values-changed instead of chart-changed
    distinguish_values: bool = field(
        default_factory=lambda: _env_bool("HELM_AUDIT_DISTINGUISH_VALUES", True),
    )


# Global singleton
settings = Settings()
