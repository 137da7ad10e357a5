"""Base64 / gzip encode-decode helpers for Helm release data."""

from __future__ import annotations

import base64
import copy
import gzip
import hashlib
import json
from typing import Any


def decode_release_secret(data: bytes) -> dict:
    """Decode a Helm release from a Kubernetes Secret.

    Pipeline: base64 → gzip → utf-8 → json.
    Some kubernetes client versions do not auto-decode the outer base64
    layer, resulting in a double-encoded payload.  We detect this by
    checking for the gzip magic number after the first decode.
    """
    decoded = base64.b64decode(data)
    if decoded[:2] != b'\x1f\x8b':
        decoded = base64.b64decode(decoded)
    decompressed = gzip.decompress(decoded)
    return json.loads(decompressed.decode("utf-8"))


def decode_release_configmap(data: str) -> dict:
    """Decode a Helm release from a ConfigMap.

    ConfigMap values are plain strings, so there is an extra base64 layer.

    Pipeline: base64 → base64 → gzip → utf-8 → json.
    """
    first = base64.b64decode(data.encode("utf-8"))
    second = base64.b64decode(first)
    decompressed = gzip.decompress(second)
    return json.loads(decompressed.decode("utf-8"))


def encode_release(payload: dict) -> str:
    """Encode a release dict back to base64+gzip (for tests)."""
    raw = json.dumps(payload).encode("utf-8")
    compressed = gzip.compress(raw)
    return base64.b64encode(compressed).decode("ascii")


def merge_values(defaults: dict | None, overrides: dict | None) -> dict:
    """Deep-merge user-supplied values over chart defaults, as Helm does.

    Nested mappings merge key by key; any other override replaces the
    default outright.  A ``None`` override deletes the default key.
    """
    merged: dict[str, Any] = copy.deepcopy(defaults) if defaults else {}
    for key, value in (overrides or {}).items():
        if value is None:
            merged.pop(key, None)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_values(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def values_digest(values: dict | None) -> str:
    """SHA-256 of the canonical JSON form of a values mapping."""
    canonical = json.dumps(values or {}, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def release_values_digest(release: dict) -> str:
    """Digest of the fully-resolved values of a decoded Helm release."""
    chart_defaults = (release.get("chart") or {}).get("values") or {}
    return values_digest(merge_values(chart_defaults, release.get("config") or {}))
