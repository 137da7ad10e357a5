"""Decode Helm v3 release data from Kubernetes Secrets or ConfigMaps."""

from __future__ import annotations

import binascii
import json
import logging
import zlib
from typing import Any

from helm_audit.core.errors import InventoryError
from helm_audit.models.release import ReleaseRecord
from helm_audit.utils.encoding import (
    decode_release_configmap,
    decode_release_secret,
    release_values_digest,
)

logger = logging.getLogger(__name__)

# gzip.BadGzipFile subclasses OSError; EOFError covers truncated payloads
_DECODE_ERRORS = (binascii.Error, OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError)


def _label_metadata(obj: Any) -> dict[str, str]:
    """Extract Helm labels from a Secret/ConfigMap object."""
    labels = {}
    if hasattr(obj, "metadata") and obj.metadata and obj.metadata.labels:
        labels = dict(obj.metadata.labels)
    return labels


def _namespace(obj: Any) -> str:
    if hasattr(obj, "metadata") and obj.metadata:
        return obj.metadata.namespace or ""
    return ""


def _to_record(release_dict: dict, obj: Any, kind: str) -> ReleaseRecord:
    if not isinstance(release_dict, dict):
        raise InventoryError(f"{kind} {_safe_name(obj)} does not hold a release document")
    return ReleaseRecord.from_helm_payload(
        release_dict,
        values_digest=release_values_digest(release_dict),
        namespace=_namespace(obj),
    )


def decode_secret(secret: Any) -> ReleaseRecord:
    """Decode a single Kubernetes Secret into a ReleaseRecord."""
    data = secret.data
    if not data or "release" not in data:
        raise InventoryError(f"Secret {_safe_name(secret)} has no release payload")
    raw = data["release"]
    # kubernetes client base64-decodes Secret data, giving us bytes
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    try:
        release_dict = decode_release_secret(raw)
    except _DECODE_ERRORS as exc:
        logger.debug("Failed to decode secret %s", _safe_name(secret), exc_info=True)
        raise InventoryError(f"Failed to decode Secret {_safe_name(secret)}: {exc}") from exc
    return _to_record(release_dict, secret, "Secret")


def decode_configmap(cm: Any) -> ReleaseRecord:
    """Decode a single Kubernetes ConfigMap into a ReleaseRecord."""
    data = cm.data
    if not data or "release" not in data:
        raise InventoryError(f"ConfigMap {_safe_name(cm)} has no release payload")
    try:
        release_dict = decode_release_configmap(data["release"])
    except _DECODE_ERRORS as exc:
        logger.debug("Failed to decode configmap %s", _safe_name(cm), exc_info=True)
        raise InventoryError(f"Failed to decode ConfigMap {_safe_name(cm)}: {exc}") from exc
    return _to_record(release_dict, cm, "ConfigMap")


def quick_metadata_from_labels(obj: Any) -> dict:
    """Extract quick metadata from labels without decoding the release payload.

    Returns a dict with keys: name, namespace, status, version (revision).
    """
    labels = _label_metadata(obj)
    try:
        version = int(labels.get("version", "0"))
    except ValueError:
        raise InventoryError(
            f"{_safe_name(obj)} carries a non-numeric version label {labels.get('version')!r}"
        ) from None
    return {
        "name": labels.get("name", ""),
        "namespace": _namespace(obj),
        "status": labels.get("status", ""),
        "version": version,
    }


def _safe_name(obj: Any) -> str:
    if hasattr(obj, "metadata") and obj.metadata:
        name = obj.metadata.name or "<unknown>"
        namespace = obj.metadata.namespace or ""
        return f"{namespace}/{name}" if namespace else name
    return "<unknown>"
