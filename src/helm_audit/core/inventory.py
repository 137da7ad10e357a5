"""Release inventory: the boundary between the audit core and the live cluster."""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Iterable, Protocol

from helm_audit.config.settings import settings
from helm_audit.core.errors import InventoryError, InventoryTimeoutError
from helm_audit.core.helm_decoder import decode_configmap, decode_secret, quick_metadata_from_labels
from helm_audit.core.k8s_client import K8sClient
from helm_audit.models.release import ReleaseRecord

logger = logging.getLogger(__name__)

ALL_NAMESPACES = "*"


class ReleaseInventory(Protocol):
    """Anything that can list the current release set of a cluster."""

    def fetch_all(self, timeout: float | None) -> set[ReleaseRecord]:
        ...


class ClusterInventory:
    """Reads Helm's own release storage objects through the Kubernetes API.

    With several namespaces the queries run concurrently. They are read-only
    and independent, and their results are merged only once every query has
    succeeded: any failure or an exceeded deadline aborts the whole pass.
    """

    def __init__(
        self,
        k8s: K8sClient,
        namespaces: Iterable[str] | None = None,
        storage_driver: str | None = None,
        max_workers: int | None = None,
    ):
        self.k8s = k8s
        self.namespaces = sorted(set(namespaces or []))
        self.storage_driver = storage_driver or settings.storage_driver
        self.max_workers = max_workers or settings.max_workers

    @property
    def context(self) -> str:
        return self.k8s.active_context_name

    def fetch_all(self, timeout: float | None = None) -> set[ReleaseRecord]:
        scopes: list[str | None] = list(self.namespaces) or [None]
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self.max_workers, len(scopes))),
            thread_name_prefix="helm-audit-inventory",
        )
        futures = {
            executor.submit(self._fetch_scope, ns, timeout): ns or ALL_NAMESPACES
            for ns in scopes
        }
        try:
            done, pending = wait(futures, timeout=timeout)
            if pending:
                raise InventoryTimeoutError(timeout or 0.0, [futures[f] for f in pending])
            failures = {
                futures[f]: f.exception() for f in done if f.exception() is not None
            }
            if failures:
                raise InventoryError("Release inventory failed", failures)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        records: set[ReleaseRecord] = set()
        for future in done:
            records.update(future.result())
        logger.debug("Inventory collected %d releases across %d scope(s)", len(records), len(scopes))
        return records

    def _fetch_scope(self, namespace: str | None, timeout: float | None) -> list[ReleaseRecord]:
        request_timeout = settings.request_timeout
        if timeout is not None:
            request_timeout = min(request_timeout, timeout)

        if self.storage_driver == "configmaps":
            objects = self.k8s.list_helm_configmaps(namespace=namespace, timeout=request_timeout)
            decode_fn = decode_configmap
        else:
            objects = self.k8s.list_helm_secrets(namespace=namespace, timeout=request_timeout)
            decode_fn = decode_secret

        logger.debug("Scope %s: %d release objects", namespace or ALL_NAMESPACES, len(objects))
        return [decode_fn(obj) for obj in latest_revisions(objects)]


def latest_revisions(objects: Iterable[Any]) -> list[Any]:
    """Keep only the highest-revision storage object of each release."""
    # Group by (release_name, namespace) and keep only the latest revision
    grouped: dict[tuple[str, str], list] = defaultdict(list)
    for obj in objects:
        meta = quick_metadata_from_labels(obj)
        key = (meta["namespace"], meta["name"])
        grouped[key].append((meta["version"], obj))

    latest = []
    for key in sorted(grouped):
        versions = grouped[key]
        versions.sort(key=lambda x: x[0], reverse=True)
        latest.append(versions[0][1])
    return latest


class StaticInventory:
    """Serves a fixed release set; used for declared states and tests."""

    def __init__(self, records: Iterable[ReleaseRecord], context: str = ""):
        self.records = list(records)
        self.context = context

    def fetch_all(self, timeout: float | None = None) -> set[ReleaseRecord]:
        return set(self.records)
