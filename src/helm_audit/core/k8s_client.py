"""Kubernetes API wrapper."""

from __future__ import annotations

from typing import Any

from kubernetes import client, config

from helm_audit.config.settings import settings


class K8sClient:
    """Thin wrapper around the Kubernetes Python client.

    Only the read-only calls needed to enumerate Helm release storage
    objects are exposed.
    """

    def __init__(self, context: str | None = None):
        self.context = context
        self._core_v1: client.CoreV1Api | None = None
        self._api_client: client.ApiClient | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        try:
            cfg = client.Configuration()
            config.load_kube_config(
                context=self.context,
                client_configuration=cfg,
            )
            # Prevent indefinite hangs on unreachable clusters
            cfg.retries = 1
            if not cfg.connection_pool_maxsize:
                cfg.connection_pool_maxsize = settings.max_workers
            self._api_client = client.ApiClient(configuration=cfg)
        except config.ConfigException:
            config.load_incluster_config()
            self._api_client = client.ApiClient()
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    @property
    def active_context_name(self) -> str:
        if self.context:
            return self.context
        try:
            _, ctx = config.list_kube_config_contexts()
            return ctx.get("name", "unknown") if ctx else "unknown"
        except (config.ConfigException, OSError):
            return "in-cluster"

    def list_helm_secrets(
        self,
        namespace: str | None = None,
        release_name: str | None = None,
        timeout: float | None = None,
    ) -> list[Any]:
        """List all Helm release secrets, optionally filtered by namespace and release name."""
        label = settings.helm_label_selector
        if release_name:
            label += f",name={release_name}"
        request_timeout = timeout or settings.request_timeout
        if namespace:
            result = self.core_v1.list_namespaced_secret(
                namespace=namespace,
                label_selector=label,
                field_selector=f"type={settings.secret_type}",
                _request_timeout=request_timeout,
            )
        else:
            result = self.core_v1.list_secret_for_all_namespaces(
                label_selector=label,
                field_selector=f"type={settings.secret_type}",
                _request_timeout=request_timeout,
            )
        return result.items

    def list_helm_configmaps(
        self,
        namespace: str | None = None,
        release_name: str | None = None,
        timeout: float | None = None,
    ) -> list[Any]:
        """List all Helm release ConfigMaps."""
        label = settings.helm_label_selector
        if release_name:
            label += f",name={release_name}"
        request_timeout = timeout or settings.request_timeout
        if namespace:
            result = self.core_v1.list_namespaced_config_map(
                namespace=namespace,
                label_selector=label,
                _request_timeout=request_timeout,
            )
        else:
            result = self.core_v1.list_config_map_for_all_namespaces(
                label_selector=label,
                _request_timeout=request_timeout,
            )
        return result.items
