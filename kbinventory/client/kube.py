"""ResourceClient backed by kubernetes-asyncio.

Resource types outside the core group are addressed through
CustomObjectsApi, which builds ``/apis/{group}/{version}/...`` paths and
therefore works for apps/v1, snapshot.storage.k8s.io and every CRD alike.
The core group lives under ``/api/v1`` instead, so those kinds dispatch to
CoreV1Api and the typed models are serialised back into plain documents.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]
from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kbinventory.client.base import FINALIZER_REMOVAL_PATCH
from kbinventory.errors import (
    ClientRequestError,
    ClusterConfigError,
    ResourceNotFoundError,
    UnsupportedResourceError,
)
from kbinventory.models.resources import ObjectRecord, ResourceType
from kbinventory.observability.logging import get_logger

_log = get_logger("client.kube")

# plural -> (CoreV1Api method suffix, namespaced)
_CORE_KINDS: dict[str, tuple[str, bool]] = {
    "configmaps": ("config_map", True),
    "namespaces": ("namespace", False),
    "persistentvolumeclaims": ("persistent_volume_claim", True),
    "persistentvolumes": ("persistent_volume", False),
    "pods": ("pod", True),
    "secrets": ("secret", True),
    "serviceaccounts": ("service_account", True),
    "services": ("service", True),
}


class KubeResourceClient:
    """ResourceClient implementation over a kubernetes-asyncio ApiClient."""

    def __init__(self, api_client: k8s_client.ApiClient, request_timeout: float = 30) -> None:
        self._api_client = api_client
        self._custom = k8s_client.CustomObjectsApi(api_client)
        self._core = k8s_client.CoreV1Api(api_client)
        self._request_timeout = request_timeout

    @classmethod
    @asynccontextmanager
    async def connect(
        cls,
        kubeconfig: str = "",
        context: str = "",
        request_timeout: float = 30,
    ) -> AsyncIterator[KubeResourceClient]:
        """Load cluster credentials and yield a client; the connection pool is closed on exit.

        An explicit kubeconfig or context wins; otherwise the in-cluster
        service account is tried before the default kubeconfig.

        Raises ClusterConfigError when no credentials can be loaded.
        """
        try:
            await _load_credentials(kubeconfig, context)
        except (k8s_config.ConfigException, OSError) as exc:
            _log.error("k8s client configuration failed", kubeconfig=kubeconfig, context=context, error=str(exc))
            raise ClusterConfigError(f"cannot load cluster credentials: {exc}") from exc

        async with k8s_client.ApiClient() as api_client:
            yield cls(api_client, request_timeout=request_timeout)

    # ------------------------------------------------------------------
    # ResourceClient
    # ------------------------------------------------------------------

    async def list(
        self,
        rtype: ResourceType,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[ObjectRecord]:
        kwargs: dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector

        if rtype.is_core:
            suffix, namespaced = self._core_kind(rtype)
            if not namespaced:
                call = getattr(self._core, f"list_{suffix}")
                result = await self._call(rtype, None, None, call, **kwargs)
            elif namespace:
                call = getattr(self._core, f"list_namespaced_{suffix}")
                result = await self._call(rtype, None, namespace, call, namespace, **kwargs)
            else:
                call = getattr(self._core, f"list_{suffix}_for_all_namespaces")
                result = await self._call(rtype, None, None, call, **kwargs)
            document = self._api_client.sanitize_for_serialization(result)
        elif namespace:
            document = await self._call(
                rtype,
                None,
                namespace,
                self._custom.list_namespaced_custom_object,
                rtype.group,
                rtype.version,
                namespace,
                rtype.resource,
                **kwargs,
            )
        else:
            document = await self._call(
                rtype,
                None,
                None,
                self._custom.list_cluster_custom_object,
                rtype.group,
                rtype.version,
                rtype.resource,
                **kwargs,
            )

        return [ObjectRecord.from_dict(item) for item in (document or {}).get("items") or []]

    async def get(self, rtype: ResourceType, name: str, namespace: str | None = None) -> ObjectRecord:
        if rtype.is_core:
            suffix, namespaced = self._core_kind(rtype)
            if namespaced:
                call = getattr(self._core, f"read_namespaced_{suffix}")
                result = await self._call(rtype, name, namespace, call, name, self._require_namespace(rtype, namespace))
            else:
                call = getattr(self._core, f"read_{suffix}")
                result = await self._call(rtype, name, None, call, name)
            document = self._api_client.sanitize_for_serialization(result)
        elif namespace:
            document = await self._call(
                rtype,
                name,
                namespace,
                self._custom.get_namespaced_custom_object,
                rtype.group,
                rtype.version,
                namespace,
                rtype.resource,
                name,
            )
        else:
            document = await self._call(
                rtype,
                name,
                None,
                self._custom.get_cluster_custom_object,
                rtype.group,
                rtype.version,
                rtype.resource,
                name,
            )
        return ObjectRecord.from_dict(document)

    async def delete(
        self,
        rtype: ResourceType,
        name: str,
        namespace: str | None = None,
        grace_period_seconds: int = 0,
    ) -> None:
        if rtype.is_core:
            suffix, namespaced = self._core_kind(rtype)
            if namespaced:
                call = getattr(self._core, f"delete_namespaced_{suffix}")
                await self._call(
                    rtype,
                    name,
                    namespace,
                    call,
                    name,
                    self._require_namespace(rtype, namespace),
                    grace_period_seconds=grace_period_seconds,
                )
            else:
                call = getattr(self._core, f"delete_{suffix}")
                await self._call(rtype, name, None, call, name, grace_period_seconds=grace_period_seconds)
        elif namespace:
            await self._call(
                rtype,
                name,
                namespace,
                self._custom.delete_namespaced_custom_object,
                rtype.group,
                rtype.version,
                namespace,
                rtype.resource,
                name,
                grace_period_seconds=grace_period_seconds,
            )
        else:
            await self._call(
                rtype,
                name,
                None,
                self._custom.delete_cluster_custom_object,
                rtype.group,
                rtype.version,
                rtype.resource,
                name,
                grace_period_seconds=grace_period_seconds,
            )

    async def remove_finalizers(self, rtype: ResourceType, name: str, namespace: str | None = None) -> None:
        # A list body makes the generated client send application/json-patch+json.
        body = [dict(op) for op in FINALIZER_REMOVAL_PATCH]
        if rtype.is_core:
            suffix, namespaced = self._core_kind(rtype)
            if namespaced:
                call = getattr(self._core, f"patch_namespaced_{suffix}")
                await self._call(rtype, name, namespace, call, name, self._require_namespace(rtype, namespace), body)
            else:
                call = getattr(self._core, f"patch_{suffix}")
                await self._call(rtype, name, None, call, name, body)
        elif namespace:
            await self._call(
                rtype,
                name,
                namespace,
                self._custom.patch_namespaced_custom_object,
                rtype.group,
                rtype.version,
                namespace,
                rtype.resource,
                name,
                body,
            )
        else:
            await self._call(
                rtype,
                name,
                None,
                self._custom.patch_cluster_custom_object,
                rtype.group,
                rtype.version,
                rtype.resource,
                name,
                body,
            )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _core_kind(rtype: ResourceType) -> tuple[str, bool]:
        try:
            return _CORE_KINDS[rtype.resource]
        except KeyError:
            raise UnsupportedResourceError(rtype) from None

    @staticmethod
    def _require_namespace(rtype: ResourceType, namespace: str | None) -> str:
        if not namespace:
            raise ClientRequestError(f"{rtype.resource} is namespaced; a namespace is required")
        return namespace

    async def _call(
        self,
        rtype: ResourceType,
        name: str | None,
        namespace: str | None,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Invoke a generated API method, translating failures into kbinventory errors."""
        try:
            return await fn(*args, _request_timeout=self._request_timeout, **kwargs)
        except ApiException as exc:
            if exc.status == 404:
                raise ResourceNotFoundError(rtype, name, namespace) from exc
            target = f"{rtype.resource} {namespace + '/' if namespace else ''}{name or ''}".rstrip()
            raise ClientRequestError(
                f"{target}: {exc.status} {exc.reason}",
                status=exc.status,
                reason=str(exc.reason or ""),
            ) from exc
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ClientRequestError(f"{rtype.resource}: {type(exc).__name__}: {exc}") from exc


async def _load_credentials(kubeconfig: str, context: str) -> None:
    if kubeconfig or context:
        await k8s_config.load_kube_config(config_file=kubeconfig or None, context=context or None)
        _log.info("k8s client configured from kubeconfig", kubeconfig=kubeconfig, context=context)
        return
    try:
        k8s_config.load_incluster_config()
        _log.info("k8s client configured from in-cluster service account")
    except k8s_config.ConfigException:
        await k8s_config.load_kube_config()
        _log.info("k8s client configured from kubeconfig")
