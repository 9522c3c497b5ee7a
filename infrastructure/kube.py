# ============================================================================
# KUBERNETES CLIENT INFRASTRUCTURE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Infrastructure - Kubernetes API access per context
# PURPOSE: Namespaces, ConfigMaps, pods and API handles for one kube context
# CREATED: 13 OCT 2026
# ============================================================================
"""
Kubernetes Client Infrastructure

Provides KubeClient, a thin async facade over the official kubernetes
client bound to a single kubeconfig context, and KubeClientFactory,
which hands out one cached KubeClient per context.

The kubernetes client is synchronous; every call runs in the default
executor so the event loop (and the lease renewal task) keeps running
while a request is in flight.

Usage:
    from infrastructure.kube import KubeClientFactory

    factory = KubeClientFactory()
    kube = factory.get("kind-solo")

    if not await kube.namespace_exists("solo-dev"):
        await kube.create_namespace("solo-dev")
"""

import asyncio
import functools
from typing import Any, Callable, Dict, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from core.errors import SoloError
from core.logging import LogComponent, get_logger

logger = get_logger(__name__, LogComponent.KUBERNETES)


class KubeClient:
    """
    Kubernetes API facade for one context.

    API handles can be injected (tests); otherwise they are built from
    the kubeconfig for the given context.
    """

    def __init__(
        self,
        context: Optional[str] = None,
        kubeconfig: Optional[str] = None,
        core_api: Optional[Any] = None,
        coordination_api: Optional[Any] = None,
    ):
        """
        Initialize the client.

        Args:
            context: Kubeconfig context (None = current context)
            kubeconfig: Kubeconfig path (None = KUBECONFIG / ~/.kube/config)
            core_api: Pre-built CoreV1Api
            coordination_api: Pre-built CoordinationV1Api
        """
        self.context = context

        if core_api is None or coordination_api is None:
            api_client = config.new_client_from_config(config_file=kubeconfig, context=context)
            core_api = core_api or client.CoreV1Api(api_client)
            coordination_api = coordination_api or client.CoordinationV1Api(api_client)

        self.core_api = core_api
        self.coordination_api = coordination_api

    async def call(self, fn: Callable, *args, **kwargs) -> Any:
        """Run a blocking kubernetes client call in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))

    # =========================================================================
    # NAMESPACES
    # =========================================================================

    async def namespace_exists(self, namespace: str) -> bool:
        try:
            await self.call(self.core_api.read_namespace, name=namespace)
            return True
        except ApiException as e:
            if e.status == 404:
                return False
            raise

    async def create_namespace(self, namespace: str) -> bool:
        """
        Create a namespace.

        Returns:
            True if created or already present
        """
        body = client.V1Namespace(metadata=client.V1ObjectMeta(name=namespace))
        try:
            await self.call(self.core_api.create_namespace, body=body)
            logger.info(f"Created namespace {namespace} (context={self.context})")
            return True
        except ApiException as e:
            if e.status == 409:
                return True
            raise

    # =========================================================================
    # CONFIG MAPS
    # =========================================================================

    async def read_config_map(self, namespace: str, name: str) -> Optional[Any]:
        """
        Returns:
            V1ConfigMap, or None if it does not exist
        """
        try:
            return await self.call(self.core_api.read_namespaced_config_map, name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    async def create_config_map(
        self,
        namespace: str,
        name: str,
        labels: Dict[str, str],
        data: Dict[str, str],
    ) -> Any:
        body = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=dict(labels)),
            data=dict(data),
        )
        result = await self.call(self.core_api.create_namespaced_config_map, namespace=namespace, body=body)
        logger.info(f"Created ConfigMap {namespace}/{name} (context={self.context})")
        return result

    async def replace_config_map(
        self,
        namespace: str,
        name: str,
        labels: Dict[str, str],
        data: Dict[str, str],
    ) -> Any:
        body = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=dict(labels)),
            data=dict(data),
        )
        result = await self.call(
            self.core_api.replace_namespaced_config_map, name=name, namespace=namespace, body=body
        )
        logger.debug(f"Replaced ConfigMap {namespace}/{name} (context={self.context})")
        return result

    async def list_config_maps(self, namespace: str, label_selector: str) -> List[Any]:
        result = await self.call(
            self.core_api.list_namespaced_config_map, namespace=namespace, label_selector=label_selector
        )
        return list(result.items or [])

    # =========================================================================
    # PODS
    # =========================================================================

    async def list_pods(self, namespace: str, labels: List[str]) -> List[Any]:
        """
        List pods matching every label.

        Args:
            namespace: Namespace to search
            labels: Selector terms, e.g. ["app=network-node1"]
        """
        result = await self.call(
            self.core_api.list_namespaced_pod, namespace=namespace, label_selector=",".join(labels)
        )
        return list(result.items or [])


class KubeClientFactory:
    """
    One KubeClient per kubeconfig context.

    Usage:
        factory = KubeClientFactory(kubeconfig="~/.kube/config")
        factory.get("kind-solo")      # explicit context
        factory.default()             # current context
    """

    def __init__(
        self,
        kubeconfig: Optional[str] = None,
        client_builder: Optional[Callable[[Optional[str]], KubeClient]] = None,
    ):
        self.kubeconfig = kubeconfig
        self._client_builder = client_builder or (
            lambda context: KubeClient(context=context, kubeconfig=self.kubeconfig)
        )
        self._clients: Dict[Optional[str], KubeClient] = {}

    def get(self, context: Optional[str] = None) -> KubeClient:
        """
        Raises:
            SoloError: If the kubeconfig is missing, unreadable or has no
                such context
        """
        if context not in self._clients:
            try:
                self._clients[context] = self._client_builder(context)
            except (config.ConfigException, OSError) as e:
                target = context or "current context"
                raise SoloError(
                    f"Failed to create kube client for {target}: {e}",
                    cause=e,
                    meta={"context": context, "kubeconfig": self.kubeconfig},
                )
        return self._clients[context]

    def default(self) -> KubeClient:
        return self.get(None)

    def current_context(self) -> Optional[str]:
        """Name of the kubeconfig's current context, or None."""
        try:
            _, active = config.list_kube_config_contexts(config_file=self.kubeconfig)
        except config.ConfigException as e:
            logger.warning(f"Could not read kubeconfig contexts: {e}")
            return None
        return active["name"] if active else None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['KubeClient', 'KubeClientFactory', 'ApiException']
