# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - COORDINATION
# STATUS: Infrastructure - Kubernetes API access
# PURPOSE: Kubernetes clients for namespaces, ConfigMaps, pods and leases
# CREATED: 13 OCT 2026
# ============================================================================
"""
Infrastructure module.

Provides:
- KubeClient: async facade over the kubernetes client for one context
- KubeClientFactory: cached KubeClient per kubeconfig context
- LeaseClient: coordination.k8s.io/v1 Lease CRUD

Usage:
    from infrastructure import KubeClientFactory, LeaseClient

    factory = KubeClientFactory()
    leases = LeaseClient(factory.default())
"""

from infrastructure.kube import KubeClient, KubeClientFactory
from infrastructure.leases import LeaseClient

__all__ = [
    "KubeClient",
    "KubeClientFactory",
    "LeaseClient",
]
