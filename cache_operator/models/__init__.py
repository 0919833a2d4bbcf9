"""Data models for CacheClusters, their Deployments and pods."""

from cache_operator.models.cluster import (
    CACHE_CLUSTER_KIND,
    CacheCluster,
    CacheClusterSpec,
    CacheClusterStatus,
    node_names,
    validate_replica_count,
)
from cache_operator.models.pod import PodCondition, RuntimePod
from cache_operator.models.workload import (
    DEPLOYMENT_KIND,
    ManagedWorkload,
    OwnerReference,
    cluster_labels,
    label_selector,
)

__all__ = [
    "CACHE_CLUSTER_KIND",
    "DEPLOYMENT_KIND",
    "CacheCluster",
    "CacheClusterSpec",
    "CacheClusterStatus",
    "ManagedWorkload",
    "OwnerReference",
    "PodCondition",
    "RuntimePod",
    "cluster_labels",
    "label_selector",
    "node_names",
    "validate_replica_count",
]
