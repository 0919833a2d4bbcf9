"""Kubernetes operator for CacheCluster resources."""

__version__ = "0.1.0"
