"""Keeps CacheCluster status.nodes in line with the observed replica count."""

from cache_operator.exceptions import ConflictError
from cache_operator.logging_config import get_logger
from cache_operator.models import CacheCluster, node_names, validate_replica_count
from cache_operator.stores import ClusterStore

logger = get_logger(__name__)


class StatusSynchronizer:
    """Rewrites the node list on a CacheCluster from an observed replica count."""

    def __init__(self, clusters: ClusterStore, max_attempts: int = 5):
        """Initialize the synchronizer.

        Args:
            clusters: Store used to read and write CacheClusters
            max_attempts: Read-modify-write attempts before a conflict is reported
        """
        self.clusters = clusters
        self.max_attempts = max(1, max_attempts)

    def sync(self, namespace: str, name: str, observed_replicas: int | None) -> CacheCluster:
        """
        Replace status.nodes with one generated identifier per observed replica.

        The previous node list is overwritten, never merged. A conflicting
        concurrent write causes the cluster to be re-read and the update to be
        retried, up to ``max_attempts`` times in total.

        Args:
            namespace: Namespace of the CacheCluster
            name: Name of the CacheCluster
            observed_replicas: Replica count reported by the managed Deployment

        Returns:
            The CacheCluster as persisted

        Raises:
            ValidationError: If observed_replicas is missing or negative
            NotFoundError: If the CacheCluster does not exist
            ConflictError: If every attempt lost a concurrent write
            KubernetesError: On any other API failure
        """
        validate_replica_count(observed_replicas, name)
        nodes = node_names(name, observed_replicas)

        for attempt in range(1, self.max_attempts + 1):
            cluster = self.clusters.get(namespace, name)
            cluster.status.nodes = list(nodes)
            try:
                updated = self.clusters.update_status(cluster)
            except ConflictError:
                if attempt == self.max_attempts:
                    logger.error(
                        f"Giving up on status of CacheCluster {namespace}/{name} "
                        f"after {attempt} conflicting attempts"
                    )
                    raise
                logger.debug(
                    f"Conflict updating status of CacheCluster {namespace}/{name} "
                    f"(attempt {attempt}/{self.max_attempts}), retrying"
                )
                continue

            logger.info(f"CacheCluster {namespace}/{name} status: {len(nodes)} node(s)")
            return updated
