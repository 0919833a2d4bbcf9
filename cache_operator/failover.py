"""Evicts pods that are not ready so their Deployment replaces them."""

from cache_operator.exceptions import NotFoundError
from cache_operator.logging_config import get_logger
from cache_operator.models import ManagedWorkload
from cache_operator.status import StatusSynchronizer
from cache_operator.stores import ClusterStore, PodStore

logger = get_logger(__name__)


class FailoverController:
    """Reacts to Deployment changes: refreshes status and evicts unready pods."""

    def __init__(self, clusters: ClusterStore, pods: PodStore, status: StatusSynchronizer):
        self.clusters = clusters
        self.pods = pods
        self.status = status

    def handle(self, workload: ManagedWorkload, namespace: str) -> list[str]:
        """
        Process a change of a managed Deployment.

        Pods are classified once, from a live list. Every pod without a true
        Ready condition is deleted; the Deployment creates the replacement.
        The first list or delete failure aborts the remaining evictions.

        Args:
            workload: The Deployment as delivered by the watch
            namespace: Namespace the operator manages

        Returns:
            Names of the evicted pods

        Raises:
            NotFoundError: If the owning CacheCluster does not exist
            KubernetesError: On list or delete failures
        """
        owner = workload.owner_name
        if not owner:
            logger.debug(f"Deployment {namespace}/{workload.name} has no controller label, ignoring")
            return []

        # Fails with NotFoundError when the Deployment outlived its CacheCluster
        self.clusters.get(namespace, owner)

        if workload.observed_replicas is None:
            logger.debug(f"Deployment {namespace}/{workload.name} has not reported status yet")
        else:
            self.status.sync(namespace, owner, workload.observed_replicas)

        pods = self.pods.list(namespace, workload.selector)
        unready = [pod for pod in pods if not pod.ready]
        logger.debug(
            f"Deployment {namespace}/{workload.name}: {len(pods)} pod(s), {len(unready)} not ready"
        )

        evicted = []
        for pod in unready:
            logger.warning(f"Evicting pod {namespace}/{pod.name}: not ready")
            try:
                self.pods.delete(namespace, pod.name)
            except NotFoundError:
                logger.debug(f"Pod {namespace}/{pod.name} already gone")
            evicted.append(pod.name)

        return evicted
