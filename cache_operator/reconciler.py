"""Maps a CacheCluster onto the Deployment that runs its replicas."""

from cache_operator.config import OperatorSettings
from cache_operator.exceptions import AlreadyExistsError
from cache_operator.logging_config import get_logger
from cache_operator.models import (
    CacheCluster,
    ManagedWorkload,
    OwnerReference,
    cluster_labels,
    validate_replica_count,
)
from cache_operator.status import StatusSynchronizer
from cache_operator.stores import WorkloadStore

logger = get_logger(__name__)


def build_workload(
    cluster: CacheCluster, namespace: str, settings: OperatorSettings
) -> ManagedWorkload:
    """Compute the desired Deployment for a CacheCluster.

    Raises:
        ValidationError: If spec.size is negative
    """
    replicas = validate_replica_count(cluster.spec.size, cluster.name)
    labels = cluster_labels(cluster.name)

    owner = None
    if cluster.uid:
        owner = OwnerReference(
            api_version=cluster.api_version, kind=cluster.kind, name=cluster.name, uid=cluster.uid
        )

    return ManagedWorkload(
        name=cluster.name,
        namespace=namespace,
        labels=labels,
        selector=dict(labels),
        replicas=replicas,
        container_name=settings.container_name,
        image=settings.image,
        owner=owner,
    )


class DesiredStateReconciler:
    """Creates or updates the Deployment declared by a CacheCluster."""

    def __init__(
        self, workloads: WorkloadStore, status: StatusSynchronizer, settings: OperatorSettings
    ):
        self.workloads = workloads
        self.status = status
        self.settings = settings

    def reconcile(self, cluster: CacheCluster, namespace: str) -> ManagedWorkload:
        """
        Bring the Deployment for a CacheCluster in line with spec.size.

        The status is only synchronized from the count the API server reports
        for the applied Deployment, never from the desired count.

        Returns:
            The Deployment as it exists after the apply
        """
        desired = build_workload(cluster, namespace, self.settings)
        logger.debug(
            f"Reconciling CacheCluster {namespace}/{cluster.name}: {desired.replicas} replica(s)"
        )

        applied = self.apply(desired)

        if applied.observed_replicas is not None:
            self.status.sync(namespace, cluster.name, applied.observed_replicas)

        return applied

    def apply(self, desired: ManagedWorkload) -> ManagedWorkload:
        """Create the Deployment, or update it in place if it differs from desired."""
        try:
            created = self.workloads.create(desired)
        except AlreadyExistsError:
            existing = self.workloads.get(desired.namespace, desired.name)
        else:
            logger.info(f"Created Deployment {desired.namespace}/{desired.name}")
            return created

        if existing.spec_matches(desired):
            logger.debug(f"Deployment {desired.namespace}/{desired.name} is up to date")
            return existing

        update = desired.model_copy(update={"resource_version": existing.resource_version})
        updated = self.workloads.replace(update)
        logger.info(
            f"Updated Deployment {desired.namespace}/{desired.name}: "
            f"replicas {existing.replicas} -> {desired.replicas}"
        )
        return updated
