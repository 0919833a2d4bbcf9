"""Pytest configuration and shared fixtures."""

import itertools

import pytest
from hypothesis import Verbosity, settings

from cache_operator.config import OperatorSettings
from cache_operator.exceptions import AlreadyExistsError, ConflictError, NotFoundError
from cache_operator.models import CacheCluster, ManagedWorkload, RuntimePod
from cache_operator.status import StatusSynchronizer

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")


class FakeClusterStore:
    """In-memory ClusterStore enforcing resourceVersion checks on status writes."""

    def __init__(self):
        self.objects: dict[tuple[str, str], CacheCluster] = {}
        self.versions = itertools.count(1)
        self.update_calls = 0
        self.conflicts = 0  # simulated concurrent writes before the next update

    def add(self, name: str, namespace: str = "default", size: int = 0, nodes=None):
        cluster = CacheCluster(
            name=name,
            namespace=namespace,
            uid=f"uid-{name}",
            resource_version=str(next(self.versions)),
            spec={"size": size},
            status={"nodes": list(nodes or [])},
        )
        self.objects[(namespace, name)] = cluster
        return cluster

    def get(self, namespace: str, name: str) -> CacheCluster:
        if (namespace, name) not in self.objects:
            raise NotFoundError(f"CacheCluster {namespace}/{name} not found")
        return self.objects[(namespace, name)].model_copy(deep=True)

    def list(self, namespace: str) -> list[CacheCluster]:
        return [c.model_copy(deep=True) for (ns, _), c in self.objects.items() if ns == namespace]

    def update_status(self, cluster: CacheCluster) -> CacheCluster:
        self.update_calls += 1
        key = (cluster.namespace, cluster.name)
        if key not in self.objects:
            raise NotFoundError(f"CacheCluster {cluster.namespace}/{cluster.name} not found")
        if self.conflicts:
            self.conflicts -= 1
            self.objects[key].resource_version = str(next(self.versions))
        if self.objects[key].resource_version != cluster.resource_version:
            raise ConflictError(f"CacheCluster {cluster.namespace}/{cluster.name} was modified")
        stored = cluster.model_copy(deep=True)
        stored.resource_version = str(next(self.versions))
        self.objects[key] = stored
        return stored.model_copy(deep=True)


class FakeWorkloadStore:
    """In-memory WorkloadStore recording every write."""

    def __init__(self):
        self.objects: dict[tuple[str, str], ManagedWorkload] = {}
        self.versions = itertools.count(1)
        self.created: list[ManagedWorkload] = []
        self.replaced: list[ManagedWorkload] = []

    def get(self, namespace: str, name: str) -> ManagedWorkload:
        if (namespace, name) not in self.objects:
            raise NotFoundError(f"Deployment {namespace}/{name} not found")
        return self.objects[(namespace, name)].model_copy(deep=True)

    def create(self, workload: ManagedWorkload) -> ManagedWorkload:
        key = (workload.namespace, workload.name)
        if key in self.objects:
            raise AlreadyExistsError(f"Deployment {workload.namespace}/{workload.name} exists")
        stored = workload.model_copy(
            update={"resource_version": str(next(self.versions)), "observed_replicas": 0}
        )
        self.objects[key] = stored
        self.created.append(stored)
        return stored.model_copy(deep=True)

    def replace(self, workload: ManagedWorkload) -> ManagedWorkload:
        key = (workload.namespace, workload.name)
        current = self.objects[key]
        if workload.resource_version and workload.resource_version != current.resource_version:
            raise ConflictError(f"Deployment {workload.namespace}/{workload.name} was modified")
        stored = workload.model_copy(
            update={
                "resource_version": str(next(self.versions)),
                "observed_replicas": current.observed_replicas,
            }
        )
        self.objects[key] = stored
        self.replaced.append(stored)
        return stored.model_copy(deep=True)

    def report(self, namespace: str, name: str, observed: int) -> ManagedWorkload:
        """Simulate the Deployment controller reporting status.replicas."""
        self.objects[(namespace, name)].observed_replicas = observed
        return self.get(namespace, name)


class FakePodStore:
    """In-memory PodStore; failures can be injected per pod name."""

    def __init__(self):
        self.pods: dict[tuple[str, str], RuntimePod] = {}
        self.deleted: list[str] = []
        self.list_calls = 0
        self.fail_on: dict[str, Exception] = {}

    def add(self, name: str, labels: dict[str, str], ready: bool, namespace: str = "default"):
        conditions = [{"type": "PodScheduled", "status": "True"}]
        conditions.append({"type": "Ready", "status": "True" if ready else "False"})
        pod = RuntimePod(name=name, namespace=namespace, labels=labels, conditions=conditions)
        self.pods[(namespace, name)] = pod
        return pod

    def list(self, namespace: str, selector: dict[str, str]) -> list[RuntimePod]:
        self.list_calls += 1
        return [
            pod
            for (ns, _), pod in self.pods.items()
            if ns == namespace and all(pod.labels.get(k) == v for k, v in selector.items())
        ]

    def delete(self, namespace: str, name: str) -> None:
        if name in self.fail_on:
            raise self.fail_on[name]
        if (namespace, name) not in self.pods:
            raise NotFoundError(f"Pod {namespace}/{name} not found")
        del self.pods[(namespace, name)]
        self.deleted.append(name)


@pytest.fixture
def operator_settings():
    """Default operator settings for tests."""
    return OperatorSettings(namespace="default")


@pytest.fixture
def make_stores():
    """Factory for a fresh set of fake stores plus a synchronizer over them.

    A factory keeps each Hypothesis example isolated from the others.
    """

    def factory(max_attempts: int = 5):
        clusters = FakeClusterStore()
        workloads = FakeWorkloadStore()
        pods = FakePodStore()
        status = StatusSynchronizer(clusters, max_attempts=max_attempts)
        return clusters, workloads, pods, status

    return factory


@pytest.fixture
def sample_cluster_object():
    """A CacheCluster as returned by CustomObjectsApi."""
    return {
        "apiVersion": "cache.example.com/v1alpha1",
        "kind": "CacheCluster",
        "metadata": {
            "name": "cache1",
            "namespace": "default",
            "uid": "0b6a5e0e-4a0e-4c38-9d35-5f3b4c1d2e10",
            "resourceVersion": "4711",
        },
        "spec": {"size": 3},
        "status": {"nodes": ["cache1-0"]},
    }
