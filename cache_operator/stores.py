"""Thin adapters over the Kubernetes API used by the controllers.

Each adapter converts between the generated client objects and the operator's
models, and translates client failures into the operator's error taxonomy:
ApiException by status code, transport errors (refused connections, retries
exhausted, resets) as KubernetesError. None of them retries or caches anything.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from cache_operator.exceptions import KubernetesError, from_api_exception
from cache_operator.logging_config import get_logger
from cache_operator.models import CacheCluster, ManagedWorkload, RuntimePod, label_selector

logger = get_logger(__name__)


@contextmanager
def translate_errors(action: str, creating: bool = False) -> Iterator[None]:
    """Raise client failures inside the block as CacheOperatorError subclasses.

    Args:
        action: Human readable description of the call, used in messages
        creating: True if the call creates an object (409 means AlreadyExists)
    """
    try:
        yield
    except ApiException as e:
        raise from_api_exception(e, action, creating=creating) from e
    except (HTTPError, OSError) as e:
        logger.debug(f"Transport failure while trying to {action}: {e}")
        raise KubernetesError(f"Failed to {action}", str(e)) from e


class ClusterStore:
    """Reads and writes CacheCluster custom resources."""

    def __init__(self, api: client.CustomObjectsApi, group: str, version: str, plural: str):
        """Initialize the store.

        Args:
            api: Custom objects API client
            group: API group of the CacheCluster resource
            version: API version of the CacheCluster resource
            plural: Plural resource name used in API paths
        """
        self.api = api
        self.group = group
        self.version = version
        self.plural = plural

    def get(self, namespace: str, name: str) -> CacheCluster:
        """Fetch a CacheCluster.

        Raises:
            NotFoundError: If the CacheCluster does not exist
            KubernetesError: On any other API or transport failure
        """
        with translate_errors(f"get CacheCluster {namespace}/{name}"):
            obj = self.api.get_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=namespace,
                plural=self.plural,
                name=name,
            )
        return CacheCluster.from_kubernetes_api(obj)

    def list(self, namespace: str) -> list[CacheCluster]:
        """List CacheClusters in a namespace."""
        with translate_errors(f"list CacheClusters in {namespace}"):
            response = self.api.list_namespaced_custom_object(
                group=self.group, version=self.version, namespace=namespace, plural=self.plural
            )
        return [CacheCluster.from_kubernetes_api(obj) for obj in response.get("items", [])]

    def update_status(self, cluster: CacheCluster) -> CacheCluster:
        """Replace the status subresource of a CacheCluster.

        The body carries the resourceVersion read earlier, so a concurrent write
        makes the API server answer 409.

        Raises:
            ConflictError: If the CacheCluster changed since it was read
            NotFoundError: If the CacheCluster no longer exists
            KubernetesError: On any other API or transport failure
        """
        with translate_errors(f"update status of CacheCluster {cluster.namespace}/{cluster.name}"):
            obj = self.api.replace_namespaced_custom_object_status(
                group=self.group,
                version=self.version,
                namespace=cluster.namespace,
                plural=self.plural,
                name=cluster.name,
                body=cluster.to_kubernetes_api(),
            )
        return CacheCluster.from_kubernetes_api(obj)


class WorkloadStore:
    """Reads and writes the Deployments managed for CacheClusters."""

    def __init__(self, api: client.AppsV1Api):
        self.api = api

    def get(self, namespace: str, name: str) -> ManagedWorkload:
        with translate_errors(f"read Deployment {namespace}/{name}"):
            deployment = self.api.read_namespaced_deployment(name=name, namespace=namespace)
        return ManagedWorkload.from_kubernetes_api(deployment)

    def create(self, workload: ManagedWorkload) -> ManagedWorkload:
        """Create a Deployment.

        Raises:
            AlreadyExistsError: If a Deployment with the same name exists
        """
        action = f"create Deployment {workload.namespace}/{workload.name}"
        with translate_errors(action, creating=True):
            deployment = self.api.create_namespaced_deployment(
                namespace=workload.namespace, body=workload.to_kubernetes_api()
            )
        return ManagedWorkload.from_kubernetes_api(deployment)

    def replace(self, workload: ManagedWorkload) -> ManagedWorkload:
        """Replace a Deployment, guarded by the workload's resourceVersion if set."""
        with translate_errors(f"replace Deployment {workload.namespace}/{workload.name}"):
            deployment = self.api.replace_namespaced_deployment(
                name=workload.name,
                namespace=workload.namespace,
                body=workload.to_kubernetes_api(),
            )
        return ManagedWorkload.from_kubernetes_api(deployment)


class PodStore:
    """Lists and deletes pods supervised by managed Deployments."""

    def __init__(self, api: client.CoreV1Api):
        self.api = api

    def list(self, namespace: str, selector: dict[str, str]) -> list[RuntimePod]:
        """List pods matching every label in the selector (live call, no cache)."""
        selector_str = label_selector(selector)
        with translate_errors(f"list pods in {namespace} matching {selector_str}"):
            pods = self.api.list_namespaced_pod(namespace=namespace, label_selector=selector_str)
        return [RuntimePod.from_kubernetes_api(pod) for pod in pods.items]

    def delete(self, namespace: str, name: str) -> None:
        with translate_errors(f"delete pod {namespace}/{name}"):
            self.api.delete_namespaced_pod(name=name, namespace=namespace)
