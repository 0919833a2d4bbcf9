"""Watch loop wiring the Kubernetes API to the event dispatcher."""

import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException

from cache_operator.config import OperatorSettings
from cache_operator.dispatcher import EventDispatcher, UnknownResource, WatchEvent
from cache_operator.exceptions import CacheOperatorError, ConfigurationError
from cache_operator.failover import FailoverController
from cache_operator.logging_config import get_logger
from cache_operator.models import CacheCluster, ManagedWorkload
from cache_operator.models.workload import CONTROLLER_LABEL
from cache_operator.reconciler import DesiredStateReconciler
from cache_operator.status import StatusSynchronizer
from cache_operator.stores import ClusterStore, PodStore, WorkloadStore

logger = get_logger(__name__)


def load_kubernetes_config() -> None:
    """Load in-cluster configuration, falling back to a kubeconfig file.

    Raises:
        ConfigurationError: If neither configuration can be loaded
    """
    try:
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
        return
    except config.ConfigException:
        logger.debug("Not running in a cluster, trying kubeconfig")

    kubeconfig = Path(os.environ.get("KUBECONFIG", "~/.kube/config")).expanduser()
    try:
        config.load_kube_config(config_file=str(kubeconfig))
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load Kubernetes configuration from {kubeconfig}",
            "Run inside a cluster with a service account, or set KUBECONFIG "
            f"to a valid kubeconfig file ({e})",
        ) from e
    logger.debug(f"Loaded kubeconfig from {kubeconfig}")


def cluster_event(raw: dict[str, Any]) -> WatchEvent:
    """Convert a raw CacheCluster watch event."""
    return WatchEvent(type=raw["type"], resource=CacheCluster.from_kubernetes_api(raw["object"]))


def deployment_event(raw: dict[str, Any]) -> WatchEvent:
    """Convert a raw Deployment watch event."""
    obj = raw["object"]
    if not isinstance(obj, client.V1Deployment):
        kind = type(obj).__name__
        name = ""
        if isinstance(obj, dict):
            kind = obj.get("kind", kind)
            name = (obj.get("metadata") or {}).get("name", "")
        return WatchEvent(type=raw["type"], resource=UnknownResource(kind=kind, name=name))
    return WatchEvent(type=raw["type"], resource=ManagedWorkload.from_kubernetes_api(obj))


class Operator:
    """Runs one watch thread per watched kind and feeds events to the dispatcher."""

    def __init__(
        self,
        settings: OperatorSettings,
        core_api: client.CoreV1Api | None = None,
        apps_api: client.AppsV1Api | None = None,
        custom_api: client.CustomObjectsApi | None = None,
    ):
        """Initialize the operator.

        Args:
            settings: Operator settings; settings.namespace is the watched namespace
            core_api: Core API client (created from loaded config if omitted)
            apps_api: Apps API client (created from loaded config if omitted)
            custom_api: Custom objects API client (created from loaded config if omitted)
        """
        self.settings = settings
        self.namespace = settings.namespace
        self.core_api = core_api or client.CoreV1Api()
        self.apps_api = apps_api or client.AppsV1Api()
        self.custom_api = custom_api or client.CustomObjectsApi()

        self.clusters = ClusterStore(
            self.custom_api, settings.group, settings.version, settings.plural
        )
        self.workloads = WorkloadStore(self.apps_api)
        self.pods = PodStore(self.core_api)
        self.status = StatusSynchronizer(self.clusters, settings.status_update_attempts)
        self.reconciler = DesiredStateReconciler(self.workloads, self.status, settings)
        self.failover = FailoverController(self.clusters, self.pods, self.status)
        self.dispatcher = EventDispatcher(self.reconciler, self.failover, self.namespace)

        self._stop = threading.Event()
        self._watchers: list[watch.Watch] = []
        self._watchers_lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    def handle(self, raw: dict[str, Any], convert: Callable[[dict[str, Any]], WatchEvent]) -> None:
        """Convert and dispatch one raw watch event, logging any failure.

        A failed event is not retried here; the next event for the same object,
        or the re-list when the stream restarts, delivers it again.
        """
        if raw.get("type") == "ERROR":
            logger.error(f"Watch stream reported an error: {raw.get('raw_object')}")
            return

        try:
            event = convert(raw)
        except CacheOperatorError as e:
            logger.error(f"Skipping {raw.get('type')} event: {e.message}")
            return

        resource = event.resource
        try:
            self.dispatcher.dispatch(event)
        except CacheOperatorError as e:
            logger.error(
                f"Failed to handle {event.type} {resource.kind} "
                f"{self.namespace}/{resource.name}: {e.message}"
            )
            if e.details:
                logger.debug(e.details)

    def watch_clusters(self) -> None:
        self._watch(
            "CacheCluster",
            cluster_event,
            self.custom_api.list_namespaced_custom_object,
            group=self.settings.group,
            version=self.settings.version,
            namespace=self.namespace,
            plural=self.settings.plural,
        )

    def watch_deployments(self) -> None:
        self._watch(
            "Deployment",
            deployment_event,
            self.apps_api.list_namespaced_deployment,
            namespace=self.namespace,
            label_selector=CONTROLLER_LABEL,
        )

    def _watch(
        self,
        kind: str,
        convert: Callable[[dict[str, Any]], WatchEvent],
        list_fn: Callable[..., Any],
        **kwargs: Any,
    ) -> None:
        logger.info(f"Starting {kind} watch in namespace {self.namespace}")

        while not self._stop.is_set():
            w = watch.Watch()
            with self._watchers_lock:
                self._watchers.append(w)
            try:
                for raw in w.stream(
                    list_fn, timeout_seconds=self.settings.watch_timeout_seconds, **kwargs
                ):
                    if self._stop.is_set():
                        break
                    self.handle(raw, convert)
            except ApiException as e:
                if e.status == 410:
                    logger.info(f"{kind} watch resource version expired, restarting")
                    continue
                logger.error(f"{kind} watch error: {e}")
                self._stop.wait(self.settings.retry_delay_seconds)
            except Exception as e:
                logger.error(f"Unexpected {kind} watch error: {e}", exc_info=True)
                self._stop.wait(self.settings.retry_delay_seconds)
            finally:
                w.stop()
                with self._watchers_lock:
                    self._watchers.remove(w)

        logger.info(f"{kind} watch stopped")

    def start(self) -> None:
        """Start the watch threads."""
        self._stop.clear()
        self._threads = [
            threading.Thread(target=self.watch_clusters, name="watch-cacheclusters", daemon=True),
            threading.Thread(target=self.watch_deployments, name="watch-deployments", daemon=True),
        ]
        for thread in self._threads:
            thread.start()

    def run(self) -> None:
        """Start watching and block until stop() is called."""
        self.start()
        logger.info(f"Cache operator running in namespace {self.namespace}")
        self._stop.wait()
        self.join()

    def stop(self) -> None:
        """Stop all watch streams."""
        self._stop.set()
        with self._watchers_lock:
            watchers = list(self._watchers)
        for w in watchers:
            w.stop()

    def join(self, timeout: float | None = 5) -> None:
        for thread in self._threads:
            thread.join(timeout=timeout)
