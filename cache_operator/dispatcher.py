"""Routes watch events to the controller responsible for their kind."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from cache_operator.failover import FailoverController
from cache_operator.logging_config import get_logger
from cache_operator.models import CACHE_CLUSTER_KIND, DEPLOYMENT_KIND
from cache_operator.reconciler import DesiredStateReconciler

logger = get_logger(__name__)

ADDED = "ADDED"
MODIFIED = "MODIFIED"
DELETED = "DELETED"


class Resource(Protocol):
    """Anything delivered by a watch: tagged with its kind and named."""

    kind: str
    name: str


@dataclass(frozen=True)
class UnknownResource:
    """A watched object of a kind no controller handles."""

    kind: str
    name: str


@dataclass(frozen=True)
class WatchEvent:
    """A single change delivered by a watch stream."""

    type: str
    resource: Resource


Handler = Callable[[Any, str], Any]


class EventDispatcher:
    """Dispatches each event to the handler registered for its resource kind."""

    def __init__(
        self, reconciler: DesiredStateReconciler, failover: FailoverController, namespace: str
    ):
        self.namespace = namespace
        self._handlers: dict[str, Handler] = {
            CACHE_CLUSTER_KIND: reconciler.reconcile,
            DEPLOYMENT_KIND: failover.handle,
        }

    def register(self, kind: str, handler: Handler) -> None:
        """Register or replace the handler for a resource kind."""
        self._handlers[kind] = handler

    def dispatch(self, event: WatchEvent) -> Any:
        """
        Run the handler for an event's resource kind.

        Events for unhandled kinds and deletions are accepted and ignored;
        dependent objects are removed through owner references. Handler
        errors propagate unchanged.

        Returns:
            The handler's result, or None if the event was ignored
        """
        resource = event.resource
        if event.type == DELETED:
            logger.debug(f"Ignoring deletion of {resource.kind} {self.namespace}/{resource.name}")
            return None

        handler = self._handlers.get(resource.kind)
        if handler is None:
            logger.debug(f"No handler for kind {resource.kind}, ignoring {resource.name}")
            return None

        logger.debug(f"{event.type} {resource.kind} {self.namespace}/{resource.name}")
        return handler(resource, self.namespace)
