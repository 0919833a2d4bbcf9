"""Data models for pods supervised by a managed Deployment."""

from kubernetes import client
from pydantic import BaseModel, Field

READY_CONDITION = "Ready"
CONDITION_TRUE = "True"


class PodCondition(BaseModel):
    """A typed pod condition."""

    type: str
    status: str


class RuntimePod(BaseModel):
    """A pod observed through the Kubernetes API."""

    name: str
    namespace: str
    labels: dict[str, str] = Field(default_factory=dict)
    conditions: list[PodCondition] = Field(default_factory=list)

    @property
    def ready(self) -> bool:
        """True iff the pod carries a Ready condition with status "True"."""
        return any(
            c.type == READY_CONDITION and c.status == CONDITION_TRUE for c in self.conditions
        )

    @classmethod
    def from_kubernetes_api(cls, pod: client.V1Pod) -> "RuntimePod":
        conditions = []
        if pod.status is not None:
            conditions = [
                PodCondition(type=c.type, status=c.status) for c in pod.status.conditions or []
            ]
        return cls(
            name=pod.metadata.name,
            namespace=pod.metadata.namespace or "",
            labels=dict(pod.metadata.labels or {}),
            conditions=conditions,
        )
