"""Data models for the Deployment managed on behalf of a CacheCluster."""

from typing import Literal

from kubernetes import client
from pydantic import BaseModel, Field, field_validator

DEPLOYMENT_KIND = "Deployment"
APP_LABEL = "app"
CONTROLLER_LABEL = "controller"


def cluster_labels(name: str) -> dict[str, str]:
    """Build the label set joining a CacheCluster to its Deployment and pods.

    The same set is used as the Deployment's labels, its pod template labels
    and its selector. It depends on the name only.
    """
    return {APP_LABEL: name, CONTROLLER_LABEL: name}


def label_selector(labels: dict[str, str]) -> str:
    """Render a label set as an equality-based selector string."""
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


class OwnerReference(BaseModel):
    """Owner reference pointing a Deployment at its CacheCluster."""

    api_version: str
    kind: str
    name: str
    uid: str

    def to_kubernetes_api(self) -> client.V1OwnerReference:
        return client.V1OwnerReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            uid=self.uid,
            controller=True,
            block_owner_deletion=True,
        )


class ManagedWorkload(BaseModel):
    """A Deployment running the replicas of one CacheCluster."""

    kind: Literal["Deployment"] = DEPLOYMENT_KIND
    name: str
    namespace: str
    labels: dict[str, str] = Field(default_factory=dict)
    selector: dict[str, str] = Field(default_factory=dict)
    replicas: int
    container_name: str
    image: str
    owner: OwnerReference | None = None
    observed_replicas: int | None = None  # status.replicas, None until first reported
    resource_version: str | None = None

    @field_validator("replicas")
    @classmethod
    def validate_replicas(cls, v: int) -> int:
        """Validate replicas is not negative."""
        if v < 0:
            raise ValueError(f"replicas must be a non-negative integer, got {v}")
        return v

    @property
    def owner_name(self) -> str | None:
        """Name of the CacheCluster this workload belongs to, read off the selector."""
        return self.selector.get(CONTROLLER_LABEL)

    def spec_matches(self, other: "ManagedWorkload") -> bool:
        """Check whether this workload already carries the fields set in ``other``.

        Called on the live object with the desired one. A desired owner must be
        present on the live object, so an unowned Deployment gets adopted; an
        owner on the live object is left alone when none is desired.
        """
        return (
            (other.owner is None or self.owner == other.owner)
            and self.labels == other.labels
            and self.selector == other.selector
            and self.replicas == other.replicas
            and self.container_name == other.container_name
            and self.image == other.image
        )

    def to_kubernetes_api(self) -> client.V1Deployment:
        """Convert to a V1Deployment body for AppsV1Api calls."""
        metadata = client.V1ObjectMeta(
            name=self.name,
            namespace=self.namespace,
            labels=dict(self.labels),
            resource_version=self.resource_version,
        )
        if self.owner:
            metadata.owner_references = [self.owner.to_kubernetes_api()]

        return client.V1Deployment(
            api_version="apps/v1",
            kind=DEPLOYMENT_KIND,
            metadata=metadata,
            spec=client.V1DeploymentSpec(
                replicas=self.replicas,
                selector=client.V1LabelSelector(match_labels=dict(self.selector)),
                template=client.V1PodTemplateSpec(
                    metadata=client.V1ObjectMeta(labels=dict(self.labels)),
                    spec=client.V1PodSpec(
                        containers=[client.V1Container(name=self.container_name, image=self.image)]
                    ),
                ),
            ),
        )

    @classmethod
    def from_kubernetes_api(cls, deployment: client.V1Deployment) -> "ManagedWorkload":
        """Parse a V1Deployment returned by AppsV1Api or a watch stream."""
        metadata = deployment.metadata
        spec = deployment.spec

        selector = {}
        if spec and spec.selector and spec.selector.match_labels:
            selector = dict(spec.selector.match_labels)

        container_name = ""
        image = ""
        if spec and spec.template and spec.template.spec and spec.template.spec.containers:
            container = spec.template.spec.containers[0]
            container_name = container.name or ""
            image = container.image or ""

        # The API server omits zero-valued status fields
        observed_replicas = None
        if deployment.status is not None:
            observed_replicas = deployment.status.replicas or 0

        owner = None
        for ref in metadata.owner_references or []:
            if ref.controller:
                owner = OwnerReference(
                    api_version=ref.api_version, kind=ref.kind, name=ref.name, uid=ref.uid
                )
                break

        return cls(
            name=metadata.name,
            namespace=metadata.namespace or "",
            labels=dict(metadata.labels or {}),
            selector=selector,
            replicas=spec.replicas if spec and spec.replicas is not None else 1,
            container_name=container_name,
            image=image,
            owner=owner,
            observed_replicas=observed_replicas,
            resource_version=metadata.resource_version,
        )
