"""Data models for the CacheCluster custom resource."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from cache_operator.exceptions import ValidationError

CACHE_CLUSTER_KIND = "CacheCluster"


def validate_replica_count(count: int | None, name: str) -> int:
    """Check that a replica count is usable for sizing a node list.

    Args:
        count: Replica count to check
        name: CacheCluster name, used in the error message

    Returns:
        The count unchanged

    Raises:
        ValidationError: If the count is missing or negative
    """
    if count is None:
        raise ValidationError(
            f"No replica count available for CacheCluster '{name}'",
            "The managed Deployment has not reported status.replicas yet",
        )
    if count < 0:
        raise ValidationError(
            f"Replica count for CacheCluster '{name}' cannot be negative, got {count}",
            "spec.size must be an integer >= 0",
        )
    return count


def node_names(name: str, count: int | None) -> list[str]:
    """Generate the synthetic node identifiers for a cluster of a given size.

    Example:
        >>> node_names("cache1", 3)
        ['cache1-0', 'cache1-1', 'cache1-2']
    """
    count = validate_replica_count(count, name)
    return [f"{name}-{index}" for index in range(count)]


class CacheClusterSpec(BaseModel):
    """Desired state declared by the user."""

    size: int = 0

    @field_validator("size")
    @classmethod
    def validate_size(cls, v: int) -> int:
        """Validate size is not negative."""
        if v < 0:
            raise ValueError(f"size must be a non-negative integer, got {v}")
        return v


class CacheClusterStatus(BaseModel):
    """Observed state written by the operator."""

    nodes: list[str] = Field(default_factory=list)


class CacheCluster(BaseModel):
    """A CacheCluster custom resource."""

    kind: Literal["CacheCluster"] = CACHE_CLUSTER_KIND
    api_version: str = "cache.example.com/v1alpha1"
    name: str
    namespace: str
    uid: str | None = None
    resource_version: str | None = None
    spec: CacheClusterSpec = Field(default_factory=CacheClusterSpec)
    status: CacheClusterStatus = Field(default_factory=CacheClusterStatus)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is not empty."""
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @classmethod
    def from_kubernetes_api(cls, obj: dict[str, Any]) -> "CacheCluster":
        """Parse a custom object dict returned by CustomObjectsApi.

        Raises:
            ValidationError: If the object does not describe a valid CacheCluster
        """
        metadata = obj.get("metadata") or {}
        try:
            return cls(
                api_version=obj.get("apiVersion", "cache.example.com/v1alpha1"),
                name=metadata.get("name", ""),
                namespace=metadata.get("namespace", ""),
                uid=metadata.get("uid"),
                resource_version=metadata.get("resourceVersion"),
                spec=CacheClusterSpec(**(obj.get("spec") or {})),
                status=CacheClusterStatus(**(obj.get("status") or {})),
            )
        except PydanticValidationError as e:
            messages = "; ".join(
                f"{'.'.join(str(x) for x in error['loc']) or 'spec'}: {error['msg']}"
                for error in e.errors()
            )
            raise ValidationError(
                f"Invalid CacheCluster '{metadata.get('name', '<unnamed>')}'", messages
            ) from e

    def to_kubernetes_api(self) -> dict[str, Any]:
        """Convert to a custom object body for CustomObjectsApi calls."""
        metadata: dict[str, Any] = {"name": self.name, "namespace": self.namespace}
        if self.uid:
            metadata["uid"] = self.uid
        if self.resource_version:
            # Sent back so the API server rejects writes based on a stale read
            metadata["resourceVersion"] = self.resource_version

        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": metadata,
            "spec": self.spec.model_dump(),
            "status": self.status.model_dump(),
        }
