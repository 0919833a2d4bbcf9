"""CustomResourceDefinition manifest for the CacheCluster resource."""

from typing import Any

from cache_operator.config import OperatorSettings
from cache_operator.models import CACHE_CLUSTER_KIND


def build_crd_manifest(settings: OperatorSettings) -> dict[str, Any]:
    """Build the apiextensions.k8s.io/v1 CustomResourceDefinition.

    The schema rejects negative sizes at admission, and the status
    subresource keeps status writes separate from spec writes.
    """
    schema = {
        "type": "object",
        "properties": {
            "spec": {
                "type": "object",
                "required": ["size"],
                "properties": {
                    "size": {
                        "type": "integer",
                        "minimum": 0,
                        "description": "Desired number of cache replicas",
                    }
                },
            },
            "status": {
                "type": "object",
                "properties": {
                    "nodes": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "One identifier per observed replica",
                    }
                },
            },
        },
    }

    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": f"{settings.plural}.{settings.group}"},
        "spec": {
            "group": settings.group,
            "scope": "Namespaced",
            "names": {
                "plural": settings.plural,
                "singular": CACHE_CLUSTER_KIND.lower(),
                "kind": CACHE_CLUSTER_KIND,
            },
            "versions": [
                {
                    "name": settings.version,
                    "served": True,
                    "storage": True,
                    "schema": {"openAPIV3Schema": schema},
                    "subresources": {"status": {}},
                    "additionalPrinterColumns": [
                        {"name": "Size", "type": "integer", "jsonPath": ".spec.size"},
                        {"name": "Age", "type": "date", "jsonPath": ".metadata.creationTimestamp"},
                    ],
                }
            ],
        },
    }
