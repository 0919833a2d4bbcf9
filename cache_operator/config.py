"""Operator configuration."""

import os
import re
from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PydanticValidationError

from cache_operator.exceptions import ConfigurationError
from cache_operator.logging_config import get_logger

logger = get_logger(__name__)

NAMESPACE_ENV = "WATCH_NAMESPACE"

_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


class OperatorSettings(BaseModel):
    """Settings shared by every controller in the operator."""

    namespace: str = "default"
    image: str = "redis:latest"
    container_name: str = "redis"
    group: str = "cache.example.com"
    version: str = "v1alpha1"
    plural: str = "cacheclusters"
    status_update_attempts: int = 5
    watch_timeout_seconds: int = 60
    retry_delay_seconds: float = 5.0

    @field_validator("namespace", "image", "group", "version", "plural")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate required string settings are not empty."""
        if not v:
            raise ValueError("value cannot be empty")
        return v

    @field_validator("container_name")
    @classmethod
    def validate_container_name(cls, v: str) -> str:
        """Validate container_name is a DNS-1123 label."""
        if len(v) > 63 or not _DNS_LABEL.match(v):
            raise ValueError(
                f"container_name '{v}' must be a lowercase DNS label "
                "(alphanumerics and '-', at most 63 characters)"
            )
        return v

    @field_validator("status_update_attempts", "watch_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate counters are at least one."""
        if v < 1:
            raise ValueError(f"must be at least 1, got {v}")
        return v

    @field_validator("retry_delay_seconds")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        """Validate retry_delay_seconds is not negative."""
        if v < 0:
            raise ValueError(f"must not be negative, got {v}")
        return v

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"

    @classmethod
    def create(cls, **values) -> "OperatorSettings":
        """Build settings, reporting invalid values as a ConfigurationError."""
        try:
            return cls(**values)
        except PydanticValidationError as e:
            details = "\n".join(
                f"  - {'.'.join(str(x) for x in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            raise ConfigurationError("Invalid operator configuration", details) from e

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        import yaml

        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str | Path) -> "OperatorSettings":
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                f"Expected location: {path.absolute()}",
            )

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse configuration file: {path}", str(e)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {path}",
                f"Got {type(data).__name__}",
            )
        return cls.create(**data)

    @classmethod
    def from_env(cls, path: str | Path | None = None) -> "OperatorSettings":
        """Load settings from an optional file, then apply environment overrides."""
        values = cls.load(path).model_dump() if path else {}

        namespace = os.environ.get(NAMESPACE_ENV)
        if namespace is not None:
            logger.debug(f"Using namespace from {NAMESPACE_ENV}: {namespace!r}")
            values["namespace"] = namespace

        return cls.create(**values)
