"""Custom exceptions for the cache operator."""

from kubernetes.client.rest import ApiException


class CacheOperatorError(Exception):
    """Base exception for all cache operator errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class KubernetesError(CacheOperatorError):
    """Exception raised for Kubernetes API and transport errors."""

    pass


class NotFoundError(KubernetesError):
    """Exception raised when a referenced object does not exist."""

    pass


class ConflictError(KubernetesError):
    """Exception raised when a write loses an optimistic-concurrency check."""

    pass


class AlreadyExistsError(ConflictError):
    """Exception raised when creating an object that already exists."""

    pass


class ValidationError(CacheOperatorError):
    """Exception raised for invalid resource content."""

    pass


class ConfigurationError(CacheOperatorError):
    """Exception raised for configuration errors."""

    pass


def from_api_exception(
    exc: ApiException, action: str, creating: bool = False
) -> KubernetesError:
    """Translate an ApiException into the operator's error taxonomy.

    Args:
        exc: Exception raised by the Kubernetes client
        action: Human readable description of the failed call
        creating: True if the failed call was a create

    Returns:
        The matching KubernetesError subclass instance
    """
    details = f"HTTP {exc.status}: {exc.reason}"
    if exc.status == 404:
        return NotFoundError(f"Not found while trying to {action}", details)
    if exc.status == 409:
        if creating:
            return AlreadyExistsError(f"Already exists while trying to {action}", details)
        return ConflictError(f"Conflict while trying to {action}", details)
    return KubernetesError(f"Failed to {action}", details)
