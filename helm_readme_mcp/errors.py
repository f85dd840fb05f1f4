"""Project-specific exception classes.

Every error carries a machine-readable ``code`` so the MCP layer can turn
it into a structured tool error without string matching.
"""

from typing import Any, Dict, Optional


class HelmReadmeError(Exception):
    """Base class for all custom exceptions in Helm README MCP."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Return the error as a JSON-serialisable mapping."""
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        if self.details:
            payload["details"] = self.details
        return payload


class ConfigurationError(HelmReadmeError):
    """Raised when loading or validating the configuration file fails."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIG_ERROR")


class ValidationError(HelmReadmeError):
    """Raised when a tool argument fails a format or range check."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(
            message,
            "VALIDATION_ERROR",
            400,
            {"field": field} if field else None,
        )


class InvalidPackageNameError(HelmReadmeError):
    """Raised when a package name is not of the form ``repo/chart``."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid package name: {reason}. Expected format: 'repo/chart'",
            "INVALID_PACKAGE_NAME",
            400,
        )


class PackageNotFoundError(HelmReadmeError):
    """Raised when the registry has no chart under the requested name."""

    def __init__(self, package_name: str):
        self.package_name = package_name
        super().__init__(f"Package '{package_name}' not found", "PACKAGE_NOT_FOUND", 404)


class VersionNotFoundError(HelmReadmeError):
    """Raised when a chart exists but the requested version does not."""

    def __init__(self, package_name: str, version: str):
        self.package_name = package_name
        self.version = version
        super().__init__(
            f"Version '{version}' of package '{package_name}' not found",
            "VERSION_NOT_FOUND",
            404,
        )


class RateLimitError(HelmReadmeError):
    """Raised on HTTP 429. ``retry_after`` is in seconds when the upstream sent it."""

    def __init__(self, service: str, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded for {service}",
            "RATE_LIMIT_EXCEEDED",
            429,
            {"retry_after": retry_after} if retry_after is not None else None,
        )


class NetworkError(HelmReadmeError):
    """
    Raised for transport failures, timeouts, upstream 5xx responses and
    any failure that could not be classified more precisely.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        orig_exc: Optional[BaseException] = None,
    ):
        self.orig_exc = orig_exc
        details = None
        if orig_exc is not None:
            details = {"original_error": type(orig_exc).__name__}
        super().__init__(f"Network error: {message}", "NETWORK_ERROR", status_code, details)
