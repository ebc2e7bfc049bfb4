"""Standardized error handling for the application."""

import logging
from typing import Any, Dict, Optional

# Configure logger
logger = logging.getLogger(__name__)


class CatalogMatcherError(Exception):
    """Base exception class for all application errors."""

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the error.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary for API responses.

        Returns:
            Dict containing error details
        """
        return {
            "success": False,
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
        }

    def log(self, level: int = logging.ERROR) -> None:
        """Log the error with appropriate level and context.

        Args:
            level: Logging level to use
        """
        # Details stay nested; keys like "filename" are reserved LogRecord attributes
        log_context = {
            "error_type": self.__class__.__name__,
            "status_code": self.status_code,
            "error_details": self.details,
        }
        logger.log(level, f"{self.message}", extra=log_context)


class ConfigurationError(CatalogMatcherError):
    """A collaborator is missing its API key or was never initialized."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=503, details=details)


class InvalidRequestError(CatalogMatcherError):
    """The caller sent something the pipeline cannot work with."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=400, details=details)


# AI Provider Errors
class ProviderError(CatalogMatcherError):
    """Base class for AI provider errors."""

    pass


class RateLimitError(ProviderError):
    """Provider rate limit exceeded."""

    retry_after: float = 0

    def __init__(self, provider: str, retry_after: Optional[float] = None):
        """Initialize rate limit error.

        Args:
            provider: Name of the AI provider
            retry_after: Seconds to wait before retrying
        """
        message = f"Rate limit exceeded for provider {provider}"
        details = {"provider": provider, "retry_after": retry_after or 0}
        self.retry_after = retry_after or 0

        super().__init__(message=message, status_code=429, details=details)


class ResponseParseError(ProviderError):
    """The model answered with something that is not the JSON we asked for."""

    def __init__(self, message: str, raw_preview: str = ""):
        super().__init__(message=message, status_code=502, details={"raw_preview": raw_preview[:200]})


# Upstream service errors (vector index, HTTP collaborators)
class UpstreamError(CatalogMatcherError):
    """Base class for failures of an external HTTP service."""

    def __init__(self, service: str, message: str, status_code: int = 502, details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__(message=message, status_code=status_code, details={"service": service, **(details or {})})


class ServiceUnavailableError(UpstreamError):
    """The service could not be reached (connection refused, DNS, timeout)."""

    def __init__(self, service: str, reason: str):
        super().__init__(service, f"{service} is unreachable: {reason}", status_code=503)


class ServiceRejectedError(UpstreamError):
    """The service answered with an error status."""

    def __init__(self, service: str, upstream_status: int, upstream_message: str):
        self.upstream_status = upstream_status
        self.upstream_message = upstream_message
        super().__init__(
            service,
            f"{service} rejected the request ({upstream_status}): {upstream_message}",
            status_code=502,
            details={"upstream_status": upstream_status},
        )
