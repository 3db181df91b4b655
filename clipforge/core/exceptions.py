"""Custom exceptions for ClipForge.

This module defines all custom exceptions used throughout the application.
All exceptions inherit from ClipForgeError for easy catching.

Exception classes include context dictionaries for structured logging
and debugging. Use the `context` property to access additional details.

Provider errors carry an ErrorCategory so that callers can show one
human-readable message that tells missing credentials, missing assets and
provider failures apart without inspecting provider-specific details.
"""

import enum
from typing import Any


class ClipForgeError(Exception):
    """Base exception for all ClipForge errors.

    All custom exceptions in the application should inherit from this class.
    Provides a context dictionary for structured error information.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise ClipForgeError("Something went wrong", context={"item_id": 12})
        ... except ClipForgeError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize ClipForgeError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


# ============================================
# Database Errors
# ============================================


class DatabaseError(ClipForgeError):
    """Base exception for database-related errors."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> None:
        """Initialize DatabaseError.

        Args:
            message: Error message
            context: Additional context
            operation: Database operation that failed (e.g., "select", "upsert")
        """
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message, context=ctx)


# ============================================
# Service Errors
# ============================================


class ServiceError(ClipForgeError):
    """Base exception for service-related errors."""

    def __init__(
        self,
        message: str,
        service_name: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ServiceError.

        Args:
            message: Error message
            service_name: Name of the service
            context: Additional context
        """
        ctx = context or {}
        if service_name:
            ctx["service_name"] = service_name
        super().__init__(message, context=ctx)


# ============================================
# Provider Errors
# ============================================


class ErrorCategory(str, enum.Enum):
    """User-facing grouping of provider failures."""

    CREDENTIALS_MISSING = "credentials_missing"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"


class ProviderError(ServiceError):
    """Base exception for failures talking to a third-party provider.

    Attributes:
        provider: Provider identifier (e.g. "ElevenLabs")
        category: User-facing error category
    """

    category: ErrorCategory = ErrorCategory.PROVIDER_ERROR

    def __init__(
        self,
        provider: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ProviderError.

        Args:
            provider: Provider identifier
            message: Error message
            context: Additional context
        """
        ctx = context or {}
        ctx["provider"] = provider
        self.provider = provider
        super().__init__(message, service_name=provider, context=ctx)

    @property
    def user_message(self) -> str:
        """Single human-readable message for display."""
        if self.category == ErrorCategory.CREDENTIALS_MISSING:
            return f"No credentials configured for {self.provider}"
        if self.category == ErrorCategory.NOT_FOUND:
            return f"The requested asset was not found on {self.provider}"
        return f"{self.provider} returned an error, please try again later"


class TransportFailure(ProviderError):
    """Raised when the network call itself failed or timed out."""

    def __init__(
        self,
        provider: str,
        reason: str,
        endpoint: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if endpoint:
            ctx["endpoint"] = endpoint
        self.reason = reason
        super().__init__(provider, f"Transport failure calling {provider}: {reason}", ctx)


class Unauthorized(ProviderError):
    """Raised when the provider rejects the credential (401/403)."""

    def __init__(
        self,
        provider: str,
        status_code: int = 401,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["status_code"] = status_code
        self.status_code = status_code
        super().__init__(provider, f"{provider} rejected the credential ({status_code})", ctx)


class NotFound(ProviderError):
    """Raised when the provider has no asset with the requested id."""

    category = ErrorCategory.NOT_FOUND

    def __init__(
        self,
        provider: str,
        native_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if native_id is not None:
            ctx["native_id"] = native_id
        self.native_id = native_id
        target = f"'{native_id}'" if native_id else "asset"
        super().__init__(provider, f"{target} not found on {provider}", ctx)


class RateLimited(ProviderError):
    """Raised when the provider throttles the caller (429).

    Attributes:
        retry_after: Seconds to wait before retrying, when advertised
    """

    def __init__(
        self,
        provider: str,
        retry_after: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if retry_after is not None:
            ctx["retry_after"] = retry_after
        self.retry_after = retry_after

        message = f"Rate limit exceeded for {provider}"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(provider, message, ctx)


class CredentialNotFound(ProviderError):
    """Raised when no credential is supplied and none is stored."""

    category = ErrorCategory.CREDENTIALS_MISSING

    def __init__(self, provider: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(provider, f"No credential found for {provider}", context)


class ProviderUnavailable(ProviderError):
    """Raised when the provider answers with a server error (5xx)."""

    def __init__(
        self,
        provider: str,
        status_code: int,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["status_code"] = status_code
        self.status_code = status_code
        super().__init__(provider, f"{provider} is unavailable ({status_code})", ctx)


class UnknownProviderError(ProviderError):
    """Raised for any provider response that fits no other class.

    Attributes:
        status_code: Raw HTTP status code
        response_body: Raw response body (truncated in context)
    """

    def __init__(
        self,
        provider: str,
        status_code: int | None,
        response_body: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["status_code"] = status_code
        if response_body:
            ctx["response_body"] = response_body[:500]  # Truncate long responses
        self.status_code = status_code
        self.response_body = response_body
        suffix = f" ({status_code})" if status_code is not None else ""
        super().__init__(provider, f"Unexpected response from {provider}{suffix}", ctx)


class UnsupportedOperation(ProviderError):
    """Raised when a provider lacks a capability (e.g. previews)."""

    def __init__(
        self,
        provider: str,
        operation: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["operation"] = operation
        self.operation = operation
        super().__init__(provider, f"{provider} does not support {operation}", ctx)


class ResolutionError(ProviderError):
    """Raised when both the primary and the fallback path failed.

    The category and user message follow the fallback failure, which is the
    one the caller can act on.

    Attributes:
        primary: Failure of the primary (proxy) path
        fallback: Failure of the fallback (direct) path, if attempted
    """

    def __init__(
        self,
        provider: str,
        primary: ProviderError,
        fallback: ProviderError | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["primary"] = primary.to_dict()
        if fallback is not None:
            ctx["fallback"] = fallback.to_dict()
        self.primary = primary
        self.fallback = fallback
        self.category = (fallback or primary).category
        cause = fallback or primary
        super().__init__(provider, f"Could not resolve asset from {provider}: {cause}", ctx)


# ============================================
# Content Errors
# ============================================


class ContentError(ClipForgeError):
    """Base exception for content-related errors."""

    def __init__(
        self,
        message: str,
        content_type: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ContentError.

        Args:
            message: Error message
            content_type: Type of content (e.g., "script", "video")
            context: Additional context
        """
        ctx = context or {}
        if content_type:
            ctx["content_type"] = content_type
        super().__init__(message, context=ctx)


class SubmissionRejected(ContentError):
    """Raised when items are submitted for rendering without source material.

    Attributes:
        missing: Titles of the items lacking material
        requirement: What each item was missing (e.g. "images")
    """

    def __init__(
        self,
        missing: list[str],
        requirement: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx.update({"missing": missing, "requirement": requirement})
        self.missing = missing
        self.requirement = requirement
        listing = "\n".join(f"• {title}" for title in missing)
        super().__init__(
            f"Select {requirement} for all items. Missing {requirement} in:\n{listing}",
            content_type="video",
            context=ctx,
        )


__all__ = [
    "ClipForgeError",
    "DatabaseError",
    "ServiceError",
    "ErrorCategory",
    "ProviderError",
    "TransportFailure",
    "Unauthorized",
    "NotFound",
    "RateLimited",
    "CredentialNotFound",
    "ProviderUnavailable",
    "UnknownProviderError",
    "UnsupportedOperation",
    "ResolutionError",
    "ContentError",
    "SubmissionRejected",
]
