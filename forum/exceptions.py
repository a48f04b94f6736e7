"""
Forum exceptions

Each exception knows the HTTP status it maps to. ``details`` are merged into
the JSON error body and ``headers`` are sent with it; see
:mod:`forum.exception_handlers`.
"""

from typing import Any

from fastapi import status


class ForumException(Exception):
    """Base class for errors that become an HTTP error response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        self.headers = headers
        super().__init__(self.message)


# Identity and access


class AuthenticationError(ForumException):
    """No usable identity on a request that needs one."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "unauthenticated"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message, details=details, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid email or password"


class AuthorizationError(ForumException):
    """The identity's role is not in the operation's role set."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "forbidden"

    def __init__(self, message: str | None = None, required_roles: list[str] | None = None):
        super().__init__(message, details={"requiredRoles": required_roles} if required_roles else None)


class AccountBannedError(ForumException):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "This account has been banned"


# Lookups


class ResourceNotFoundError(ForumException):
    status_code = status.HTTP_404_NOT_FOUND
    resource_type = "Resource"

    def __init__(self, resource_id: Any | None = None):
        if resource_id is None:
            message = f"{self.resource_type} not found"
        else:
            message = f"{self.resource_type} with id '{resource_id}' not found"
        super().__init__(message, details={"resourceType": self.resource_type, "resourceId": resource_id})


class UserNotFoundError(ResourceNotFoundError):
    resource_type = "User"


class PostNotFoundError(ResourceNotFoundError):
    resource_type = "Post"


class CategoryNotFoundError(ResourceNotFoundError):
    resource_type = "Category"


# Input


class ValidationError(ForumException):
    """Well-formed request whose values are not acceptable."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = dict(details or {})
        if field:
            details["field"] = field
        super().__init__(message, details=details)


class InvalidCookieCategoryError(ValidationError):
    def __init__(self, category: str):
        super().__init__(f"Invalid cookie category '{category}'", field="type")


class DuplicateResourceError(ForumException):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            f"{resource_type} with {field} '{value}' already exists",
            details={"resourceType": resource_type, "field": field, "value": value},
        )


# Admission control and cookie consent


class RateLimitExceededError(ForumException):
    """A limiter bucket has no points left in its current window."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests. Please try again later."

    def __init__(self, retry_after: int, message: str | None = None):
        self.retry_after = retry_after
        super().__init__(
            message,
            details={"retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


class ConsentRequiredError(ForumException):
    """The feature depends on a cookie category the visitor has not accepted."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Cookie consent is required for this feature"

    def __init__(self, category: str):
        super().__init__(details={"requiresConsent": True, "cookieType": category})
