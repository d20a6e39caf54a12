"""Domain exceptions for the helpdesk.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Whatever
boundary consumes the core maps them to responses using error_code
(see ERROR_CODE_STATUS).
"""

from typing import Any


class HelpdeskException(Exception):
    """Base exception for all helpdesk application errors.

    All custom exceptions inherit from this class to allow consistent
    error handling and logging.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form: error, message, details."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(HelpdeskException):
    """Raised when input validation fails (malformed or out-of-enum values).

    Always carries field-level detail when the failing field is known:
    ``details["field"]`` for a single field and ``details["errors"]`` as a
    ``{field: message}`` map for multi-field failures.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: dict[str, str] | None = None,
    ) -> None:
        """Initialize with message and optional field detail.

        Args:
            message: Description of the validation failure.
            field: Optional field that failed validation.
            errors: Optional per-field messages.
        """
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = dict(errors)
        elif field:
            details["errors"] = {field: message}
        super().__init__(message, "VALIDATION_ERROR", details)

    @property
    def errors(self) -> dict[str, str]:
        """Per-field messages (empty when the failure is not tied to a field)."""
        return self.details.get("errors", {})


class AuthenticationException(HelpdeskException):
    """Raised when login fails. Never says whether the username exists."""

    def __init__(self, message: str = "Usuario o contraseña incorrectos") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(HelpdeskException):
    """Raised when an authenticated user is not entitled to the operation.

    Also covers self-protection rules (own role, own account, system role).
    """

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Acceso denegado",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'role', 'ticket').
            action: Optional permission or action attempted (e.g. 'manage_roles').
            message: Human-readable message; replaced when resource and action are given.
        """
        if resource and action:
            message = f"Acceso denegado: {action} sobre {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(HelpdeskException):
    """Raised when a referenced entity does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'role', 'ticket').
            resource_id: The ID (or lookup key) that was not found.
        """
        super().__init__(
            f"{resource_type} no encontrado: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictException(HelpdeskException):
    """Raised when current state prevents the operation (e.g. role still has users)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "CONFLICT", details)


class DuplicateKeyException(HelpdeskException):
    """Raised by repositories when an insert hits a unique constraint."""

    def __init__(self, entity: str, details_extra: dict[str, Any] | None = None) -> None:
        details = details_extra or {}
        details["entity"] = entity
        super().__init__(f"Duplicate key for {entity}", "DUPLICATE_KEY", details)


# Map domain error_code to HTTP status for the boundary that renders errors.
ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "CONFLICT": 409,
    "DUPLICATE_KEY": 409,
}
