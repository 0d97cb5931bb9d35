"""
Domain Exception Classes

Exception hierarchy for annotation, vocabulary and storage errors.
"""
from typing import Dict, Any, Optional


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides structured error information with context and metadata.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: str = None,
        context: Dict[str, Any] = None,
        cause: Exception = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context
        }

        if self.cause:
            result["caused_by"] = str(self.cause)

        return result


class ValidationError(DomainException):
    """
    Exception for data validation errors.

    Raised before any mutation, so the stored graph is left unchanged.
    """

    status_code = 400

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        if field:
            self.context["field"] = field
        if value is not None:
            self.context["value"] = str(value)


class InvalidInputError(ValidationError):
    """Empty or malformed input (blank names, unknown enum values)"""
    pass


class DuplicateEntryError(ValidationError):
    """An entry with the same normalized value already exists"""
    pass


class DegenerateImageSizeError(ValidationError):
    """Image with zero width or height passed to the coordinate transform"""

    def __init__(self, message: str, width: float = None, height: float = None, **kwargs):
        super().__init__(message, **kwargs)
        self.context["width"] = width
        self.context["height"] = height


class NotFoundError(DomainException):
    """404 Not Found - Requested resource doesn't exist"""

    status_code = 404
    resource_type: Optional[str] = None

    def __init__(self, message: str, resource_type: str = None, resource_id: str = None, **kwargs):
        super().__init__(message, **kwargs)
        resource_type = resource_type or self.resource_type
        if resource_type:
            self.context["resource_type"] = resource_type
        if resource_id:
            self.context["resource_id"] = resource_id


class ModuleKeyNotFoundError(NotFoundError):
    resource_type = "module"


class ScreenshotNotFoundError(NotFoundError):
    resource_type = "screenshot"


class EventNotFoundError(NotFoundError):
    resource_type = "event"


class EntryNotFoundError(NotFoundError):
    """Vocabulary entry (category, action, name, label, dimension) not found"""
    resource_type = "vocabulary_entry"


class BackendIOError(DomainException):
    """
    Exception for persistence medium failures.

    Used when the JSON document or an S3 object cannot be read or written.
    """

    def __init__(self, message: str, backend: str = None, operation: str = None, **kwargs):
        super().__init__(message, **kwargs)
        if backend:
            self.context["backend"] = backend
        if operation:
            self.context["operation"] = operation


class PartialFailureError(DomainException):
    """
    Metadata mutation succeeded but a dependent asset operation failed.

    Not raised by the store; attached to the operation result as a warning.
    """

    def __init__(self, message: str, locator: str = None, **kwargs):
        super().__init__(message, **kwargs)
        if locator:
            self.context["locator"] = locator


class ConfigurationError(DomainException):
    """
    Exception for configuration-related errors.

    Used when configuration loading, validation, or access fails.
    """

    def __init__(self, message: str, config_file: str = None, validation_errors: list = None, **kwargs):
        super().__init__(message, **kwargs)
        if config_file:
            self.context["config_file"] = config_file
        if validation_errors:
            self.context["validation_errors"] = validation_errors


class UnauthorizedError(DomainException):
    """401 Unauthorized - Invalid credentials"""

    status_code = 401
