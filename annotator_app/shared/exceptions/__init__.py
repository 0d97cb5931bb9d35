"""
Shared Exceptions

Common exception classes used across multiple domains and services.
"""

from .domain_exceptions import (
    DomainException, ValidationError, InvalidInputError, DuplicateEntryError,
    DegenerateImageSizeError, NotFoundError, ModuleKeyNotFoundError,
    ScreenshotNotFoundError, EventNotFoundError, EntryNotFoundError,
    BackendIOError, PartialFailureError, ConfigurationError, UnauthorizedError
)

__all__ = [
    'DomainException',
    'ValidationError',
    'InvalidInputError',
    'DuplicateEntryError',
    'DegenerateImageSizeError',
    'NotFoundError',
    'ModuleKeyNotFoundError',
    'ScreenshotNotFoundError',
    'EventNotFoundError',
    'EntryNotFoundError',
    'BackendIOError',
    'PartialFailureError',
    'ConfigurationError',
    'UnauthorizedError'
]
