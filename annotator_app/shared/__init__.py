"""
Shared Components

Exceptions used across multiple domains.
"""

from . import exceptions

__all__ = ['exceptions']
