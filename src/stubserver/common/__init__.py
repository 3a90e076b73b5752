"""
StubServer Common Utilities

Shared utilities and helpers used across StubServer modules.
"""

from .utils import StubDefinitionLoader, read_resource
from .url_utils import RouteKeyBuilder, DEFAULT_ROUTE_KEY, KEY_SEPARATOR

__all__ = [
    'StubDefinitionLoader',
    'read_resource',
    'RouteKeyBuilder',
    'DEFAULT_ROUTE_KEY',
    'KEY_SEPARATOR',
]
