"""
StubServer URL Utilities

Route key derivation shared by the response table and the resolver.
"""

from urllib.parse import urlsplit
from typing import Tuple

KEY_SEPARATOR = '|'
DEFAULT_ROUTE_KEY = 'default|default'


class RouteKeyBuilder:
    """Builds ``METHOD|path`` lookup keys from request data."""

    @staticmethod
    def trim_slashes(path: str) -> str:
        """Strip every leading and trailing slash from a path."""
        return path.strip('/')

    @staticmethod
    def strip_query(request_target: str) -> str:
        """
        Remove the query string and fragment from a request target.

        Works on both origin-form targets (``/a/b?x=1``) and absolute-form
        targets (``http://host/a/b?x=1``).

        Args:
            request_target: Raw request target as received

        Returns:
            The path component only
        """
        if '://' in request_target:
            return urlsplit(request_target).path
        return request_target.split('?', 1)[0].split('#', 1)[0]

    @staticmethod
    def build(method: str, request_target: str, include_query: bool = False) -> str:
        """
        Compute the route key for a request.

        Args:
            method: HTTP method as received
            request_target: Raw request target (path, optionally with query)
            include_query: Keep the query string as part of the key

        Returns:
            Route key such as ``GET|api/users``
        """
        target = request_target if include_query else RouteKeyBuilder.strip_query(request_target)
        return f"{method.upper()}{KEY_SEPARATOR}{RouteKeyBuilder.trim_slashes(target)}"

    @staticmethod
    def split(key: str) -> Tuple[str, str]:
        """
        Split a configured key into method and path.

        Raises:
            ValueError: If the key has no separator or an empty method
        """
        if KEY_SEPARATOR not in key:
            raise ValueError(f"route key {key!r} is not of the form 'METHOD|path'")
        method, path = key.split(KEY_SEPARATOR, 1)
        method = method.strip()
        if not method:
            raise ValueError(f"route key {key!r} has an empty method")
        return method, path.strip()

    @staticmethod
    def normalize(key: str) -> str:
        """
        Normalize a configured key: method upper-cased, path slash-trimmed.

        The reserved fallback key is returned unchanged.
        """
        if key == DEFAULT_ROUTE_KEY:
            return key
        method, path = RouteKeyBuilder.split(key)
        return f"{method.upper()}{KEY_SEPARATOR}{RouteKeyBuilder.trim_slashes(path)}"
