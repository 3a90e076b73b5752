"""
StubServer Resolver

Maps an incoming request to its canned response spec.

Routing is two-tier only:
1. Exact ``METHOD|path`` match
2. The ``default|default`` entry

No wildcards, prefixes or path parameters.
"""

import logging
from dataclasses import dataclass

from .table import ResponseTable, ResponseSpec
from ..common import RouteKeyBuilder

logger = logging.getLogger("stubserver.mock.resolver")


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a request."""

    key: str
    spec: ResponseSpec
    matched: bool
    fallback: bool = False


class Resolver:
    """
    Resolves requests against a read-only response table.

    Example:
        resolver = Resolver(table)
        spec = resolver.resolve("GET", "/api/users/")
    """

    def __init__(self, table: ResponseTable, include_query: bool = False):
        """
        Initialize resolver.

        Args:
            table: Response table built at startup
            include_query: Keep the query string in the lookup key
        """
        self.table = table
        self.include_query = include_query

    def route_key(self, method: str, request_target: str) -> str:
        """Compute the lookup key for a request."""
        return RouteKeyBuilder.build(method, request_target, include_query=self.include_query)

    def lookup(self, method: str, request_target: str) -> Resolution:
        """
        Resolve a request and report how it was matched.

        Never fails: with no exact entry and no default entry the empty spec
        is returned.
        """
        key = self.route_key(method, request_target)
        spec = self.table.get(key)
        if spec is not None:
            logger.debug(f"Route {key!r} matched")
            return Resolution(key=key, spec=spec, matched=True)

        default = self.table.default
        if default is not None:
            logger.debug(f"Route {key!r} not configured, using default route")
            return Resolution(key=key, spec=default, matched=False, fallback=True)

        logger.debug(f"Route {key!r} not configured and no default route")
        return Resolution(key=key, spec=ResponseSpec(), matched=False)

    def resolve(self, method: str, request_target: str) -> ResponseSpec:
        """Return the spec to serve for a request."""
        return self.lookup(method, request_target).spec
