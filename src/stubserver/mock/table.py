"""
StubServer Response Table

Read-only mapping from ``METHOD|path`` route keys to canned response specs,
built once at startup from a stub-definition file.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Any, Optional, Iterator, Mapping

from ..common import StubDefinitionLoader, RouteKeyBuilder, DEFAULT_ROUTE_KEY
from ..errors import ConfigError

logger = logging.getLogger("stubserver.mock.table")

# Accepted YAML field names per attribute, short names first
FIELD_ALIASES = {
    'status_code': ('httpcode', 'status_code', 'status'),
    'delay_seconds': ('delay', 'delay_seconds'),
    'header_source': ('header', 'header_source', 'headers_file'),
    'body_source': ('body', 'body_source', 'body_file'),
}

DEFAULT_STATUS_CODE = 200


@dataclass(frozen=True)
class ResponseSpec:
    """Canned response for one route."""

    status_code: int = 0
    delay_seconds: int = 0
    header_source: str = ""
    body_source: str = ""

    @property
    def effective_status(self) -> int:
        """Status to send, 200 when none was configured."""
        return self.status_code or DEFAULT_STATUS_CODE

    @property
    def is_empty(self) -> bool:
        """True when every field holds its zero value."""
        return self == ResponseSpec()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], key: str = "") -> 'ResponseSpec':
        """
        Create ResponseSpec from a raw definition mapping.

        Args:
            data: Raw definition as loaded from YAML
            key: Route key, used in error messages

        Raises:
            ConfigError: If a field has the wrong type or value
        """
        if not isinstance(data, dict):
            raise ConfigError(f"definition for {key!r} must be a mapping, found {type(data).__name__}")

        known = {alias for aliases in FIELD_ALIASES.values() for alias in aliases}
        for name in data:
            if name not in known:
                logger.warning(f"Ignoring unknown field {name!r} in definition for {key!r}")

        values = {}
        for attr, aliases in FIELD_ALIASES.items():
            present = [alias for alias in aliases if alias in data and data[alias] is not None]
            if len(present) > 1:
                raise ConfigError(f"definition for {key!r} sets {attr} more than once: {', '.join(present)}")
            if present:
                values[attr] = data[present[0]]

        status_code = _as_int(values.get('status_code', 0), 'status code', key)
        if status_code and not 200 <= status_code <= 599:
            raise ConfigError(f"status code {status_code} for {key!r} is outside 200-599")

        delay_seconds = _as_int(values.get('delay_seconds', 0), 'delay', key)
        if delay_seconds < 0:
            raise ConfigError(f"delay for {key!r} must not be negative")

        return cls(
            status_code=status_code,
            delay_seconds=delay_seconds,
            header_source=_as_path(values.get('header_source', ''), 'header file', key),
            body_source=_as_path(values.get('body_source', ''), 'body file', key),
        )


def _as_int(value: Any, label: str, key: str) -> int:
    # bool is an int subclass; "true" is never a valid status or delay
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{label} for {key!r} must be an integer, found {value!r}")
    return value


def _as_path(value: Any, label: str, key: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{label} for {key!r} must be a string path, found {value!r}")
    return value


class ResponseTable:
    """
    Immutable route table.

    Lookups return ``None`` for unknown keys; callers decide the fallback.
    The reserved ``default|default`` entry is exposed as :attr:`default`.

    Example:
        table = ResponseTable.from_file("stubs.yaml")
        spec = table.get("GET|api/users")
    """

    def __init__(self, entries: Optional[Mapping[str, ResponseSpec]] = None):
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def from_file(cls, config_file: str) -> 'ResponseTable':
        """
        Build the table from a YAML stub-definition file.

        Raises:
            ConfigError: If the file is unreadable or malformed
        """
        definitions = StubDefinitionLoader(config_file).load()
        try:
            table = cls.from_definitions(definitions)
        except ConfigError as e:
            if e.source is None:
                raise ConfigError(str(e), config_file) from e
            raise
        logger.info(f"Loaded {len(table)} routes from {config_file}")
        return table

    @classmethod
    def from_definitions(cls, definitions: Dict[str, Any]) -> 'ResponseTable':
        """
        Build the table from an already parsed definition mapping.

        Keys are normalized (method upper-cased, path slash-trimmed). Entries
        whose definition is null or has only zero values are dropped so they
        resolve through the fallback.

        Raises:
            ConfigError: If a key or a definition is malformed
        """
        entries: Dict[str, ResponseSpec] = {}

        for raw_key, definition in definitions.items():
            if not isinstance(raw_key, str):
                raise ConfigError(f"route key {raw_key!r} must be a string")
            try:
                key = RouteKeyBuilder.normalize(raw_key)
            except ValueError as e:
                raise ConfigError(str(e)) from e

            spec = ResponseSpec.from_dict(definition or {}, raw_key)
            if spec.is_empty:
                logger.warning(f"Route {raw_key!r} has an empty definition, it will use the default route")
                continue

            if key in entries:
                logger.warning(f"Route {raw_key!r} duplicates {key!r}, the later definition wins")
            entries[key] = spec

        return cls(entries)

    def get(self, key: str) -> Optional[ResponseSpec]:
        """Exact lookup, ``None`` when the key is not configured."""
        return self._entries.get(key)

    @property
    def default(self) -> Optional[ResponseSpec]:
        """The ``default|default`` fallback entry, if configured."""
        return self._entries.get(DEFAULT_ROUTE_KEY)

    def keys(self):
        return self._entries.keys()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
