"""
StubServer

Configurable HTTP stub server: canned status, headers and body per
``METHOD|path`` route, with optional delay and request tracing.
"""

from .errors import (
    StubServerError,
    ConfigError,
    ResourceLoadError,
    MalformedHeaderLine,
    StartupUsageError,
    LogSinkError,
)
from .mock import StubServer, StubConfig, ResponseTable, ResponseSpec, Resolver, create_stub_server

__all__ = [
    'StubServerError',
    'ConfigError',
    'ResourceLoadError',
    'MalformedHeaderLine',
    'StartupUsageError',
    'LogSinkError',
    'StubServer',
    'StubConfig',
    'ResponseTable',
    'ResponseSpec',
    'Resolver',
    'create_stub_server',
]

__version__ = '1.0.0'
