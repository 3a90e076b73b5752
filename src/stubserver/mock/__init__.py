"""
StubServer Mock Module

The request-to-response engine of the stub server.

This module provides:
- Read-only response table built from stub definitions
- Two-tier resolver (exact route, then default route)
- Ordered response emitter (delay, headers, status, body)
- Request tracer for verbose mode
- FastAPI-based server wiring
"""

from .table import ResponseSpec, ResponseTable
from .resolver import Resolver, Resolution
from .emitter import ResponseEmitter, ResponseWriter, parse_header_line
from .tracer import RequestTracer, TraceRecord, BufferedBody
from .server import StubServer, StubConfig, ServerContext, create_stub_server

__all__ = [
    # Table
    'ResponseSpec',
    'ResponseTable',

    # Resolver
    'Resolver',
    'Resolution',

    # Emitter
    'ResponseEmitter',
    'ResponseWriter',
    'parse_header_line',

    # Tracer
    'RequestTracer',
    'TraceRecord',
    'BufferedBody',

    # Server
    'StubServer',
    'StubConfig',
    'ServerContext',
    'create_stub_server',
]
