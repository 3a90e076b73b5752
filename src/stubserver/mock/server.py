"""
StubServer Mock Server

FastAPI-based HTTP stub server that answers every request with a canned
response looked up by method and path.

Features:
- Exact ``METHOD|path`` routing with a ``default|default`` fallback
- Canned status, headers (from a header file) and body (from a body file)
- Per-route artificial delay that never blocks other requests
- Optional full request tracing in verbose mode
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, List, Tuple

from fastapi import FastAPI, Request, Response
import uvicorn

from .table import ResponseTable
from .resolver import Resolver
from .emitter import ResponseEmitter, ResponseWriter
from .tracer import RequestTracer, BufferedBody

DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024


@dataclass
class StubConfig:
    """Configuration for stub server behavior."""

    config_file: str = ""
    host: str = "localhost"
    port: int = 8080
    output_file: str = "output.log"
    verbose: bool = False  # Trace every request and mirror logs to the console
    log_level: str = "info"

    # Key requests by path only unless set, then the query string is part of the key
    match_query_string: bool = False

    # Upper bound for the in-memory copy of each request body
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    access_log: bool = False

    def __post_init__(self):
        if not self.host:
            self.host = "localhost"


@dataclass
class ServerContext:
    """Everything a request handler needs, built once at startup."""

    config: StubConfig
    table: ResponseTable
    resolver: Resolver
    emitter: ResponseEmitter
    tracer: RequestTracer
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("stubserver.mock"))

    @classmethod
    def create(cls, config: StubConfig, table: ResponseTable) -> 'ServerContext':
        logger = logging.getLogger("stubserver.mock")
        return cls(
            config=config,
            table=table,
            resolver=Resolver(table, include_query=config.match_query_string),
            emitter=ResponseEmitter(logger),
            tracer=RequestTracer(logging.getLogger("stubserver.mock.trace")),
            logger=logger,
        )


class StubServer:
    """
    FastAPI-based stub server.

    Example:
        # Load stub definitions and start server
        server = StubServer(StubConfig(config_file='stubs.yaml'))
        server.start()

        # With a prebuilt table (tests)
        server = StubServer(StubConfig(), table=ResponseTable.from_definitions({...}))
        client = TestClient(server.app)
    """

    def __init__(self, config: StubConfig, table: Optional[ResponseTable] = None):
        """
        Initialize stub server.

        Args:
            config: Server configuration
            table: Prebuilt response table, loaded from ``config.config_file`` if None

        Raises:
            ConfigError: If the stub-definition file cannot be loaded
        """
        self.config = config
        self.table = table if table is not None else ResponseTable.from_file(config.config_file)
        self.context = ServerContext.create(config, self.table)
        self.logger = self.context.logger
        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with the catch-all route."""
        app = FastAPI(
            title="Stub Server",
            description="HTTP stub server serving canned responses",
            version="1.0.0",
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )

        # methods=None accepts every HTTP method, including non-standard ones
        app.add_route("/{path:path}", self._handle_request, methods=None, include_in_schema=False)

        return app

    async def _handle_request(self, request: Request) -> Response:
        """
        Handle incoming request and serve its canned response.

        Args:
            request: Incoming request

        Returns:
            Response built from the resolved spec
        """
        ctx = self.context
        start_time = time.time()

        method = request.method
        request_target = self._request_target(request)
        client = f"{request.client.host}:{request.client.port}" if request.client else ""

        ctx.logger.info(f"Received request from {client or 'unknown peer'}: {method} {request_target}")

        body = await self._read_body(request)

        if ctx.config.verbose:
            ctx.tracer.trace(
                method=method,
                request_target=request_target,
                headers=self._header_pairs(request),
                query_string=request.scope.get('query_string', b'').decode('latin-1'),
                body=body,
                client=client,
            )

        resolution = ctx.resolver.lookup(method, request_target)
        if not resolution.matched:
            ctx.logger.info(
                f"No route for {resolution.key!r}, "
                f"{'using default route' if resolution.fallback else 'no default route configured'}"
            )

        writer = ResponseWriter()
        await ctx.emitter.emit(writer, resolution.spec)

        elapsed_ms = (time.time() - start_time) * 1000
        ctx.logger.info(f"Responded {writer.status_code} to {method} {request_target} ({elapsed_ms:.1f}ms)")

        return writer.to_response()

    @staticmethod
    def _request_target(request: Request) -> str:
        """Raw request target: undecoded path plus query string."""
        raw_path = request.scope.get('raw_path')
        path = raw_path.decode('latin-1') if raw_path else request.url.path
        # Some ASGI clients put the query string in raw_path as well
        path = path.split('?', 1)[0]
        query = request.scope.get('query_string', b'').decode('latin-1')
        return f"{path}?{query}" if query else path

    @staticmethod
    def _header_pairs(request: Request) -> List[Tuple[str, str]]:
        return [(name, value) for name, value in request.headers.items()]

    async def _read_body(self, request: Request) -> BufferedBody:
        """
        Read the request body once, keeping at most ``max_body_bytes``.

        Bytes beyond the limit are drained and dropped.
        """
        limit = self.config.max_body_bytes
        chunks = []
        kept = 0
        total = 0

        async for chunk in request.stream():
            total += len(chunk)
            if kept < limit:
                piece = chunk[:limit - kept]
                chunks.append(piece)
                kept += len(piece)

        if total > limit:
            self.logger.warning(f"Request body of {total} bytes exceeds {limit} bytes, trace is truncated")

        return BufferedBody(data=b''.join(chunks), truncated=total > limit, total_size=total)

    def start(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the stub server and block until it stops.

        Args:
            host: Host to bind to (overrides config)
            port: Port to bind to (overrides config)
        """
        actual_host = host or self.config.host
        actual_port = port or self.config.port

        print(f"🚀 Stub Server starting...")
        print(f"   Listening on: {actual_host}:{actual_port}")
        print(f"   Routes loaded: {len(self.table)}")
        print(f"   Default route: {'yes' if self.table.default else 'no'}")
        print(f"   Log file: {self.config.output_file}")
        print()

        self.logger.info(f"Listening on {actual_host}:{actual_port}")

        uvicorn.run(
            self.app,
            host=actual_host,
            port=actual_port,
            log_level=self.config.log_level,
            access_log=self.config.access_log
        )

    def get_app(self) -> FastAPI:
        """
        Get the FastAPI app instance for testing or custom deployment.

        Returns:
            FastAPI application instance
        """
        return self.app


def create_stub_server(
    config_file: str,
    host: str = "localhost",
    port: int = 8080,
    verbose: bool = False,
    match_query_string: bool = False,
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
) -> StubServer:
    """
    Convenience function to create and configure a stub server.

    Args:
        config_file: Path to YAML stub-definition file
        host: Host to bind to
        port: Port to bind to
        verbose: Trace every request
        match_query_string: Include the query string in route keys
        max_body_bytes: In-memory bound for each request body

    Returns:
        Configured StubServer instance

    Raises:
        ConfigError: If the stub-definition file cannot be loaded
    """
    config = StubConfig(
        config_file=config_file,
        host=host,
        port=port,
        verbose=verbose,
        match_query_string=match_query_string,
        max_body_bytes=max_body_bytes
    )

    return StubServer(config)
