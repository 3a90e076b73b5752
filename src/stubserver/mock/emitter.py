"""
StubServer Response Emitter

Writes a resolved response spec to the client in a fixed order:

1. Delay (per request, the event loop keeps serving other requests)
2. Headers parsed from the header-description file
3. Status code
4. Body read from the body file

Missing or unreadable files never abort a response; the failing part is
left out and the failure is logged.
"""

import asyncio
import re
import logging
from typing import List, Tuple, Optional, Callable, Awaitable

from fastapi import Response

from .table import ResponseSpec
from ..common import read_resource
from ..errors import ResourceLoadError, MalformedHeaderLine

# Framing headers are computed by the server itself
SKIPPED_HEADERS = {'content-length', 'transfer-encoding', 'connection'}

# RFC 7230 token characters for names; visible latin-1 plus tab and space for values
HEADER_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
HEADER_VALUE_RE = re.compile(r"^[\t\x20-\x7e\x80-\xff]*$")


def parse_header_line(line: str, line_number: int) -> Tuple[str, str]:
    """
    Parse one ``name: value`` line.

    The line is split on the first colon and both sides are trimmed, so
    values may themselves contain colons (``Location: http://x/y``).

    Raises:
        MalformedHeaderLine: If there is no colon, the name is not a valid
            header token, or the value has characters that cannot go on the wire
    """
    name, sep, value = line.partition(':')
    name = name.strip()
    value = value.strip()
    if not sep:
        raise MalformedHeaderLine(line, line_number)
    if not name:
        raise MalformedHeaderLine(line, line_number, "empty header name")
    if not HEADER_NAME_RE.match(name):
        raise MalformedHeaderLine(line, line_number, "invalid header name")
    if not HEADER_VALUE_RE.match(value):
        raise MalformedHeaderLine(line, line_number, "value has control or non-latin-1 characters")
    return name, value


class ResponseWriter:
    """
    Collects a response in emission order.

    Mirrors the transport rule that headers can no longer change once the
    status line is out. ``events`` keeps the order of writes so callers can
    inspect it.
    """

    def __init__(self):
        self.headers: List[Tuple[str, str]] = []
        self.status_code: Optional[int] = None
        self.body = bytearray()
        self.events: List[str] = []

    @property
    def status_written(self) -> bool:
        return self.status_code is not None

    def add_header(self, name: str, value: str):
        if self.status_written:
            raise RuntimeError(f"cannot add header {name!r} after the status was written")
        self.headers.append((name, value))
        self.events.append('header')

    def write_status(self, status_code: int):
        if self.status_written:
            raise RuntimeError("status already written")
        self.status_code = status_code
        self.events.append('status')

    def write_body(self, data: bytes):
        if not self.status_written:
            self.write_status(200)
        self.body.extend(data)
        self.events.append('body')

    def to_response(self) -> Response:
        """Convert the collected response into a Starlette Response."""
        response = Response(content=bytes(self.body), status_code=self.status_code or 200)
        for name, value in self.headers:
            response.headers.append(name, value)
        return response


class ResponseEmitter:
    """
    Emits resolved specs through a ResponseWriter.

    Example:
        emitter = ResponseEmitter(logger)
        writer = ResponseWriter()
        await emitter.emit(writer, spec)
        return writer.to_response()
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        """
        Initialize emitter.

        Args:
            logger: Logger receiving emission records
            sleep: Coroutine function used for the delay (defaults to asyncio.sleep)
        """
        self.logger = logger or logging.getLogger("stubserver.mock")
        self.sleep = sleep or asyncio.sleep

    async def emit(self, writer: ResponseWriter, spec: ResponseSpec):
        """Write ``spec`` to ``writer``: delay, headers, status, body."""
        if spec.delay_seconds > 0:
            self.logger.info(f"Sleeping for {spec.delay_seconds} seconds")
            await self.sleep(spec.delay_seconds)

        self.write_headers(writer, spec)

        status = spec.effective_status
        self.logger.info(f"Writing status code {status}")
        writer.write_status(status)

        self.write_body(writer, spec)

    def write_headers(self, writer: ResponseWriter, spec: ResponseSpec) -> int:
        """
        Add the headers described by ``spec.header_source``.

        Returns:
            Number of headers added
        """
        if not spec.header_source:
            return 0

        try:
            text = read_resource(spec.header_source).decode('utf-8', errors='replace')
        except ResourceLoadError as e:
            self.logger.error(f"Error while sending response headers: {e}")
            return 0

        if not text.strip():
            return 0

        added = 0
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                name, value = parse_header_line(line, line_number)
            except MalformedHeaderLine as e:
                self.logger.warning(f"Skipping header from {spec.header_source}: {e}")
                continue

            if name.lower() in SKIPPED_HEADERS:
                self.logger.debug(f"Skipping framing header {name!r} from {spec.header_source}")
                continue

            writer.add_header(name, value)
            added += 1

        self.logger.info(f"Writing {added} response headers from {spec.header_source}")
        return added

    def write_body(self, writer: ResponseWriter, spec: ResponseSpec) -> int:
        """
        Write the contents of ``spec.body_source``.

        Returns:
            Number of body bytes written
        """
        if not spec.body_source:
            self.logger.debug("No body file configured, sending empty body")
            return 0

        try:
            data = read_resource(spec.body_source)
        except ResourceLoadError as e:
            self.logger.error(f"Error while sending response body: {e}")
            return 0

        writer.write_body(data)
        self.logger.info(f"Writing response body ({len(data)} bytes) from {spec.body_source}")
        return len(data)
