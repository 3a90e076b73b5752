"""
StubServer Request Tracer

Captures incoming request metadata into a readable trace for the log.

Tracing is read-only: it works on a body that was buffered once by the
server and never changes the response.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, Optional
from urllib.parse import parse_qsl

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'

# Only these methods carry form fields in the body
FORM_BODY_METHODS = {'POST', 'PUT', 'PATCH'}


@dataclass
class BufferedBody:
    """Request body read once into memory, bounded by a byte limit."""

    data: bytes = b''
    truncated: bool = False
    total_size: int = 0

    @property
    def text(self) -> str:
        return self.data.decode('utf-8', errors='replace')


@dataclass
class TraceRecord:
    """Everything captured about one request."""

    request_target: str
    method: str
    client: str = ""
    headers: List[Tuple[str, str]] = field(default_factory=list)
    form: List[Tuple[str, str]] = field(default_factory=list)
    post_form: List[Tuple[str, str]] = field(default_factory=list)
    body: str = ""
    body_truncated: bool = False
    body_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'request_target': self.request_target,
            'method': self.method,
            'client': self.client,
            'headers': [list(h) for h in self.headers],
            'form': _group(self.form),
            'post_form': _group(self.post_form),
            'body': self.body,
            'body_truncated': self.body_truncated,
            'body_size': self.body_size,
        }

    def render(self) -> str:
        """Render the trace as multi-line text."""
        lines = [
            "Request dump ..",
            "",
            "---- Incoming request trace ----",
            "",
            f"Request URL:: {self.request_target}",
            f"HTTP Method:: {self.method}",
        ]
        if self.client:
            lines.append(f"Client:: {self.client}")

        lines.append("")
        lines.append("Header:: ")
        for name, value in self.headers:
            lines.append(f"\t{name}: {value}")

        lines.append("")
        lines.append("request.Form::")
        for name, values in _group(self.form).items():
            lines.append(f"\t{name} : {values}")

        lines.append("")
        lines.append("request.PostForm::")
        for name, values in _group(self.post_form).items():
            lines.append(f"\t{name} : {values}")

        lines.append("")
        if self.body_truncated:
            lines.append(f"request.Body:: (truncated, {self.body_size} bytes received)")
        else:
            lines.append("request.Body::")
        lines.append("")
        lines.append(self.body)
        lines.append("---------------End----------------")
        return "\n".join(lines)


def _group(pairs: List[Tuple[str, str]]) -> Dict[str, List[str]]:
    # Keeps first-seen key order and the order of values under each key
    grouped: Dict[str, List[str]] = {}
    for name, value in pairs:
        grouped.setdefault(name, []).append(value)
    return grouped


class RequestTracer:
    """
    Builds and logs request traces.

    Example:
        tracer = RequestTracer(logger)
        record = tracer.trace(method, target, headers, query, body)
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("stubserver.mock.trace")

    def capture(
        self,
        method: str,
        request_target: str,
        headers: List[Tuple[str, str]],
        query_string: str,
        body: BufferedBody,
        client: str = ""
    ) -> TraceRecord:
        """
        Build a trace record without logging it.

        Args:
            method: HTTP method
            request_target: Raw request target
            headers: Header pairs as received, repeated names kept
            query_string: Raw query string (without ``?``)
            body: Buffered request body
            client: Peer address, ``host:port``

        Returns:
            TraceRecord for the request
        """
        post_form: List[Tuple[str, str]] = []
        content_type = next((v for k, v in headers if k.lower() == 'content-type'), '')
        is_form = content_type.split(';', 1)[0].strip().lower() == FORM_CONTENT_TYPE
        if is_form and method.upper() in FORM_BODY_METHODS and not body.truncated:
            post_form = parse_qsl(body.text, keep_blank_values=True)

        # Body fields first, then query fields
        form = post_form + parse_qsl(query_string, keep_blank_values=True)

        return TraceRecord(
            request_target=request_target,
            method=method,
            client=client,
            headers=list(headers),
            form=form,
            post_form=post_form,
            body=body.text,
            body_truncated=body.truncated,
            body_size=body.total_size,
        )

    def trace(
        self,
        method: str,
        request_target: str,
        headers: List[Tuple[str, str]],
        query_string: str,
        body: BufferedBody,
        client: str = ""
    ) -> TraceRecord:
        """Capture a trace record and write it to the log."""
        record = self.capture(method, request_target, headers, query_string, body, client)
        self.logger.info(record.render())
        return record
