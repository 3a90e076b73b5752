"""
Tests for StubServer request tracer

Tests trace capture:
- Headers with repeated names
- Query and URL-encoded body form fields
- Truncated bodies
- Rendered text layout
"""

import logging

from stubserver.mock.tracer import RequestTracer, TraceRecord, BufferedBody


FORM_HEADERS = [
    ('host', 'localhost'),
    ('content-type', 'application/x-www-form-urlencoded'),
    ('accept', 'text/html'),
    ('accept', 'application/json'),
]


class TestCapture:
    """Test building trace records."""

    def test_basic_fields(self):
        record = RequestTracer().capture(
            method='GET',
            request_target='/a/b?x=1',
            headers=[('host', 'localhost')],
            query_string='x=1',
            body=BufferedBody(),
            client='127.0.0.1:5000'
        )

        assert record.method == 'GET'
        assert record.request_target == '/a/b?x=1'
        assert record.client == '127.0.0.1:5000'
        assert record.form == [('x', '1')]
        assert record.post_form == []
        assert record.body == ''

    def test_repeated_headers_kept_in_order(self):
        record = RequestTracer().capture('GET', '/', FORM_HEADERS, '', BufferedBody())

        accepts = [v for k, v in record.headers if k == 'accept']
        assert accepts == ['text/html', 'application/json']

    def test_post_form_parsed(self):
        body = BufferedBody(data=b'name=Jane&tag=a&tag=b', total_size=21)

        record = RequestTracer().capture('POST', '/users?tag=q', FORM_HEADERS, 'tag=q', body)

        assert record.post_form == [('name', 'Jane'), ('tag', 'a'), ('tag', 'b')]
        assert record.to_dict()['form'] == {'name': ['Jane'], 'tag': ['a', 'b', 'q']}
        assert record.body == 'name=Jane&tag=a&tag=b'

    def test_form_body_ignored_for_get(self):
        """URL-encoded bodies only count as form fields for POST, PUT and PATCH."""
        body = BufferedBody(data=b'name=Jane', total_size=9)

        record = RequestTracer().capture('GET', '/users?x=1', FORM_HEADERS, 'x=1', body)

        assert record.post_form == []
        assert record.form == [('x', '1')]
        assert record.body == 'name=Jane'

    def test_form_body_parsed_for_put_and_patch(self):
        for method in ('PUT', 'PATCH'):
            record = RequestTracer().capture(method, '/', FORM_HEADERS, '', BufferedBody(data=b'a=1', total_size=3))

            assert record.post_form == [('a', '1')]

    def test_json_body_not_form(self):
        body = BufferedBody(data=b'{"name": "Jane"}', total_size=16)

        record = RequestTracer().capture(
            'POST', '/users', [('content-type', 'application/json')], '', body
        )

        assert record.post_form == []
        assert record.body == '{"name": "Jane"}'

    def test_content_type_with_charset(self):
        headers = [('Content-Type', 'application/x-www-form-urlencoded; charset=utf-8')]

        record = RequestTracer().capture('POST', '/', headers, '', BufferedBody(data=b'a=1', total_size=3))

        assert record.post_form == [('a', '1')]

    def test_truncated_body_not_parsed_as_form(self):
        body = BufferedBody(data=b'a=1&b=', truncated=True, total_size=100)

        record = RequestTracer().capture('POST', '/', FORM_HEADERS, '', body)

        assert record.post_form == []
        assert record.body_truncated
        assert record.body_size == 100

    def test_undecodable_body(self):
        body = BufferedBody(data=b'\xff\xfeok', total_size=4)

        record = RequestTracer().capture('PUT', '/', [], '', body)

        assert record.body.endswith('ok')


class TestRender:
    """Test rendered trace text."""

    def test_render_layout(self):
        record = TraceRecord(
            request_target='/users?x=1',
            method='POST',
            headers=[('accept', 'text/html'), ('accept', 'application/json')],
            form=[('x', '1')],
            post_form=[],
            body='payload'
        )

        text = record.render()

        assert '---- Incoming request trace ----' in text
        assert 'Request URL:: /users?x=1' in text
        assert 'HTTP Method:: POST' in text
        assert '\taccept: text/html\n\taccept: application/json' in text
        assert "\tx : ['1']" in text
        assert text.endswith('payload\n---------------End----------------')

    def test_render_truncated(self):
        record = TraceRecord(request_target='/', method='POST', body='abc', body_truncated=True, body_size=10)

        assert 'truncated, 10 bytes received' in record.render()


class TestTrace:
    """Test logging traces."""

    def test_trace_logs_rendered_record(self, caplog):
        tracer = RequestTracer(logging.getLogger('stubserver.mock.trace'))

        with caplog.at_level(logging.INFO, logger='stubserver'):
            record = tracer.trace('GET', '/status', [('host', 'localhost')], '', BufferedBody())

        assert record.method == 'GET'
        assert 'Request URL:: /status' in caplog.text
