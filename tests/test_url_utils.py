"""
Tests for StubServer URL utilities

Tests route key derivation:
- Slash trimming
- Query string stripping
- Configured key normalization
"""

import pytest

from stubserver.common.url_utils import RouteKeyBuilder, DEFAULT_ROUTE_KEY


class TestRouteKeyBuild:
    """Test building lookup keys from requests."""

    @pytest.mark.parametrize('target', ['/a/b/', 'a/b', '/a/b', '//a/b//'])
    def test_trimming_is_idempotent(self, target):
        """All slash variants produce the same key."""
        assert RouteKeyBuilder.build('GET', target) == 'GET|a/b'

    def test_method_upper_cased(self):
        """Method is upper-cased."""
        assert RouteKeyBuilder.build('post', '/users') == 'POST|users'

    def test_root_path(self):
        """Root path gives an empty path part."""
        assert RouteKeyBuilder.build('GET', '/') == 'GET|'

    def test_query_stripped_by_default(self):
        """Query string is not part of the key by default."""
        assert RouteKeyBuilder.build('GET', '/search/?q=1') == 'GET|search'

    def test_query_kept_when_requested(self):
        """Query string stays in the key when asked for."""
        assert RouteKeyBuilder.build('GET', '/search?q=1', include_query=True) == 'GET|search?q=1'

    def test_absolute_form_target(self):
        """Absolute-form targets are reduced to their path."""
        assert RouteKeyBuilder.build('GET', 'http://example.com/a/b?x=1') == 'GET|a/b'


class TestRouteKeyNormalize:
    """Test normalizing configured keys."""

    def test_normalize(self):
        """Configured keys get the same shape as request keys."""
        assert RouteKeyBuilder.normalize('get|/api/users/') == 'GET|api/users'

    def test_default_key_unchanged(self):
        """Reserved fallback key is kept literally."""
        assert RouteKeyBuilder.normalize(DEFAULT_ROUTE_KEY) == 'default|default'

    def test_missing_separator(self):
        """Keys without a separator are rejected."""
        with pytest.raises(ValueError):
            RouteKeyBuilder.normalize('GET /users')

    def test_empty_method(self):
        """Keys with an empty method are rejected."""
        with pytest.raises(ValueError):
            RouteKeyBuilder.split('|users')

    def test_split_keeps_extra_separators_in_path(self):
        """Only the first separator splits."""
        assert RouteKeyBuilder.split('GET|a|b') == ('GET', 'a|b')
