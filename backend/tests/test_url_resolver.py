"""
URL resolver tests

Run:
    pytest backend/tests/test_url_resolver.py -v
"""

import pytest

from smart_filter.errors import URLDecodeError
from smart_filter.url_resolver import decode_once, resolve_image_url


PLAIN = "https://example.com/a.png"
ONCE = "https%3A%2F%2Fexample.com%2Fa.png"
TWICE = "https%253A%252F%252Fexample.com%252Fa.png"
THRICE = "https%25253A%25252F%25252Fexample.com%25252Fa.png"


class TestResolveImageUrl:
    """Repeated percent-decoding"""

    @pytest.mark.parametrize("encoded", [ONCE, TWICE, THRICE])
    def test_peels_every_layer(self, encoded):
        assert resolve_image_url(encoded) == PLAIN

    def test_decoded_url_is_unchanged(self):
        assert resolve_image_url(PLAIN) == PLAIN

    def test_idempotent(self):
        once = resolve_image_url(TWICE)
        assert resolve_image_url(once) == once

    def test_single_layer_needs_one_pass(self):
        assert resolve_image_url(ONCE, max_passes=1) == PLAIN

    def test_pass_cap_returns_best_effort(self):
        assert resolve_image_url(THRICE, max_passes=1) == TWICE

    def test_stray_percent_does_not_crash(self):
        assert resolve_image_url("https://example.com/100%.png") == "https://example.com/100%.png"

    def test_failure_keeps_last_good_value(self):
        # First layer decodes to a string holding a stray '%'
        assert resolve_image_url("https%3A%2F%2Fexample.com%2F50%25off") == "https://example.com/50%off"

    def test_failure_before_any_pass_keeps_input(self):
        value = "https%3A%2F%2Fexample.com%2F50%off"
        assert resolve_image_url(value) == value

    def test_invalid_utf8_keeps_input(self):
        assert resolve_image_url("https://example.com/%C3%28.png") == "https://example.com/%C3%28.png"

    def test_plus_is_not_a_space(self):
        assert resolve_image_url("a%2Bb+c") == "a+b+c"

    def test_unicode_escapes(self):
        assert resolve_image_url("https://example.com/%E5%9B%BE.png") == "https://example.com/图.png"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_input(self, value):
        assert resolve_image_url(value) == value


class TestDecodeOnce:

    def test_decodes_one_layer(self):
        assert decode_once(TWICE) == ONCE

    @pytest.mark.parametrize("value", ["100%", "%zz", "%4"])
    def test_malformed_escape(self, value):
        with pytest.raises(URLDecodeError):
            decode_once(value)
