"""Tests for requester identity resolution."""

import pytest

from chatrecall.infra.identity import parse_requester_id


class TestParseRequesterId:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("42", 42),
            (" 7 ", 7),
            (None, None),
            ("", None),
            ("abc", None),
            ("0", None),
            ("-1", None),
            ("4.2", None),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_requester_id(raw) == expected
