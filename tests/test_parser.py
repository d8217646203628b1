"""Tests for extracting ``{summary, messageIds}`` from model text."""

import pytest

from chatrecall.core.context.errors import UnparsableResponseError
from chatrecall.core.context.parser import (
    coerce_message_id,
    parse_llm_result,
    slice_json_object,
    strip_code_fences,
)


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_uppercase_language_tag(self):
        assert strip_code_fences('```JSON {"a": 1}```') == '{"a": 1}'

    def test_no_fence_untouched(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


class TestSliceJsonObject:
    def test_surrounding_prose(self):
        text = 'Here you go: {"summary": "x"} Hope this helps.'
        assert slice_json_object(text) == '{"summary": "x"}'

    def test_outermost_braces(self):
        text = 'a {"x": {"y": 1}} b'
        assert slice_json_object(text) == '{"x": {"y": 1}}'

    @pytest.mark.parametrize("text", ["no braces here", "} backwards {", ""])
    def test_no_object(self, text):
        with pytest.raises(UnparsableResponseError):
            slice_json_object(text)


class TestCoerceMessageId:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (12, 12),
            (12.0, 12),
            ("12", 12),
            (" 7 ", 7),
            (12.5, None),
            ("abc", None),
            (True, None),
            (None, None),
            ([1], None),
            ({"id": 1}, None),
            ("-3", -3),
            ("+4", 4),
            ("1_2", None),
            ("١٢", None),
            ("12.0", None),
            ("0x1f", None),
            ("", None),
        ],
    )
    def test_coercion(self, value, expected):
        assert coerce_message_id(value) == expected


class TestParseLlmResult:
    def test_plain_json(self):
        result = parse_llm_result('{"summary": "deploy plan", "messageIds": [3, 1]}')
        assert result.summary == "deploy plan"
        assert result.message_ids == [3, 1]

    def test_fenced_json(self):
        raw = '```json\n{"summary": "s", "messageIds": [1, 2]}\n```'
        assert parse_llm_result(raw).message_ids == [1, 2]

    def test_prose_around_json(self):
        raw = 'Sure! Here is the answer:\n{"summary": "s", "messageIds": [9]}\nLet me know.'
        result = parse_llm_result(raw)
        assert result.summary == "s"
        assert result.message_ids == [9]

    def test_mixed_id_types(self):
        raw = '{"summary": "s", "messageIds": [10, "11", "x", 12.0, 13.5, null, true]}'
        assert parse_llm_result(raw).message_ids == [10, 11, 12]

    def test_missing_summary_is_empty(self):
        result = parse_llm_result('{"messageIds": [1]}')
        assert result.summary == ""
        assert result.message_ids == [1]

    def test_non_string_summary_is_empty(self):
        assert parse_llm_result('{"summary": 5, "messageIds": []}').summary == ""

    def test_missing_ids_is_empty(self):
        assert parse_llm_result('{"summary": "s"}').message_ids == []

    def test_ids_not_a_list(self):
        assert parse_llm_result('{"summary": "s", "messageIds": "1,2"}').message_ids == []

    def test_dedup_then_truncate(self):
        raw = '{"summary": "s", "messageIds": [5, 5, "5", 4, 3, 2, 1]}'
        assert parse_llm_result(raw).message_ids == [5, 4, 3]

    def test_custom_max_ids(self):
        raw = '{"summary": "s", "messageIds": [1, 2, 3, 4]}'
        assert parse_llm_result(raw, max_ids=1).message_ids == [1]

    def test_ids_are_not_checked_against_anything(self):
        raw = '{"summary": "s", "messageIds": [999999]}'
        assert parse_llm_result(raw).message_ids == [999999]

    def test_brace_less_prose_rejected(self):
        with pytest.raises(UnparsableResponseError):
            parse_llm_result("I couldn't find any relevant messages.")

    def test_invalid_json_rejected(self):
        with pytest.raises(UnparsableResponseError):
            parse_llm_result("{summary: 's', messageIds: [1]}")

    def test_deeply_nested_rejected(self):
        depth = 100_000
        raw = '{"summary": "s", "messageIds": ' + "[" * depth + "]" * depth + "}"
        with pytest.raises(UnparsableResponseError):
            parse_llm_result(raw)

    def test_garbled_id_strings_skipped(self):
        raw = '{"summary": "s", "messageIds": ["1_2", "١٢", 7]}'
        assert parse_llm_result(raw).message_ids == [7]

    def test_two_objects_rejected(self):
        with pytest.raises(UnparsableResponseError):
            parse_llm_result('{"summary": "a"} or maybe {"summary": "b"}')
