"""
LLM JSON output repair tests.
"""

from pintrends.tools.json_repair import (
    extract_json_string, is_parse_error, parse_json_response, repair_truncated_json,
    strip_code_fences,
)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_parse_with_surrounding_prose():
    assert parse_json_response('Here you go: {"category": "DIY"} Hope this helps!') == {"category": "DIY"}


def test_parse_truncated_object():
    data = parse_json_response('{"category": "DIY", "pinterest_related": ["a", "b"')
    assert data == {"category": "DIY", "pinterest_related": ["a", "b"]}


def test_parse_literal_newline_in_string():
    assert parse_json_response('{"category": "Home\nDecor"}')["category"] == "Home\nDecor"


def test_parse_failure_sentinel():
    data = parse_json_response("no json at all")
    assert is_parse_error(data)


def test_empty_response_is_error():
    assert is_parse_error(parse_json_response("   "))


def test_real_object_with_error_key_is_not_sentinel():
    assert not is_parse_error({"error": "x", "category": "DIY"})


def test_extract_prefers_outermost_structure():
    assert extract_json_string('x [{"a": 1}] y') == '[{"a": 1}]'


def test_repair_closes_open_string():
    assert repair_truncated_json('{"a": "b') == '{"a": "b"}'


def test_truncated_response_rejected_when_repair_disabled():
    text = '{"category": "Home", "pinterest_volume": 70'
    assert parse_json_response(text) == {"category": "Home", "pinterest_volume": 70}
    assert is_parse_error(parse_json_response(text, allow_truncated=False))


def test_complete_response_parses_when_repair_disabled():
    assert parse_json_response('```json\n{"a": [1, 2]}\n```', allow_truncated=False) == {"a": [1, 2]}


def test_extract_ignores_brackets_inside_strings():
    text = 'Result: {"category": "DIY {tips}", "related": ["a]", "b\\"c"]} done'
    assert extract_json_string(text) == '{"category": "DIY {tips}", "related": ["a]", "b\\"c"]}'


def test_repair_closes_nested_brackets_in_order():
    assert repair_truncated_json('{"history": [{"date": "2024-05-01",') == '{"history": [{"date": "2024-05-01"}]}'
