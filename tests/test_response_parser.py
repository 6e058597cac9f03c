"""レスポンス解析のテスト"""

import pytest

from assistant.exceptions import InvalidSuggestionFormat, MalformedReply
from assistant.response_parser import extract_reply_text, parse_answer, parse_suggestions
from tests.fakes import make_reply


def test_parse_answer_drops_empty_lines():
    assert parse_answer(make_reply("A\nB\n\nC")) == ["A", "B", "C"]


def test_parse_answer_trims_lines_and_keeps_order():
    reply = make_reply("  **Title**  \n\n   \n second \nthird")
    assert parse_answer(reply) == ["**Title**", "second", "third"]


@pytest.mark.parametrize(
    "reply",
    [
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {}}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{}]}}]},
        {"candidates": [{"content": {"parts": [{"text": None}]}}]},
        {"candidates": None},
        [],
        None,
    ],
)
def test_missing_text_is_malformed(reply):
    with pytest.raises(MalformedReply):
        parse_answer(reply)
    with pytest.raises(MalformedReply):
        parse_suggestions(reply)


@pytest.mark.parametrize("text", ["", "   ", "\n\n \n"])
def test_blank_answer_is_malformed(text):
    with pytest.raises(MalformedReply):
        parse_answer(make_reply(text))


def test_extract_reply_text_returns_raw_text():
    assert extract_reply_text(make_reply(" raw\n\ntext ")) == " raw\n\ntext "


def test_parse_suggestions():
    assert parse_suggestions(make_reply('["a","b"]')) == ["a", "b"]


def test_parse_suggestions_allows_empty_array():
    assert parse_suggestions(make_reply("[]")) == []


def test_parse_suggestions_returns_entries_unchanged():
    assert parse_suggestions(make_reply('[" a ", "", "b"]')) == [" a ", "", "b"]


@pytest.mark.parametrize(
    "text",
    ["not json", '{"a": 1}', '"single"', "[1, 2]", '["a", null]', "[\"a\""],
)
def test_invalid_suggestion_format(text):
    with pytest.raises(InvalidSuggestionFormat):
        parse_suggestions(make_reply(text))
