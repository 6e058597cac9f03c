"""Gemini レスポンスの解析

candidates[0].content.parts[0].text を取り出し、
回答の場合は行のリストへ、提案の場合は文字列のリストへ変換します。
"""

import logging
from typing import Any, List

from pydantic import TypeAdapter, ValidationError

from assistant.exceptions import InvalidSuggestionFormat, MalformedReply

logger = logging.getLogger(__name__)

_SUGGESTIONS_ADAPTER = TypeAdapter(List[str])


def extract_reply_text(reply: Any) -> str:
    """レスポンスから最初の候補の最初のテキストを取り出す

    Args:
        reply: generateContent のレスポンス（デコード済みJSON）

    Returns:
        テキスト

    Raises:
        MalformedReply: 途中のいずれかの要素が存在しない場合
    """
    try:
        text = reply["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedReply(
            "Invalid response structure from Gemini",
            details={"error": repr(e)},
        ) from e

    if not isinstance(text, str):
        raise MalformedReply(
            "Invalid response structure from Gemini: text is not a string",
            details={"type": type(text).__name__},
        )
    return text


def split_answer_lines(text: str) -> List[str]:
    """改行で分割し、各行をtrimして空行を除く（順序は保持）"""
    return [line.strip() for line in text.split("\n") if line.strip()]


def parse_answer(reply: Any) -> List[str]:
    """
    回答レスポンスを行のリストに変換

    Raises:
        MalformedReply: テキストが存在しない、または空白のみの場合
    """
    text = extract_reply_text(reply)
    if not text.strip():
        raise MalformedReply("Empty answer text from Gemini")
    return split_answer_lines(text)


def parse_suggestions(reply: Any) -> List[str]:
    """
    提案レスポンスを文字列のリストに変換

    Returns:
        デコードした配列をそのまま返す（要素の加工はしない）

    Raises:
        MalformedReply: テキストが存在しない場合
        InvalidSuggestionFormat: テキストが文字列のJSON配列でない場合
    """
    text = extract_reply_text(reply)
    try:
        suggestions = _SUGGESTIONS_ADAPTER.validate_json(text)
    except ValidationError as e:
        logger.debug(
            "Suggestion payload rejected",
            extra={"payload_length": len(text), "error_count": e.error_count()},
        )
        raise InvalidSuggestionFormat(
            "Suggestion payload is not a JSON array of strings",
            details={"error": str(e)},
        ) from e

    return suggestions
