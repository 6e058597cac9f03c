"""Gemini generateContent API の型定義

TypedDictを使用してリクエスト・レスポンスの形を明示します。
"""

from __future__ import annotations

from typing_extensions import NotRequired, TypedDict


class Part(TypedDict):
    """テキストパート"""
    text: str


class Content(TypedDict):
    """パートの集合"""
    parts: list[Part]


class ResponseSchema(TypedDict):
    """構造化出力のスキーマ"""
    type: str
    items: NotRequired[ResponseSchema]


class GenerationConfig(TypedDict):
    """生成設定"""
    responseMimeType: str
    responseSchema: ResponseSchema


class GenerateContentRequest(TypedDict):
    """generateContent リクエスト"""
    contents: list[Content]
    systemInstruction: NotRequired[Content]
    generationConfig: NotRequired[GenerationConfig]

