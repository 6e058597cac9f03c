"""APIレスポンスの型定義

TypedDictを使用してAPIレスポンスの型安全性を確保します。
"""

from typing_extensions import TypedDict


class PersonaInfo(TypedDict):
    """ペルソナ情報"""
    id: str
    name: str
    icon: str
    color: int
    description: str


class LineView(TypedDict):
    """分類済みの回答行"""
    text: str
    is_heading: bool


class TurnView(TypedDict, total=False):
    """会話ターン（kind が user なら text、bot なら lines を持つ）"""
    kind: str
    text: str
    lines: list[LineView]
    suggestions: list[str]


class SessionStateView(TypedDict):
    """セッション状態"""
    session_id: str
    phase: str
    pending: bool
    error: str | None
    persona: PersonaInfo
    turns: list[TurnView]
    suggestions: list[str]
    recent_prompts: list[str]


class HealthResponse(TypedDict):
    """ヘルスチェックレスポンス"""
    status: str
    version: str
    sessions: int
