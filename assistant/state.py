"""会話状態の型定義

会話ターンは追加後に変更されない。状態はセッションの間だけメモリ上に保持される。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from assistant.personas import Persona


class Phase(str, Enum):
    """オーケストレーターの状態"""
    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    AWAITING_SUGGESTIONS = "awaiting_suggestions"


@dataclass(frozen=True)
class UserTurn:
    """ユーザーの発言"""
    text: str
    kind: str = field(default="user", init=False)


@dataclass(frozen=True)
class BotTurn:
    """Botの回答（trim済み・空行除去済みの行）"""
    lines: tuple[str, ...]
    kind: str = field(default="bot", init=False)


ConversationTurn = Union[UserTurn, BotTurn]


@dataclass
class ConversationState:
    """1セッション分の会話状態"""
    turns: List[ConversationTurn] = field(default_factory=list)
    pending: bool = False
    error: Optional[str] = None
    persona: Persona = Persona.DEFAULT
    suggestions: List[str] = field(default_factory=list)
    input_buffer: str = ""

    @property
    def last_turn(self) -> Optional[ConversationTurn]:
        return self.turns[-1] if self.turns else None

    def recent_prompts(self, limit: int = 5) -> List[str]:
        """最近の質問を新しい順に取得"""
        prompts = [turn.text for turn in reversed(self.turns) if isinstance(turn, UserTurn)]
        return prompts[:limit] if limit > 0 else prompts
