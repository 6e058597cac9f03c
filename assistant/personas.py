"""
ペルソナ定義モジュール

ペルソナは閉じた列挙型で、各ケースが固定のシステム指示文に対応する。
ペルソナを追加する場合は Persona にケースを追加し、PERSONA_PROFILES に登録する。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from assistant.exceptions import PersonaNotFoundError


class Persona(str, Enum):
    """選択可能なペルソナ"""
    DEFAULT = "default"
    SARCASTIC = "sarcastic"
    PIRATE = "pirate"

    @property
    def profile(self) -> "PersonaProfile":
        return PERSONA_PROFILES[self]

    @property
    def instruction(self) -> str:
        """システム指示文（Gemini APIに渡す用）"""
        return PERSONA_PROFILES[self].instruction


@dataclass(frozen=True)
class PersonaProfile:
    """ペルソナの固定情報"""
    instruction: str
    name: str
    icon: str
    color: int
    description: str

    def get_display_name(self) -> str:
        """表示用の名前を取得（アイコン付き）"""
        return f"{self.icon} {self.name}"


# ペルソナ別の固定設定
PERSONA_PROFILES: Dict[Persona, PersonaProfile] = {
    Persona.DEFAULT: PersonaProfile(
        instruction="You are a helpful and friendly assistant.",
        name="Friendly Assistant",
        icon="🙂",
        color=0x3B82F6,
        description="親切で丁寧なアシスタント",
    ),
    Persona.SARCASTIC: PersonaProfile(
        instruction=(
            "You are a sarcastic teenager who reluctantly answers questions "
            "with wit and a bit of attitude."
        ),
        name="Sarcastic Teen",
        icon="🙄",
        color=0xA855F7,
        description="しぶしぶ答える皮肉屋のティーンエイジャー",
    ),
    Persona.PIRATE: PersonaProfile(
        instruction=(
            "You are a wise old pirate who answers questions with nautical "
            "metaphors and a swashbuckling spirit."
        ),
        name="Wise Pirate",
        icon="🏴‍☠️",
        color=0xF59E0B,
        description="航海の比喩で語る老練な海賊",
    ),
}


def parse_persona(value: str) -> Persona:
    """
    文字列からペルソナを取得

    Args:
        value: ペルソナID（大文字小文字は区別しない）

    Returns:
        対応するペルソナ

    Raises:
        PersonaNotFoundError: 未定義のペルソナIDの場合
    """
    try:
        return Persona(value.strip().lower())
    except ValueError:
        raise PersonaNotFoundError(
            f"Persona '{value}' not found",
            details={"persona_id": value, "available_ids": list_persona_ids()},
        )


def list_persona_ids() -> List[str]:
    """利用可能なペルソナIDのリストを取得"""
    return [persona.value for persona in Persona]
