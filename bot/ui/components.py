"""Discord UIコンポーネント

ペルソナ選択のドロップダウンと、次の質問候補（提案）のボタンを提供します。
"""

import logging
from typing import Awaitable, Callable

import discord
from discord.ui import Button, Select, View

from assistant.personas import Persona
from assistant.session_manager import SessionManager
from bot.config import get_settings
from bot.handlers.command_handler import create_persona_embed

logger = logging.getLogger(__name__)

SuggestionCallback = Callable[[discord.Interaction, str], Awaitable[None]]


class PersonaSelectView(View):
    """ペルソナ選択用のドロップダウンメニューを持つView"""

    def __init__(self, session_manager: SessionManager, channel_id: int):
        """初期化

        Args:
            session_manager: 会話セッションマネージャー
            channel_id: チャンネルID
        """
        settings = get_settings()
        super().__init__(timeout=settings.persona_select_timeout)
        self.add_item(PersonaSelect(session_manager, channel_id))

        logger.debug(
            "PersonaSelectView created",
            extra={"channel_id": channel_id, "timeout": settings.persona_select_timeout}
        )


class PersonaSelect(Select):
    """ペルソナを選択するドロップダウンメニュー"""

    def __init__(self, session_manager: SessionManager, channel_id: int):
        self.session_manager = session_manager
        self.channel_id = channel_id

        current = session_manager.get_or_create(channel_id).state.persona
        options = [
            discord.SelectOption(
                label=persona.profile.name,
                value=persona.value,
                description=persona.profile.description,
                emoji=persona.profile.icon,
                default=persona is current,
            )
            for persona in Persona
        ]

        super().__init__(
            placeholder="ペルソナを選択してください...",
            min_values=1,
            max_values=1,
            options=options,
        )

    async def callback(self, interaction: discord.Interaction) -> None:
        """ユーザーが選択したときの処理"""
        persona = Persona(self.values[0])
        self.session_manager.get_or_create(self.channel_id).select_persona(persona)

        logger.info(
            "Persona selected from menu",
            extra={
                "channel_id": self.channel_id,
                "persona_id": persona.value,
                "user_id": interaction.user.id,
            }
        )

        embed = create_persona_embed(
            title="ペルソナ設定完了",
            persona=persona,
            body=f"{persona.profile.get_display_name()} モードに切り替わりました。",
        )
        await interaction.response.send_message(embed=embed)


class SuggestionView(View):
    """提案ボタン（チップ）を並べたView"""

    def __init__(self, suggestions: list[str], on_select: SuggestionCallback):
        """初期化

        Args:
            suggestions: 提案のリスト
            on_select: ボタンが押されたときに提案文を受け取るコールバック
        """
        settings = get_settings()
        super().__init__(timeout=settings.suggestion_view_timeout)

        # Discordは1つのViewにつき最大25個のコンポーネントまで
        for suggestion in suggestions[:25]:
            self.add_item(
                SuggestionButton(suggestion, on_select, settings.suggestion_label_max_length)
            )


class SuggestionButton(Button):
    """1件の提案を表すボタン"""

    def __init__(self, suggestion: str, on_select: SuggestionCallback, label_max_length: int):
        label = suggestion
        if len(label) > label_max_length:
            label = label[:label_max_length - 1] + "…"

        super().__init__(label=label, style=discord.ButtonStyle.secondary)
        self.suggestion = suggestion
        self.on_select = on_select

    async def callback(self, interaction: discord.Interaction) -> None:
        """提案をクリックしたときの処理（質問として送信）"""
        logger.info(
            "Suggestion clicked",
            extra={"channel_id": interaction.channel_id, "user_id": interaction.user.id},
        )
        await self.on_select(interaction, self.suggestion)
