"""コマンドハンドリングサービス

スラッシュコマンドのビジネスロジックを処理します。
Discord API の詳細から分離された、テスト可能な実装を提供します。
"""

import logging

import discord

from assistant.personas import Persona, list_persona_ids, parse_persona
from assistant.session_manager import SessionManager

logger = logging.getLogger(__name__)


class CommandHandler:
    """コマンドハンドリングサービス

    責務:
    - ペルソナ設定・解除
    - 会話セッションの終了
    - Discord Embedの生成
    """

    def __init__(self, session_manager: SessionManager):
        """初期化

        Args:
            session_manager: 会話セッションマネージャー
        """
        self.session_manager = session_manager

        logger.info("CommandHandler initialized")

    def handle_persona_set(self, channel_id: int, persona_id: str) -> discord.Embed:
        """ペルソナを設定

        会話履歴はそのまま残り、次の質問から新しいペルソナが使われます。

        Args:
            channel_id: チャンネルID
            persona_id: ペルソナID

        Returns:
            設定完了を示すEmbed

        Raises:
            PersonaNotFoundError: ペルソナが見つからない場合
        """
        persona = parse_persona(persona_id)
        self.session_manager.get_or_create(channel_id).select_persona(persona)

        logger.info(
            "Persona set successfully",
            extra={"channel_id": channel_id, "persona_id": persona.value}
        )

        return create_persona_embed(
            title="ペルソナ設定完了",
            persona=persona,
            body=(
                f"{persona.profile.get_display_name()} モードに切り替わりました。\n\n"
                f"**説明**: {persona.profile.description}\n\n"
                f"Botにメンションして質問してみてください。\n"
                f"元に戻すには `/persona reset` を実行してください。"
            ),
        )

    def handle_persona_reset(self, channel_id: int) -> str:
        """ペルソナをデフォルトに戻す

        Args:
            channel_id: チャンネルID

        Returns:
            解除完了メッセージ
        """
        orchestrator = self.session_manager.get_or_create(channel_id)
        old_persona = orchestrator.state.persona

        if old_persona is Persona.DEFAULT:
            return "デフォルトのペルソナが設定されています。"

        orchestrator.select_persona(Persona.DEFAULT)

        logger.info(
            "Persona reset completed",
            extra={"channel_id": channel_id, "old_persona_id": old_persona.value}
        )

        return f"ペルソナ {old_persona.profile.get_display_name()} を解除しました。"

    def handle_persona_get(self, channel_id: int) -> discord.Embed:
        """現在のペルソナを表示するEmbedを作成"""
        persona = self.session_manager.get_or_create(channel_id).state.persona

        return create_persona_embed(
            title="現在のペルソナ",
            persona=persona,
            body=(
                f"{persona.profile.get_display_name()}\n\n"
                f"**説明**: {persona.profile.description}\n\n"
                f"別のペルソナに変更する場合は下のメニューから選択してください。\n"
                f"利用可能なペルソナ: {', '.join(list_persona_ids())}"
            ),
        )

    def handle_clear(self, channel_id: int) -> str:
        """チャンネルの会話セッションを終了

        Returns:
            完了メッセージ
        """
        if not self.session_manager.end_session(channel_id):
            return "このチャンネルには会話履歴がありません。"

        logger.info("Conversation cleared", extra={"channel_id": channel_id})
        return "会話をリセットしました。"


def create_persona_embed(title: str, persona: Persona, body: str) -> discord.Embed:
    """ペルソナ情報を含むEmbedを作成"""
    embed = discord.Embed(
        title=title,
        description=body,
        color=persona.profile.color,
    )
    embed.set_footer(text=f"Persona ID: {persona.value}")
    return embed
