"""メッセージハンドリングサービス

メッセージイベントのビジネスロジックを処理します。
Discord メッセージオブジェクトの処理から分離された実装を提供します。
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from assistant.exceptions import SessionNotFoundError
from assistant.orchestrator import ConversationOrchestrator
from assistant.session_manager import SessionManager
from assistant.state import BotTurn
from bot.formatting import render_bot_turn, split_message

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "前の質問に回答中です。回答が届くまでお待ちください。"


@dataclass
class PromptOutcome:
    """質問処理の結果

    chunks は送信すべきメッセージ（Discordの文字数上限で分割済み）。
    bot_turn がある場合のみ、後から提案が届く可能性があります。
    """
    chunks: list[str] = field(default_factory=list)
    bot_turn: Optional[BotTurn] = None

    @property
    def answered(self) -> bool:
        return self.bot_turn is not None


class MessageHandler:
    """メッセージハンドリングサービス

    責務:
    - チャンネルのセッションへの質問送信
    - 回答・エラーの整形
    - 提案の取得待ち
    """

    def __init__(
        self,
        session_manager: SessionManager,
        message_max_length: int = 2000,
    ):
        """初期化

        Args:
            session_manager: 会話セッションマネージャー
            message_max_length: 1メッセージの最大文字数
        """
        self.session_manager = session_manager
        self.message_max_length = message_max_length

        logger.info("MessageHandler initialized")

    async def handle_prompt(self, channel_id: int, content: str) -> PromptOutcome:
        """質問を送信して返信内容を作成

        Args:
            channel_id: チャンネルID（セッションキー）
            content: 質問（メンション部分は除去済み）

        Returns:
            返信内容。空の質問の場合は chunks が空になります
        """
        orchestrator = self.session_manager.get_or_create(channel_id)
        return await self._submit(channel_id, content, orchestrator, orchestrator.submit)

    async def handle_suggestion(self, channel_id: int, suggestion: str) -> PromptOutcome:
        """提案ボタンのクリックを質問として送信"""
        orchestrator = self.session_manager.get_or_create(channel_id)
        return await self._submit(channel_id, suggestion, orchestrator, orchestrator.click_suggestion)

    async def _submit(
        self,
        channel_id: int,
        content: str,
        orchestrator: ConversationOrchestrator,
        submit: Callable[[str], Awaitable[bool]],
    ) -> PromptOutcome:
        if not content.strip():
            return PromptOutcome()

        if orchestrator.state.pending:
            logger.info(
                "Prompt rejected while answer is pending",
                extra={"channel_id": channel_id},
            )
            return PromptOutcome(chunks=[BUSY_MESSAGE])

        answered = await submit(content)
        state = orchestrator.state

        if not answered:
            logger.info(
                "Prompt did not produce an answer",
                extra={"channel_id": channel_id, "has_error": state.error is not None},
            )
            return PromptOutcome(chunks=[state.error] if state.error else [])

        bot_turn = state.last_turn
        if not isinstance(bot_turn, BotTurn):
            return PromptOutcome()
        text = render_bot_turn(bot_turn)

        logger.info(
            "Answer rendered",
            extra={
                "channel_id": channel_id,
                "persona_id": state.persona.value,
                "response_length": len(text),
            }
        )

        return PromptOutcome(
            chunks=split_message(text, self.message_max_length),
            bot_turn=bot_turn,
        )

    async def wait_for_suggestions(self, channel_id: int, bot_turn: BotTurn) -> list[str]:
        """回答ターンに対する提案の取得を待って結果を返す

        Args:
            channel_id: チャンネルID
            bot_turn: 提案の対象となる回答ターン

        Returns:
            ボタンにできる提案のリスト（空文字は除く。失敗した場合や、
            より新しい質問があった場合は空）
        """
        try:
            orchestrator = self.session_manager.get(channel_id)
        except SessionNotFoundError:
            logger.debug(
                "Session ended before suggestions arrived",
                extra={"channel_id": channel_id},
            )
            return []
        suggestions = await orchestrator.wait_for_suggestions()
        if orchestrator.state.last_turn is not bot_turn:
            return []
        # Discordのボタンは空ラベルを受け付けない
        return [s for s in suggestions if s.strip()]

    def extract_prompt(self, content: str, bot_user_id: Optional[int]) -> str:
        """メンションを除去して質問を抽出"""
        if bot_user_id is not None:
            content = content.replace(f"<@{bot_user_id}>", "")
            content = content.replace(f"<@!{bot_user_id}>", "")
        return content.strip()
