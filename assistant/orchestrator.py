"""会話オーケストレーター

質問 → 回答 → 次の質問候補（提案）のサイクルを駆動し、会話状態を更新します。

- 回答リクエストは同時に1つまで。処理中の submit は無視する（キューイングしない）
- 提案リクエストは回答成功後にバックグラウンドで実行し、Idle への遷移を待たせない
- 提案の結果は、それを生んだ回答ターンが最後のターンである場合にのみ反映する
"""

import asyncio
import logging
from typing import List, Optional, Set

from assistant.exceptions import AssistantError, MalformedReply, NetworkFailure
from assistant.gemini_client import GeminiClient
from assistant.personas import Persona
from assistant.request_builder import build_answer_request, build_suggestion_request
from assistant.response_parser import extract_reply_text, parse_answer, parse_suggestions
from assistant.state import BotTurn, ConversationState, Phase, UserTurn

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Sorry, something went wrong. Please try again."


class ConversationOrchestrator:
    """会話オーケストレーター

    ConversationState を変更するのはこのクラスだけです。
    単一のイベントループ上で動作し、ロックは使用しません。
    """

    def __init__(
        self,
        client: GeminiClient,
        persona: Persona = Persona.DEFAULT,
    ) -> None:
        """初期化

        Args:
            client: Geminiクライアント
            persona: 初期ペルソナ
        """
        self.client = client
        self.state = ConversationState(persona=persona)
        self._suggestion_task: Optional[asyncio.Task] = None
        self._background_tasks: Set[asyncio.Task] = set()

    @property
    def phase(self) -> Phase:
        if self.state.pending:
            return Phase.AWAITING_ANSWER
        if self._suggestion_task is not None and not self._suggestion_task.done():
            return Phase.AWAITING_SUGGESTIONS
        return Phase.IDLE

    def select_persona(self, persona: Persona) -> None:
        """ペルソナを変更（通信は発生しない）"""
        self.state.persona = persona
        logger.info("Persona selected", extra={"persona_id": persona.value})

    def set_input(self, text: str) -> None:
        """入力欄の内容を更新"""
        self.state.input_buffer = text

    async def submit_input(self) -> bool:
        """入力欄の内容を送信"""
        return await self.submit(self.state.input_buffer)

    async def click_suggestion(self, suggestion: str) -> bool:
        """提案をクリック（submit と同じ）"""
        return await self.submit(suggestion)

    async def submit(self, prompt: str) -> bool:
        """質問を送信して回答を取得

        Args:
            prompt: ユーザーの質問

        Returns:
            回答ターンが追加された場合は True。
            空の質問や処理中のため無視した場合、回答取得に失敗した場合は False
        """
        if not prompt.strip():
            logger.debug("Ignoring blank prompt")
            return False

        if self.state.pending:
            logger.info("Ignoring prompt while an answer is pending")
            return False

        state = self.state
        state.turns.append(UserTurn(text=prompt))
        state.suggestions = []
        state.error = None
        state.input_buffer = ""
        state.pending = True

        logger.info(
            "Submitting prompt",
            extra={
                "persona_id": state.persona.value,
                "prompt_length": len(prompt),
                "turn_count": len(state.turns),
            }
        )

        try:
            reply = await self.client.generate_content(
                build_answer_request(prompt, state.persona)
            )
            lines = parse_answer(reply)
            answer_text = extract_reply_text(reply)

        except (NetworkFailure, MalformedReply) as e:
            logger.warning(
                "Answer request failed",
                extra={"error": e.message, "error_type": type(e).__name__},
            )
            state.error = GENERIC_ERROR_MESSAGE
            return False

        except Exception as e:
            logger.error(
                "Unexpected error while fetching answer",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            state.error = GENERIC_ERROR_MESSAGE
            return False

        finally:
            state.pending = False

        bot_turn = BotTurn(lines=tuple(lines))
        state.turns.append(bot_turn)

        logger.info(
            "Answer received",
            extra={"line_count": len(lines), "turn_count": len(state.turns)},
        )

        # 成功時点の (質問, 回答, ターン) を渡し、後から状態を読み直さない
        task = asyncio.create_task(self._fetch_suggestions(prompt, answer_text, bot_turn))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        self._suggestion_task = task
        return True

    async def wait_for_suggestions(self) -> List[str]:
        """実行中の提案取得が終わるまで待ち、現在の提案を返す"""
        if self._suggestion_task is not None:
            await self._suggestion_task
        return list(self.state.suggestions)

    async def _fetch_suggestions(
        self,
        question: str,
        answer_text: str,
        bot_turn: BotTurn,
    ) -> None:
        """提案を取得して反映（失敗はログのみ）"""
        try:
            reply = await self.client.generate_content(
                build_suggestion_request(question, answer_text)
            )
            suggestions = parse_suggestions(reply)

        except AssistantError as e:
            logger.warning(
                "Suggestion request failed",
                extra={"error": e.message, "error_type": type(e).__name__},
            )
            return

        except Exception as e:
            logger.error(
                "Unexpected error while fetching suggestions",
                extra={"error": str(e)},
                exc_info=True,
            )
            return

        if self.state.last_turn is not bot_turn:
            logger.info(
                "Discarding stale suggestions",
                extra={"suggestion_count": len(suggestions)},
            )
            return

        self.state.suggestions = suggestions
        logger.info(
            "Suggestions updated",
            extra={"suggestion_count": len(suggestions)},
        )
