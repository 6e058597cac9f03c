"""会話セッション管理

セッションキー（DiscordのチャンネルIDやWebのセッションID）ごとに
ConversationOrchestrator を保持します。状態は永続化しません。
"""

import logging
import uuid
from typing import Optional, Union

from assistant.exceptions import SessionNotFoundError
from assistant.gemini_client import GeminiClient, get_gemini_client
from assistant.orchestrator import ConversationOrchestrator

logger = logging.getLogger(__name__)

SessionKey = Union[int, str]


class SessionManager:
    """会話セッションマネージャー

    セッションは最初のアクセスで作成され、end_session で破棄されます。
    """

    def __init__(self, client: GeminiClient) -> None:
        """初期化

        Args:
            client: 全セッションで共有するGeminiクライアント
        """
        self.client = client
        self._sessions: dict[SessionKey, ConversationOrchestrator] = {}

        logger.info("SessionManager initialized")

    def create_session(self) -> str:
        """新しいセッションを作成してIDを返す"""
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = ConversationOrchestrator(self.client)
        logger.info("Session created", extra={"session_id": session_id})
        return session_id

    def get_or_create(self, key: SessionKey) -> ConversationOrchestrator:
        """セッションを取得（存在しなければ作成）"""
        orchestrator = self._sessions.get(key)
        if orchestrator is None:
            orchestrator = ConversationOrchestrator(self.client)
            self._sessions[key] = orchestrator
            logger.info("Session created", extra={"session_id": key})
        return orchestrator

    def get(self, key: SessionKey) -> ConversationOrchestrator:
        """
        既存のセッションを取得

        Raises:
            SessionNotFoundError: セッションが存在しない場合
        """
        orchestrator = self._sessions.get(key)
        if orchestrator is None:
            raise SessionNotFoundError(
                f"Session '{key}' not found",
                details={"session_id": key},
            )
        return orchestrator

    def end_session(self, key: SessionKey) -> bool:
        """セッションを破棄

        Returns:
            破棄した場合は True、存在しなかった場合は False
        """
        orchestrator = self._sessions.pop(key, None)
        if orchestrator is None:
            return False

        logger.info(
            "Session ended",
            extra={"session_id": key, "turn_count": len(orchestrator.state.turns)},
        )
        return True

    def list_sessions(self) -> list[SessionKey]:
        """全セッションキーを取得"""
        return list(self._sessions.keys())

    def get_stats(self) -> dict[str, int]:
        """統計情報を取得"""
        return {
            "total_sessions": len(self._sessions),
            "pending_sessions": sum(1 for o in self._sessions.values() if o.state.pending),
            "total_turns": sum(len(o.state.turns) for o in self._sessions.values()),
        }


# グローバルなセッションマネージャーインスタンス
_session_manager: Optional[SessionManager] = None


def get_session_manager() -> SessionManager:
    """
    グローバルなセッションマネージャーインスタンスを取得
    （シングルトンパターン）
    """
    global _session_manager
    if _session_manager is None:
        _session_manager = SessionManager(get_gemini_client())
    return _session_manager
