"""アシスタント カスタム例外定義

会話パイプライン全体で使用する例外階層を定義します。
回答呼び出しの失敗は利用者向けの汎用メッセージに、
提案呼び出しの失敗はログのみに変換されます。
"""

from typing import Any


class AssistantError(Exception):
    """基底例外クラス

    全てのカスタム例外の基底となるクラス。
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NetworkFailure(AssistantError):
    """通信エラー

    Gemini API への接続失敗、タイムアウト、または2xx以外のステータスで発生します。
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, details)


class ReplyParseError(AssistantError):
    """レスポンス解析エラーの基底クラス"""
    pass


class MalformedReply(ReplyParseError):
    """不正なレスポンス

    candidates[0].content.parts[0].text が存在しない、または空の場合に発生します。
    """
    pass


class InvalidSuggestionFormat(ReplyParseError):
    """提案フォーマットエラー

    提案テキストが文字列のJSON配列として解釈できない場合に発生します。
    """
    pass


class PersonaNotFoundError(AssistantError):
    """ペルソナ未検出エラー

    指定されたペルソナIDが定義されていない場合に発生します。
    """
    pass


class SessionNotFoundError(AssistantError):
    """セッション未検出エラー

    指定されたセッションが存在しない場合に発生します。
    """
    pass
