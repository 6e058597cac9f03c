"""Discord Bot イベントハンドラーモジュール

このモジュールは、Discord Botのビジネスロジックを管理します。
AssistantBotクラスからロジックを分離し、テスト可能な形で提供します。

Modules:
    command_handler: スラッシュコマンドのビジネスロジック
    message_handler: メッセージイベントのビジネスロジック
"""

from bot.handlers.command_handler import CommandHandler
from bot.handlers.message_handler import MessageHandler, PromptOutcome

__all__ = ["CommandHandler", "MessageHandler", "PromptOutcome"]
