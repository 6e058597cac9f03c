"""
Discord Bot メインファイル
"""

import logging
from typing import Awaitable, Callable, Optional

import discord
from discord import app_commands
from dotenv import load_dotenv

from assistant.exceptions import PersonaNotFoundError
from assistant.personas import list_persona_ids
from assistant.session_manager import get_session_manager
from bot.config import get_settings
from bot.handlers import CommandHandler, MessageHandler, PromptOutcome

# ロガー設定
logger = logging.getLogger(__name__)

# 環境変数の読み込み
load_dotenv()

# Intentsの設定
intents = discord.Intents.default()
intents.message_content = True  # メッセージ内容の取得を有効化

Sender = Callable[[str], Awaitable[discord.Message]]


class AssistantBot(discord.Client):
    """ペルソナ付きアシスタントのDiscord Bot

    責務:
    - Discord クライアントのライフサイクル管理
    - イベントルーティング（handlers への委譲）
    - 回答の送信と提案ボタンの後付け
    """

    def __init__(self) -> None:
        super().__init__(intents=intents)
        self.tree: app_commands.CommandTree = app_commands.CommandTree(self)

        self.settings = get_settings()
        self.session_manager = get_session_manager()

        # ハンドラーの初期化（依存性注入）
        self.command_handler = CommandHandler(session_manager=self.session_manager)
        self.message_handler = MessageHandler(
            session_manager=self.session_manager,
            message_max_length=self.settings.message_max_length,
        )

        logger.info("AssistantBot initialized")

    async def setup_hook(self) -> None:
        """起動時にコマンドを同期"""
        await self.tree.sync()
        logger.info("Command tree synced")

    async def on_ready(self) -> None:
        """Bot起動時の処理"""
        print(f"Logged in as {self.user} (ID: {self.user.id})")
        print("------")
        print(f"Available personas: {', '.join(list_persona_ids())}")
        print(f"Gemini model: {self.session_manager.client.model}")
        print("------")

        logger.info(
            "Bot ready",
            extra={"user": str(self.user), "user_id": self.user.id},
        )

    async def on_message(self, message: discord.Message) -> None:
        """メッセージ受信時の処理 - ルーティングのみ"""
        # 自分のメッセージは無視
        if message.author == self.user:
            return

        # コマンドは無視（スラッシュコマンドで処理）
        if message.content.startswith("/"):
            return

        # メンションされていない場合は無視
        if self.user not in message.mentions:
            return

        prompt = self.message_handler.extract_prompt(message.content, self.user.id)

        try:
            async with message.channel.typing():
                outcome = await self.message_handler.handle_prompt(
                    channel_id=message.channel.id,
                    content=prompt,
                )

            reply = await self._send_chunks(
                outcome,
                lambda content: message.reply(content, mention_author=False),
            )
            await self._attach_suggestions(message.channel.id, outcome, reply)

        except Exception as e:
            logger.error(
                "Error handling message",
                extra={"message_id": message.id, "error": str(e)},
                exc_info=True,
            )
            await message.channel.send("エラーが発生しました。")

    async def handle_suggestion_click(
        self,
        interaction: discord.Interaction,
        suggestion: str,
    ) -> None:
        """提案ボタンが押されたときの処理"""
        channel_id = interaction.channel_id
        await interaction.response.defer(thinking=True)

        try:
            outcome = await self.message_handler.handle_suggestion(channel_id, suggestion)
            if not outcome.chunks:
                await interaction.followup.send("質問を受け付けられませんでした。")
                return

            await interaction.followup.send(f"> {suggestion}")
            reply = await self._send_chunks(
                outcome,
                lambda content: interaction.followup.send(content, wait=True),
            )
            await self._attach_suggestions(channel_id, outcome, reply)

        except Exception as e:
            logger.error(
                "Error handling suggestion click",
                extra={"channel_id": channel_id, "error": str(e)},
                exc_info=True,
            )
            await interaction.followup.send("エラーが発生しました。")

    async def _send_chunks(
        self,
        outcome: PromptOutcome,
        send: Sender,
    ) -> Optional[discord.Message]:
        """返信を送信し、最後に送ったメッセージを返す"""
        last: Optional[discord.Message] = None
        for chunk in outcome.chunks:
            last = await send(chunk)
        return last

    async def _attach_suggestions(
        self,
        channel_id: int,
        outcome: PromptOutcome,
        reply: Optional[discord.Message],
    ) -> None:
        """提案が届いたら回答メッセージにボタンを付ける"""
        if reply is None or outcome.bot_turn is None:
            return

        suggestions = await self.message_handler.wait_for_suggestions(
            channel_id, outcome.bot_turn
        )
        if not suggestions:
            return

        from bot.ui.components import SuggestionView

        await reply.edit(view=SuggestionView(suggestions, self.handle_suggestion_click))
        logger.info(
            "Suggestions attached",
            extra={"channel_id": channel_id, "suggestion_count": len(suggestions)},
        )


# Botインスタンスの作成
bot = AssistantBot()


@bot.tree.command(name="persona", description="ペルソナを設定または解除します")
@app_commands.describe(style="使用するペルソナ（例: sarcastic）または 'reset' でデフォルトに戻す")
async def persona_command(interaction: discord.Interaction, style: Optional[str] = None) -> None:
    """
    /persona コマンド - ハンドラーに委譲

    - 引数なし: 現在の設定とドロップダウンメニューを表示
    - 引数あり: 直接ペルソナを設定
    - 'reset': デフォルトのペルソナに戻す
    """
    from bot.ui.components import PersonaSelectView

    channel_id = interaction.channel_id

    try:
        if style and style.lower() == "reset":
            message = bot.command_handler.handle_persona_reset(channel_id)
            await interaction.response.send_message(message)
            return

        if style:
            try:
                embed = bot.command_handler.handle_persona_set(channel_id, style)
                await interaction.response.send_message(embed=embed)
            except PersonaNotFoundError as e:
                await interaction.response.send_message(
                    f"ペルソナ `{style}` が見つかりません。\n"
                    f"利用可能なペルソナ: {', '.join(e.details['available_ids'])}",
                    ephemeral=True,
                )
            return

        embed = bot.command_handler.handle_persona_get(channel_id)
        view = PersonaSelectView(bot.session_manager, channel_id)
        await interaction.response.send_message(embed=embed, view=view)

    except Exception as e:
        logger.error(
            "Persona command failed",
            extra={"channel_id": channel_id, "style": style, "error": str(e)},
            exc_info=True,
        )
        await interaction.response.send_message(
            "エラーが発生しました。",
            ephemeral=True,
        )


@bot.tree.command(name="clear", description="このチャンネルの会話をリセットします")
async def clear_command(interaction: discord.Interaction) -> None:
    """/clear コマンド - チャンネルの会話セッションを終了する"""
    message = bot.command_handler.handle_clear(interaction.channel_id)
    await interaction.response.send_message(message)


def main() -> None:
    """
    メインエントリーポイント：Discord Botを起動する

    環境変数 DISCORD_TOKEN から Bot トークンを読み込み、
    Discord への接続を確立して Bot を実行する。
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger.info("Starting Discord Bot")
    bot.run(bot.settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
