"""Bot設定管理モジュール

既存の環境変数のみを使用し、その他は適切なデフォルト値を持つ。
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class BotSettings(BaseSettings):
    """Bot設定クラス

    環境変数から設定を読み込み、型チェックとバリデーションを実行します。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # === 環境変数 ===
    discord_token: str

    # === ハードコード定数（環境変数不要） ===
    @property
    def persona_select_timeout(self) -> int:
        """ペルソナ選択UIのタイムアウト（秒）"""
        return 180

    @property
    def suggestion_view_timeout(self) -> int:
        """提案ボタンのタイムアウト（秒）"""
        return 600

    @property
    def message_max_length(self) -> int:
        """Discordメッセージの最大文字数"""
        return 2000

    @property
    def suggestion_label_max_length(self) -> int:
        """提案ボタンのラベル最大文字数（Discordの上限）"""
        return 80


# グローバル設定インスタンス
_settings: BotSettings | None = None


def get_settings() -> BotSettings:
    """設定インスタンスを取得（シングルトン）"""
    global _settings
    if _settings is None:
        _settings = BotSettings()
    return _settings


def reload_settings() -> BotSettings:
    """設定を再読み込み（主にテスト用）"""
    global _settings
    _settings = BotSettings()
    return _settings
