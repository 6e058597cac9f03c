"""アシスタント設定管理モジュール

Gemini API 接続情報と HTTP サーバー設定を環境変数から読み込む。
その他の値は適切なデフォルト値を持つ。
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


class AssistantSettings(BaseSettings):
    """アシスタント設定クラス

    環境変数から設定を読み込み、型チェックとバリデーションを実行します。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # === 環境変数（Gemini関連） ===
    gemini_api_key: str
    gemini_api_url: str = DEFAULT_GEMINI_API_URL
    gemini_model: str = DEFAULT_GEMINI_MODEL

    # === 環境変数（HTTPサーバー関連） ===
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # === ハードコード定数（環境変数不要） ===
    @property
    def api_version(self) -> str:
        """APIバージョン"""
        return "1.0.0"

    @property
    def api_timeout(self) -> float:
        """Gemini API タイムアウト（秒）"""
        return 30.0

    @property
    def cors_origins(self) -> list[str]:
        """CORS許可オリジン"""
        return ["*"]

    @property
    def recent_prompt_limit(self) -> int:
        """「最近の質問」として返す件数"""
        return 5


# グローバル設定インスタンス
_settings: AssistantSettings | None = None


def get_settings() -> AssistantSettings:
    """設定インスタンスを取得（シングルトン）"""
    global _settings
    if _settings is None:
        _settings = AssistantSettings()
    return _settings


def reload_settings() -> AssistantSettings:
    """設定を再読み込み（主にテスト用）"""
    global _settings
    _settings = AssistantSettings()
    return _settings
