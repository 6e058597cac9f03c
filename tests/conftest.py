"""テスト共通設定"""

import os

# 設定クラスの必須項目（モジュール読み込み前に設定する）
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("DISCORD_TOKEN", "test-discord-token")
