"""
Gemini generateContent API クライアント

1回の呼び出しにつき1回の HTTPS POST を行い、デコード済みJSONを返す。
レスポンスの中身の検証は response_parser が担当する。
"""

import logging
from typing import Any, Dict, Optional

import httpx

from assistant.config import DEFAULT_GEMINI_API_URL, DEFAULT_GEMINI_MODEL, get_settings
from assistant.exceptions import MalformedReply, NetworkFailure
from assistant.models.gemini import GenerateContentRequest

logger = logging.getLogger(__name__)


class GeminiClient:
    """Gemini API とのやり取りを行うクライアント"""

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_GEMINI_API_URL,
        model: str = DEFAULT_GEMINI_MODEL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            api_key: Gemini APIキー
            api_url: APIのベースURL
            model: 使用するモデル名
            timeout: リクエストタイムアウト秒数
            transport: httpx のトランスポート（テスト時にモックを差し込む）
        """
        if not api_key:
            raise ValueError(
                "Gemini API key not found. Set GEMINI_API_KEY environment variable."
            )

        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @property
    def endpoint(self) -> str:
        """generateContent のエンドポイントURL"""
        return f"{self.api_url}/models/{self.model}:generateContent"

    def _build_headers(self) -> Dict[str, str]:
        """APIリクエスト用のヘッダーを構築"""
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    async def generate_content(self, payload: GenerateContentRequest) -> Any:
        """
        generateContent APIを呼び出す

        Args:
            payload: request_builder で構築したリクエストボディ

        Returns:
            デコード済みのレスポンスJSON

        Raises:
            NetworkFailure: 接続失敗、タイムアウト、2xx以外のステータスの場合
            MalformedReply: 2xxだがボディがJSONでない場合
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    self.endpoint,
                    headers=self._build_headers(),
                    json=payload,
                )
                response.raise_for_status()

            except httpx.HTTPStatusError as e:
                # APIキーが露出しないよう、ステータスコードのみ記録する
                status_code = e.response.status_code
                logger.warning(
                    "Gemini API returned error status",
                    extra={"status_code": status_code, "model": self.model},
                )
                raise NetworkFailure(
                    f"Gemini service error: {status_code}",
                    status_code=status_code,
                ) from e

            except httpx.TimeoutException as e:
                logger.warning(
                    "Gemini API request timed out",
                    extra={"timeout": self.timeout, "model": self.model},
                )
                raise NetworkFailure("Gemini service request timed out") from e

            except httpx.RequestError as e:
                logger.warning(
                    "Failed to connect to Gemini API",
                    extra={"error": type(e).__name__, "model": self.model},
                )
                raise NetworkFailure("Failed to connect to Gemini service") from e

        logger.debug(
            "Gemini API request completed",
            extra={"status_code": response.status_code, "model": self.model},
        )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedReply(
                "Gemini service returned a non-JSON body",
                details={"status_code": response.status_code},
            ) from e


# グローバルなGeminiクライアントインスタンス
_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    """
    グローバルなGeminiクライアントインスタンスを取得
    （シングルトンパターン）
    """
    global _gemini_client
    if _gemini_client is None:
        settings = get_settings()
        _gemini_client = GeminiClient(
            api_key=settings.gemini_api_key,
            api_url=settings.gemini_api_url,
            model=settings.gemini_model,
            timeout=settings.api_timeout,
        )
    return _gemini_client
