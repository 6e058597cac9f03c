"""Persona Chat Assistant API

Web UI から会話セッションを操作するためのAPIエンドポイントを提供します。
"""

import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from assistant.config import get_settings
from assistant.exceptions import PersonaNotFoundError, SessionNotFoundError
from assistant.models.responses import HealthResponse, PersonaInfo, SessionStateView
from assistant.orchestrator import ConversationOrchestrator
from assistant.personas import Persona, parse_persona
from assistant.presenter import present_persona, present_state
from assistant.session_manager import SessionManager, get_session_manager

# ログ設定
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# 設定読み込み
settings = get_settings()

# FastAPIアプリケーション初期化
app = FastAPI(
    title="Persona Chat Assistant API",
    description="Conversational front-end for Gemini with personas and follow-up suggestions",
    version=settings.api_version,
)

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === リクエストモデル ===

class AskRequest(BaseModel):
    """質問リクエスト"""
    prompt: str


class PersonaRequest(BaseModel):
    """ペルソナ変更リクエスト"""
    persona_id: str


# === 依存関係 ===

def get_orchestrator(
    session_id: str,
    session_manager: SessionManager = Depends(get_session_manager),
) -> ConversationOrchestrator:
    """パスのセッションIDからオーケストレーターを取得"""
    try:
        return session_manager.get(session_id)
    except SessionNotFoundError as e:
        logger.warning("Session not found", extra={"session_id": session_id})
        raise HTTPException(status_code=404, detail=e.message) from e


def _view(session_id: str, orchestrator: ConversationOrchestrator) -> SessionStateView:
    return present_state(session_id, orchestrator, recent_limit=settings.recent_prompt_limit)


# === エンドポイント ===

@app.get("/")
async def root() -> dict[str, str]:
    """ルートエンドポイント

    API情報を返します。
    """
    return {
        "message": "Persona Chat Assistant API",
        "version": settings.api_version,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check(
    session_manager: SessionManager = Depends(get_session_manager),
) -> HealthResponse:
    """ヘルスチェックエンドポイント"""
    return HealthResponse(
        status="ok",
        version=settings.api_version,
        sessions=session_manager.get_stats()["total_sessions"],
    )


@app.get("/personas")
async def list_personas() -> list[PersonaInfo]:
    """選択可能なペルソナ一覧"""
    return [present_persona(persona) for persona in Persona]


@app.post("/sessions", status_code=201)
async def create_session(
    session_manager: SessionManager = Depends(get_session_manager),
) -> SessionStateView:
    """新しい会話セッションを作成"""
    session_id = session_manager.create_session()
    return _view(session_id, session_manager.get(session_id))


@app.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> SessionStateView:
    """セッション状態を取得

    提案はバックグラウンドで取得されるため、回答直後は空の場合があります。
    """
    return _view(session_id, orchestrator)


@app.delete("/sessions/{session_id}", status_code=204)
async def end_session(
    session_id: str,
    session_manager: SessionManager = Depends(get_session_manager),
) -> None:
    """セッションを終了（状態は破棄される）"""
    if not session_manager.end_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@app.put("/sessions/{session_id}/persona")
async def select_persona(
    session_id: str,
    request: PersonaRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> SessionStateView:
    """ペルソナを変更"""
    try:
        persona = parse_persona(request.persona_id)
    except PersonaNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail=f"{e.message}. Available: {', '.join(e.details['available_ids'])}",
        ) from e

    orchestrator.select_persona(persona)
    return _view(session_id, orchestrator)


@app.post("/sessions/{session_id}/ask")
async def ask(
    session_id: str,
    request: AskRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> SessionStateView:
    """質問を送信し、回答後のセッション状態を返す

    空の質問や回答待ち中の質問は無視され、状態は変わりません。
    回答の取得に失敗した場合も200で返し、error に汎用メッセージを設定します。
    """
    logger.info(
        "Received ask request",
        extra={"session_id": session_id, "prompt_length": len(request.prompt)},
    )
    await orchestrator.submit(request.prompt)
    return _view(session_id, orchestrator)


@app.post("/sessions/{session_id}/suggestions/{index}")
async def click_suggestion(
    session_id: str,
    index: int,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> SessionStateView:
    """表示中の提案を選択して質問する"""
    suggestions = orchestrator.state.suggestions
    if not 0 <= index < len(suggestions):
        raise HTTPException(status_code=404, detail=f"Suggestion {index} not found")

    await orchestrator.click_suggestion(suggestions[index])
    return _view(session_id, orchestrator)


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "Starting API server",
        extra={"host": settings.api_host, "port": settings.api_port}
    )

    uvicorn.run(
        "assistant.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level="info",
    )
