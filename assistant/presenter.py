"""会話状態の表示用変換

HTTPレスポンス向けに ConversationState をJSON化しやすい形へ変換します。
"""

from assistant.line_classifier import classify
from assistant.models.responses import PersonaInfo, SessionStateView, TurnView
from assistant.orchestrator import ConversationOrchestrator
from assistant.personas import Persona
from assistant.state import BotTurn, ConversationTurn


def present_persona(persona: Persona) -> PersonaInfo:
    profile = persona.profile
    return PersonaInfo(
        id=persona.value,
        name=profile.name,
        icon=profile.icon,
        color=profile.color,
        description=profile.description,
    )


def present_turn(turn: ConversationTurn) -> TurnView:
    if isinstance(turn, BotTurn):
        lines = [classify(line) for line in turn.lines]
        return TurnView(
            kind=turn.kind,
            lines=[{"text": line.text, "is_heading": line.is_heading} for line in lines],
        )
    return TurnView(kind=turn.kind, text=turn.text)


def present_state(
    session_id: str,
    orchestrator: ConversationOrchestrator,
    recent_limit: int = 5,
) -> SessionStateView:
    """セッション状態を表示用に変換

    提案は回答待ちでない時に限り、最後のBotターンにも添付します。
    """
    state = orchestrator.state
    turns = [present_turn(turn) for turn in state.turns]

    if turns and isinstance(state.last_turn, BotTurn) and state.suggestions and not state.pending:
        turns[-1]["suggestions"] = list(state.suggestions)

    return SessionStateView(
        session_id=session_id,
        phase=orchestrator.phase.value,
        pending=state.pending,
        error=state.error,
        persona=present_persona(state.persona),
        turns=turns,
        suggestions=list(state.suggestions),
        recent_prompts=state.recent_prompts(recent_limit),
    )
