"""会話オーケストレーターのテスト"""

import asyncio
import copy

import httpx
import pytest

from assistant.exceptions import InvalidSuggestionFormat, MalformedReply, NetworkFailure
from assistant.gemini_client import GeminiClient
from assistant.orchestrator import GENERIC_ERROR_MESSAGE, ConversationOrchestrator
from assistant.personas import Persona
from assistant.state import BotTurn, Phase, UserTurn
from tests.fakes import Delayed, FakeGeminiClient, make_reply, make_suggestion_reply


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
async def test_blank_prompt_is_a_no_op(prompt):
    client = FakeGeminiClient()
    orchestrator = ConversationOrchestrator(client)
    orchestrator.set_input("draft")
    before = copy.deepcopy(orchestrator.state)

    assert await orchestrator.submit(prompt) is False

    assert orchestrator.state == before
    assert client.payloads == []
    assert orchestrator.phase is Phase.IDLE


@pytest.mark.asyncio
async def test_submit_end_to_end():
    client = FakeGeminiClient(
        answers=[make_reply("**Greeting**\nHello there!")],
        suggestions=[make_suggestion_reply(["How are you?", "What's new?", "Tell me a joke"])],
    )
    orchestrator = ConversationOrchestrator(client)

    assert await orchestrator.submit("Hi") is True
    suggestions = await orchestrator.wait_for_suggestions()

    state = orchestrator.state
    assert state.turns == [UserTurn(text="Hi"), BotTurn(lines=("**Greeting**", "Hello there!"))]
    assert suggestions == ["How are you?", "What's new?", "Tell me a joke"]
    assert state.suggestions == suggestions
    assert state.error is None
    assert state.pending is False
    assert orchestrator.phase is Phase.IDLE


@pytest.mark.asyncio
async def test_suggestion_request_uses_the_completed_exchange():
    answer_text = "  The moon.\n\nAnd the sun.  "
    client = FakeGeminiClient(
        answers=[make_reply(answer_text)],
        suggestions=[make_suggestion_reply([])],
    )
    orchestrator = ConversationOrchestrator(client, persona=Persona.PIRATE)

    await orchestrator.submit("What causes tides?")
    await orchestrator.wait_for_suggestions()

    answer_payload = client.answer_payloads[0]
    assert answer_payload["contents"][0]["parts"][0]["text"] == "What causes tides?"
    assert answer_payload["systemInstruction"]["parts"][0]["text"] == Persona.PIRATE.instruction

    prompt = client.suggestion_payloads[0]["contents"][0]["parts"][0]["text"]
    assert '("What causes tides?")' in prompt
    assert f'("{answer_text}")' in prompt
    assert orchestrator.state.suggestions == []


@pytest.mark.asyncio
async def test_answer_failure_with_http_500():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": {"message": "internal"}})

    client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
    orchestrator = ConversationOrchestrator(client)

    assert await orchestrator.submit("Hi") is False
    await orchestrator.wait_for_suggestions()

    state = orchestrator.state
    assert state.turns == [UserTurn(text="Hi")]
    assert state.error == GENERIC_ERROR_MESSAGE
    assert state.suggestions == []
    assert state.pending is False
    assert orchestrator.phase is Phase.IDLE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [
        NetworkFailure("Failed to connect to Gemini service"),
        MalformedReply("Invalid response structure from Gemini"),
    ],
)
async def test_answer_failure_sets_generic_error(failure):
    client = FakeGeminiClient(answers=[failure])
    orchestrator = ConversationOrchestrator(client)

    assert await orchestrator.submit("Hi") is False

    assert orchestrator.state.turns == [UserTurn(text="Hi")]
    assert orchestrator.state.error == GENERIC_ERROR_MESSAGE
    assert failure.message not in orchestrator.state.error
    assert client.suggestion_payloads == []
    assert orchestrator.phase is Phase.IDLE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [httpx.InvalidURL("Invalid URL"), RuntimeError("unexpected")],
)
async def test_unexpected_answer_failure_sets_generic_error(failure):
    client = FakeGeminiClient(answers=[failure])
    orchestrator = ConversationOrchestrator(client)

    assert await orchestrator.submit("Hi") is False

    assert orchestrator.state.turns == [UserTurn(text="Hi")]
    assert orchestrator.state.error == GENERIC_ERROR_MESSAGE
    assert orchestrator.state.pending is False
    assert client.suggestion_payloads == []


@pytest.mark.asyncio
async def test_superseded_suggestion_task_is_kept_until_done():
    release_stale = asyncio.Event()
    client = FakeGeminiClient(
        answers=[make_reply("Answer one"), make_reply("Answer two")],
        suggestions=[
            Delayed(make_suggestion_reply(["stale"]), release_stale),
            make_suggestion_reply(["fresh"]),
        ],
    )
    orchestrator = ConversationOrchestrator(client)

    await orchestrator.submit("Question one")
    await asyncio.sleep(0)
    stale_task = orchestrator._suggestion_task

    await orchestrator.submit("Question two")
    assert stale_task in orchestrator._background_tasks
    assert await orchestrator.wait_for_suggestions() == ["fresh"]

    release_stale.set()
    await stale_task
    await asyncio.sleep(0)

    assert orchestrator._background_tasks == set()
    assert orchestrator.state.suggestions == ["fresh"]


@pytest.mark.asyncio
async def test_empty_answer_text_is_a_failure():
    client = FakeGeminiClient(answers=[make_reply("  \n ")])
    orchestrator = ConversationOrchestrator(client)

    assert await orchestrator.submit("Hi") is False
    assert len(orchestrator.state.turns) == 1
    assert orchestrator.state.error == GENERIC_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_error_is_cleared_by_next_submit():
    client = FakeGeminiClient(
        answers=[NetworkFailure("down"), make_reply("Back online")],
        suggestions=[make_suggestion_reply(["ok"])],
    )
    orchestrator = ConversationOrchestrator(client)

    await orchestrator.submit("Hi")
    assert orchestrator.state.error is not None

    assert await orchestrator.submit("Hi again") is True
    assert orchestrator.state.error is None
    assert len(orchestrator.state.turns) == 3
    await orchestrator.wait_for_suggestions()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "suggestion_reply",
    [
        NetworkFailure("Gemini service error: 503", status_code=503),
        make_reply("not json"),
        {"candidates": []},
        InvalidSuggestionFormat("bad"),
        RuntimeError("unexpected"),
    ],
)
async def test_suggestion_failures_are_swallowed(suggestion_reply):
    client = FakeGeminiClient(
        answers=[make_reply("Answer")],
        suggestions=[suggestion_reply],
    )
    orchestrator = ConversationOrchestrator(client)

    assert await orchestrator.submit("Hi") is True
    assert await orchestrator.wait_for_suggestions() == []

    assert orchestrator.state.error is None
    assert len(orchestrator.state.turns) == 2
    assert orchestrator.phase is Phase.IDLE


@pytest.mark.asyncio
async def test_submit_is_ignored_while_awaiting_answer():
    release = asyncio.Event()
    client = FakeGeminiClient(
        answers=[Delayed(make_reply("First answer"), release)],
        suggestions=[make_suggestion_reply(["more"])],
    )
    orchestrator = ConversationOrchestrator(client)

    first = asyncio.create_task(orchestrator.submit("First"))
    await asyncio.sleep(0)
    assert orchestrator.phase is Phase.AWAITING_ANSWER
    assert orchestrator.state.pending is True

    before = copy.deepcopy(orchestrator.state)
    assert await orchestrator.submit("Second") is False
    assert await orchestrator.click_suggestion("Third") is False
    assert orchestrator.state == before

    release.set()
    assert await first is True
    await orchestrator.wait_for_suggestions()

    assert [type(turn) for turn in orchestrator.state.turns] == [UserTurn, BotTurn]
    assert len(client.answer_payloads) == 1


@pytest.mark.asyncio
async def test_new_ask_clears_suggestions_immediately():
    release = asyncio.Event()
    client = FakeGeminiClient(
        answers=[make_reply("One"), Delayed(make_reply("Two"), release)],
        suggestions=[make_suggestion_reply(["a", "b"]), make_suggestion_reply(["c"])],
    )
    orchestrator = ConversationOrchestrator(client)

    await orchestrator.submit("First")
    assert await orchestrator.wait_for_suggestions() == ["a", "b"]

    second = asyncio.create_task(orchestrator.click_suggestion("a"))
    await asyncio.sleep(0)
    assert orchestrator.state.suggestions == []
    assert orchestrator.state.turns[-1] == UserTurn(text="a")

    release.set()
    await second
    assert await orchestrator.wait_for_suggestions() == ["c"]


@pytest.mark.asyncio
async def test_stale_suggestions_are_discarded():
    release_stale = asyncio.Event()
    client = FakeGeminiClient(
        answers=[make_reply("Answer one"), make_reply("Answer two")],
        suggestions=[
            Delayed(make_suggestion_reply(["stale"]), release_stale),
            make_suggestion_reply(["fresh"]),
        ],
    )
    orchestrator = ConversationOrchestrator(client)

    await orchestrator.submit("Question one")
    await asyncio.sleep(0)
    assert orchestrator.phase is Phase.AWAITING_SUGGESTIONS

    # 提案待ちの間でも次の質問は受け付ける
    assert await orchestrator.submit("Question two") is True
    assert await orchestrator.wait_for_suggestions() == ["fresh"]

    release_stale.set()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert orchestrator.state.suggestions == ["fresh"]
    assert len(orchestrator.state.turns) == 4


@pytest.mark.asyncio
async def test_stale_suggestions_are_discarded_while_next_answer_pending():
    release_stale = asyncio.Event()
    release_answer = asyncio.Event()
    client = FakeGeminiClient(
        answers=[make_reply("Answer one"), Delayed(make_reply("Answer two"), release_answer)],
        suggestions=[
            Delayed(make_suggestion_reply(["stale"]), release_stale),
            make_suggestion_reply([]),
        ],
    )
    orchestrator = ConversationOrchestrator(client)

    await orchestrator.submit("Question one")
    second = asyncio.create_task(orchestrator.submit("Question two"))
    await asyncio.sleep(0)

    release_stale.set()
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert orchestrator.state.suggestions == []

    release_answer.set()
    await second
    assert await orchestrator.wait_for_suggestions() == []


@pytest.mark.asyncio
async def test_select_persona_has_no_network_effect():
    client = FakeGeminiClient(
        answers=[make_reply("Arr")],
        suggestions=[make_suggestion_reply([])],
    )
    orchestrator = ConversationOrchestrator(client)

    orchestrator.select_persona(Persona.SARCASTIC)
    assert orchestrator.state.persona is Persona.SARCASTIC
    assert client.payloads == []

    await orchestrator.submit("Hi")
    instruction = client.answer_payloads[0]["systemInstruction"]["parts"][0]["text"]
    assert instruction == Persona.SARCASTIC.instruction
    await orchestrator.wait_for_suggestions()


@pytest.mark.asyncio
async def test_submit_input_clears_buffer():
    client = FakeGeminiClient(
        answers=[make_reply("Sure")],
        suggestions=[make_suggestion_reply([])],
    )
    orchestrator = ConversationOrchestrator(client)

    orchestrator.set_input("Can you help?")
    assert await orchestrator.submit_input() is True

    assert orchestrator.state.input_buffer == ""
    assert orchestrator.state.turns[0] == UserTurn(text="Can you help?")
    await orchestrator.wait_for_suggestions()


@pytest.mark.asyncio
async def test_recent_prompts_newest_first():
    client = FakeGeminiClient(
        answers=[make_reply("1"), NetworkFailure("down"), make_reply("3")],
        suggestions=[make_suggestion_reply([]), make_suggestion_reply([])],
    )
    orchestrator = ConversationOrchestrator(client)

    for prompt in ["first", "second", "third"]:
        await orchestrator.submit(prompt)
        await orchestrator.wait_for_suggestions()

    assert orchestrator.state.recent_prompts() == ["third", "second", "first"]
    assert orchestrator.state.recent_prompts(limit=2) == ["third", "second"]
