import pytest

from coze_bridge.agents.orchestrator import ConversationOrchestrator, OrchestratorConfig, select_answer
from coze_bridge.domain.exceptions import SubmissionError, TransportError
from coze_bridge.domain.models import BotMessage, BridgeRequest, ChatTask


class FakeBackend:
    """内存后端：按顺序返回预设的状态序列。"""

    name = "fake"

    def __init__(self, statuses=("completed",), messages=None, conversation_id="conv-new", submit_error=None):
        self.statuses = list(statuses)
        self.messages = messages if messages is not None else [
            BotMessage(role="assistant", type="answer", content="Hello"),
        ]
        self.conversation_id = conversation_id
        self.submit_error = submit_error
        self.created = []
        self.retrieve_calls = 0
        self.list_calls = 0

    async def create_chat(self, bot_id, user_id, message, conversation_id=None):
        self.created.append(
            {"bot_id": bot_id, "user_id": user_id, "message": message, "conversation_id": conversation_id}
        )
        if self.submit_error:
            raise self.submit_error
        return ChatTask(conversation_id=conversation_id or self.conversation_id, chat_id="chat-1")

    async def retrieve_chat(self, conversation_id, chat_id):
        self.retrieve_calls += 1
        status = self.statuses.pop(0) if self.statuses else "in_progress"
        if status is None:
            return None
        return ChatTask(conversation_id=conversation_id, chat_id=chat_id, status=status)

    async def list_messages(self, conversation_id, chat_id):
        self.list_calls += 1
        return self.messages


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def make_orchestrator(backend, attempts=15):
    sleeper = SleepRecorder()
    tokens = []

    def factory(token):
        tokens.append(token)
        return backend

    orch = ConversationOrchestrator(
        backend_factory=factory,
        config=OrchestratorConfig(poll_interval=1.0, max_poll_attempts=attempts),
        sleep=sleeper,
    )
    return orch, sleeper, tokens


def make_request(**kw):
    data = {"token": "tok", "bot_id": "bot-1", "message": "hi"}
    data.update(kw)
    return BridgeRequest(**data)


@pytest.mark.asyncio
async def test_relay_success_first_poll():
    backend = FakeBackend()
    orch, sleeper, tokens = make_orchestrator(backend)

    res = await orch.relay(make_request())

    assert res.to_dict() == {"success": True, "reply": "Hello", "conversationId": "conv-new"}
    assert tokens == ["tok"]
    assert backend.created[0]["user_id"] == "user_001"
    assert backend.retrieve_calls == 1
    assert sleeper.delays == [1.0]


@pytest.mark.asyncio
async def test_relay_continues_existing_conversation():
    backend = FakeBackend(statuses=["created", "in_progress", "completed"])
    orch, sleeper, _ = make_orchestrator(backend)

    res = await orch.relay(make_request(conversation_id="conv-old", user_id="alice"))

    assert res.success
    assert res.conversation_id == "conv-old"
    assert backend.created[0]["conversation_id"] == "conv-old"
    assert backend.created[0]["user_id"] == "alice"
    assert backend.retrieve_calls == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["failed", "canceled"])
async def test_relay_failed_status_stops_immediately(status):
    backend = FakeBackend(statuses=[status, "completed"])
    orch, _, _ = make_orchestrator(backend)

    res = await orch.relay(make_request())

    assert res.success is False
    assert "failed" in res.error
    assert res.http_status == 500
    assert backend.retrieve_calls == 1
    assert backend.list_calls == 0


@pytest.mark.asyncio
async def test_relay_timeout_uses_exact_budget():
    backend = FakeBackend(statuses=[])
    orch, sleeper, _ = make_orchestrator(backend, attempts=8)

    res = await orch.relay(make_request())

    assert res.success is False
    assert "timeout" in res.error
    assert backend.retrieve_calls == 8
    assert sleeper.delays == [1.0] * 8
    assert backend.list_calls == 0


@pytest.mark.asyncio
async def test_status_without_data_keeps_polling():
    backend = FakeBackend(statuses=[None, None, "completed"])
    orch, _, _ = make_orchestrator(backend)

    res = await orch.relay(make_request())

    assert res.success
    assert backend.retrieve_calls == 3


@pytest.mark.asyncio
async def test_relay_answer_not_found():
    backend = FakeBackend(
        messages=[
            BotMessage(role="user", type="question", content="hi"),
            BotMessage(role="assistant", type="follow_up", content="more?"),
        ]
    )
    orch, _, _ = make_orchestrator(backend)

    res = await orch.relay(make_request())

    assert res.to_dict() == {"success": False, "error": "assistant answer not found"}


@pytest.mark.asyncio
async def test_submission_error_is_not_retried():
    backend = FakeBackend(submit_error=SubmissionError("chat submission failed: bot not published"))
    orch, sleeper, _ = make_orchestrator(backend)

    res = await orch.relay(make_request())

    assert res.success is False
    assert res.error == "chat submission failed: bot not published"
    assert len(backend.created) == 1
    assert backend.retrieve_calls == 0
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_transport_error_during_fetch():
    class Broken(FakeBackend):
        async def list_messages(self, conversation_id, chat_id):
            raise TransportError("network error: reset by peer")

    orch, _, _ = make_orchestrator(Broken())

    res = await orch.relay(make_request())

    assert res.success is False
    assert res.error.startswith("network error")


def test_select_answer_picks_first_assistant_answer():
    msgs = [
        BotMessage(role="assistant", type="verbose", content="x"),
        BotMessage(role="assistant", type="answer", content="first"),
        BotMessage(role="assistant", type="answer", content="second"),
    ]
    assert select_answer(msgs).content == "first"
    assert select_answer([]) is None
