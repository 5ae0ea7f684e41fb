import asyncio

import pytest

from chat_core.api import service
from chat_core.domain.exceptions import RequestCancelledError
from chat_core.domain.models import (
    SENDING_MESSAGE,
    WELCOME_MESSAGE,
    ChatResponseChoice,
    ChatResponseMessage,
    ChatResponseSuccess,
    ChatSettings,
)


class FakeTransport:
    name = "fake"

    def __init__(self):
        self.requests = []

    async def send(self, request, cancellation, api_key=None):
        self.requests.append(request)
        return ChatResponseSuccess(choices=[ChatResponseChoice(message=ChatResponseMessage(content="这是测试回复"))])


def test_create_conversation_seeds_welcome_and_slot():
    conv = service.create_conversation(name="t", transport=FakeTransport())
    welcome, slot = conv.messages
    assert welcome.content == WELCOME_MESSAGE
    assert not welcome.can_remove
    assert slot.role == "user" and slot.content == "" and not slot.is_sent
    assert conv.current_message is slot
    assert conv.settings.model == service.settings.default_model


def test_get_default_transport_is_singleton(monkeypatch):
    created = []

    def fake_create_transport():
        created.append(1)
        return FakeTransport()

    monkeypatch.setattr(service, "_transport", None)
    monkeypatch.setattr(service, "create_transport", fake_create_transport)
    first = service.get_default_transport()
    assert service.get_default_transport() is first
    assert created == [1]


@pytest.mark.asyncio
async def test_ask_fills_current_slot():
    transport = FakeTransport()
    conv = service.create_conversation(chat_settings=ChatSettings(directions="帮我回答问题"), transport=transport)

    reply = await service.ask(conv, "帮我分析这段代码")

    assert reply["ok"] is True
    assert reply["reply"] == "这是测试回复"
    assert reply["is_error"] is False
    assert reply["message_count"] == 4
    sent = [(m.role, m.content) for m in transport.requests[0].messages]
    assert sent == [("system", "帮我回答问题"), ("user", "帮我分析这段代码")]

    # 继续对话
    reply2 = await service.ask(conv, "详细说明一下")
    assert reply2["message_count"] == 6
    assert len(transport.requests[1].messages) == 4


@pytest.mark.asyncio
async def test_ask_rejects_empty_input():
    conv = service.create_conversation(transport=FakeTransport())
    reply = await service.ask(conv, "")
    assert reply["ok"] is False
    assert reply["failure"] == "validation"
    assert reply["reply"] is None


class CancelFirstTransport:
    """首次调用等待取消信号，之后正常返回。"""

    name = "cancel-first"

    def __init__(self):
        self.requests = []
        self.started = asyncio.Event()

    async def send(self, request, cancellation, api_key=None):
        self.requests.append(request)
        if len(self.requests) == 1:
            self.started.set()
            await cancellation.wait()
            raise RequestCancelledError()
        return ChatResponseSuccess(choices=[ChatResponseChoice(message=ChatResponseMessage(content="ok"))])


@pytest.mark.asyncio
async def test_ask_after_cancel_sends_new_user_turn():
    transport = CancelFirstTransport()
    conv = service.create_conversation(transport=transport)

    task = asyncio.create_task(service.ask(conv, "first"))
    await transport.started.wait()
    conv.cancel()
    first = await task
    assert first["failure"] == "cancelled"
    placeholder = conv.messages[-1]
    assert placeholder.role == "assistant" and placeholder.is_awaiting

    second = await service.ask(conv, "second")

    assert second["ok"] is True
    assert second["reply"] == "ok"
    roles = [(m.role, m.content) for m in transport.requests[1].messages]
    assert roles[-1] == ("user", "second")
    assert ("assistant", "second") not in roles
    assert placeholder.role == "assistant"
    assert placeholder.content == SENDING_MESSAGE
