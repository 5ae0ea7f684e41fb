from chat_core.domain.message import ChatMessage
from chat_core.domain.models import ChatSettings, SendResult


def test_message_defaults():
    m = ChatMessage(role="user", content="hi")
    assert m.role == "user"
    assert not m.is_sent
    assert not m.is_awaiting
    assert not m.can_remove


def test_message_listener_receives_changes():
    m = ChatMessage(role="user", content="")
    events = []
    unsubscribe = m.add_listener(lambda src, name, old, new: events.append((src, name, old, new)))
    m.content = "hello"
    m.content = "hello"  # 未变化不通知
    m.is_sent = True
    assert events == [(m, "content", "", "hello"), (m, "is_sent", False, True)]
    unsubscribe()
    m.is_error = True
    assert len(events) == 2


def test_message_listener_failure_is_isolated():
    m = ChatMessage()

    def broken(*args):
        raise RuntimeError("boom")

    m.add_listener(broken)
    m.content = "still works"
    assert m.content == "still works"


def test_message_clone_is_independent():
    m = ChatMessage(role="assistant", content="a", format="Text", is_sent=True, can_remove=True)
    events = []
    m.add_listener(lambda *args: events.append(args))
    c = m.clone()
    assert c is not m
    assert c != m
    assert (c.role, c.content, c.format, c.is_sent, c.can_remove) == ("assistant", "a", "Text", True, True)
    c.content = "b"
    assert m.content == "a"
    assert events == []


def test_message_edit_actions():
    m = ChatMessage(role="user", content="x")
    assert m.begin_edit() is False
    m.new_line()
    assert m.content == "x\n"
    m.is_sent = True
    assert m.begin_edit() is True
    assert m.is_editing
    m.new_line()
    assert m.content == "x\n"
    m.cancel_edit()
    assert not m.is_editing
    m.set_role(None)
    m.set_role("system")
    m.set_format("Text")
    assert m.role == "system"
    assert m.format == "Text"


def test_settings_copy_is_independent():
    s = ChatSettings(directions="d", model="x")
    c = s.copy()
    assert c == s and c is not s
    c.directions = "other"
    assert s.directions == "d"


def test_send_result_truthiness():
    assert SendResult.success()
    failed = SendResult.failed("validation", reason="empty_message")
    assert not failed
    assert failed.failure == "validation"
    assert failed.detail == {"reason": "empty_message"}
