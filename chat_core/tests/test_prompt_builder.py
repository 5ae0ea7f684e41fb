from chat_core.conversation.prompt_builder import build_prompt
from chat_core.domain.message import ChatMessage
from chat_core.domain.models import WELCOME_MESSAGE, ChatPromptMessage, ChatSettings


def test_welcome_message_is_replaced_by_directions():
    settings = ChatSettings(directions="You are helpful.")
    messages = [
        ChatMessage(role="system", content=WELCOME_MESSAGE),
        ChatMessage(role="user", content="hello"),
    ]
    prompt = build_prompt(messages, settings)
    assert prompt == [
        ChatPromptMessage(role="system", content="You are helpful."),
        ChatPromptMessage(role="user", content="hello"),
    ]


def test_edited_first_message_is_kept_verbatim():
    settings = ChatSettings(directions="You are helpful.")
    messages = [ChatMessage(role="system", content="Be terse.")]
    assert build_prompt(messages, settings)[0].content == "Be terse."


def test_welcome_text_after_index_zero_is_not_replaced():
    settings = ChatSettings(directions="d")
    messages = [
        ChatMessage(role="system", content="s"),
        ChatMessage(role="assistant", content=WELCOME_MESSAGE),
    ]
    assert build_prompt(messages, settings)[1].content == WELCOME_MESSAGE


def test_nothing_dropped_or_reordered():
    settings = ChatSettings()
    roles = ["system", "user", "assistant", "user", "assistant"]
    messages = [ChatMessage(role=r, content=str(i)) for i, r in enumerate(roles)]
    prompt = build_prompt(messages, settings)
    assert [(p.role, p.content) for p in prompt] == [(r, str(i)) for i, r in enumerate(roles)]
    assert prompt[1].to_payload() == {"role": "user", "content": "1"}


def test_empty_transcript():
    assert build_prompt([], ChatSettings()) == []
