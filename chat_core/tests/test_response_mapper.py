from chat_core.conversation.response_mapper import map_response
from chat_core.domain.models import (
    ChatError,
    ChatResponseChoice,
    ChatResponseError,
    ChatResponseMessage,
    ChatResponseSuccess,
    ChatResult,
)


def test_missing_response_is_unknown_error():
    assert map_response(None) == ChatResult(text="Unknown error.", is_error=True)


def test_unrecognized_shape_is_unknown_error():
    assert map_response({"choices": []}) == ChatResult(text="Unknown error.", is_error=True)


def test_error_variant_uses_provider_message():
    raw = ChatResponseError(error=ChatError(message="Invalid API key"))
    assert map_response(raw) == ChatResult(text="Invalid API key", is_error=True)


def test_error_variant_without_message():
    assert map_response(ChatResponseError()) == ChatResult(text="Unknown error.", is_error=True)
    assert map_response(ChatResponseError(error=ChatError())).text == "Unknown error."


def test_success_variant_takes_first_choice_trimmed():
    raw = ChatResponseSuccess(
        choices=[
            ChatResponseChoice(index=0, message=ChatResponseMessage(content=" Hi there! ")),
            ChatResponseChoice(index=1, message=ChatResponseMessage(content="second")),
        ]
    )
    assert map_response(raw) == ChatResult(text="Hi there!", is_error=False)


def test_success_variant_without_content_is_empty():
    assert map_response(ChatResponseSuccess()) == ChatResult(text="", is_error=False)
    assert map_response(ChatResponseSuccess(choices=[ChatResponseChoice()])).text == ""
