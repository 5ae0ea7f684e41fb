import pytest

from chat_core.providers import create_transport
from chat_core.providers.openai_transport import OpenAIChatTransport
from chat_core.providers.registry import OPENAI_CONFIG, get_provider_config


def test_create_transport_default(monkeypatch):
    class DummySettings:
        default_provider = "openai"
        openai_api_key = "sk-test-key"
        http_timeout = 1.0
        openai_base_url = "https://api.openai.com/v1"

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    transport = create_transport()
    assert isinstance(transport, OpenAIChatTransport)
    assert transport.name == "openai"
    assert transport._provider_config is OPENAI_CONFIG


def test_create_transport_unknown():
    with pytest.raises(KeyError):
        create_transport("nope")


def test_provider_config_lookup_is_case_insensitive():
    assert get_provider_config("OpenAI") is OPENAI_CONFIG
    assert OPENAI_CONFIG.model("gpt-3.5-turbo").max_tokens == 4096
    assert OPENAI_CONFIG.model("missing") is None
