from chat_core.config.settings import PydanticSettings


def test_settings_read_yaml_and_env(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("default_model: gpt-4\ndefault_temperature: 0.9\nhttp_timeout: 15\n", encoding="utf-8")
    monkeypatch.setenv("CHAT_CORE_CONFIG_FILE", str(cfg))
    for key in ("DEFAULT_MODEL", "HTTP_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("DEFAULT_TEMPERATURE", "0.2")

    s = PydanticSettings()

    assert s.default_model == "gpt-4"
    assert s.http_timeout == 15
    # 环境变量优先于 config.yaml
    assert s.default_temperature == 0.2


def test_settings_reject_short_api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "short")
    try:
        PydanticSettings()
    except ValueError as e:
        assert "too short" in str(e)
    else:
        raise AssertionError("short API key should be rejected")
