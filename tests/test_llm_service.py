from types import SimpleNamespace

import pytest

from app.services.llm import (
    ERROR_KIND_CONFIGURATION,
    ERROR_KIND_TRANSIENT,
    LLMConfig,
    LLMConfigurationError,
    LLMProvider,
    LLMService,
    LLMResponse,
    OpenRouterProvider,
    get_llm_service,
    reset_llm_service,
)


class ScriptedProvider(LLMProvider):
    PROVIDER_NAME = "scripted"
    DEFAULT_MODEL = "scripted-1"

    def _init_client(self, script=None, **kwargs):
        self.script = list(script or [])
        self.calls = 0

    def _call_api(self, messages, config):
        self.calls += 1
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step, 10, 5

    def is_available(self):
        return True


def test_chat_success_returns_raw_text():
    provider = ScriptedProvider(script=["  hello  "])
    response = provider.generate("sys", "user", LLMConfig())
    assert response.success
    assert response.text == "  hello  "
    assert response.total_tokens == 15


def test_empty_completion_is_transient_failure():
    response = ScriptedProvider(script=[""]).generate("sys", "user")
    assert not response.success
    assert response.error_kind == ERROR_KIND_TRANSIENT


def test_configuration_error_is_not_retried():
    provider = ScriptedProvider(script=[LLMConfigurationError("no key"), "unused"])
    response = provider.generate("sys", "user", LLMConfig(max_retries=3))
    assert response.error_kind == ERROR_KIND_CONFIGURATION
    assert provider.calls == 1


def test_rate_limit_is_retried(monkeypatch):
    monkeypatch.setattr("app.services.llm.base.time.sleep", lambda s: None)
    provider = ScriptedProvider(script=[RuntimeError("429 rate limit"), "ok"])
    response = provider.generate("sys", "user", LLMConfig(max_retries=2))
    assert response.success and response.text == "ok"
    assert provider.calls == 2


def test_other_errors_fail_fast():
    provider = ScriptedProvider(script=[RuntimeError("bad request"), "ok"])
    response = provider.generate("sys", "user", LLMConfig(max_retries=3))
    assert response.error_kind == ERROR_KIND_TRANSIENT
    assert provider.calls == 1


def test_openrouter_without_key_reports_configuration(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    provider = OpenRouterProvider()
    assert not provider.is_available()
    response = provider.generate("sys", "user")
    assert response.error_kind == ERROR_KIND_CONFIGURATION
    assert response.provider == "openrouter"


def test_openrouter_call_uses_base_url_and_timeout(monkeypatch):
    captured = {}

    class FakeCompletions:
        def create(self, **kwargs):
            captured.update(kwargs)
            message = SimpleNamespace(content="Breathe in for four counts.")
            usage = SimpleNamespace(prompt_tokens=12, completion_tokens=7)
            return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)

    provider = OpenRouterProvider(api_key="sk-or-test")
    assert provider._base_url == "https://openrouter.ai/api/v1"
    provider._client = SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions()))

    response = provider.generate("sys", "user", LLMConfig(temperature=0.8, max_tokens=1200, timeout_seconds=25))
    assert response.success
    assert response.text == "Breathe in for four counts."
    assert captured["temperature"] == 0.8
    assert captured["max_tokens"] == 1200
    assert captured["timeout"] == 25
    assert "response_format" not in captured


class _StubProvider:
    def __init__(self, name, response):
        self.PROVIDER_NAME = name
        self.model = f"{name}-model"
        self._response = response
        self.calls = 0

    def chat(self, messages, config=None):
        self.calls += 1
        return self._response


def _success(name):
    return LLMResponse(True, "fine", 1, 1, 1, 2, 0.0, name, f"{name}-model")


def _failure(name, kind):
    return LLMResponse.failure(name, f"{name}-model", "boom", kind)


def _service(primary, fallback, enabled=True):
    service = LLMService(primary_provider="openrouter", fallback_enabled=enabled, fallback_provider="gemini")
    service._primary = primary
    service._fallback = fallback
    return service


def test_service_uses_fallback_when_primary_fails():
    primary = _StubProvider("openrouter", _failure("openrouter", ERROR_KIND_TRANSIENT))
    fallback = _StubProvider("gemini", _success("gemini"))
    response = _service(primary, fallback).chat([{"role": "user", "content": "hi"}])
    assert response.success and response.provider == "gemini"


def test_service_skips_fallback_when_not_requested():
    primary = _StubProvider("openrouter", _failure("openrouter", ERROR_KIND_TRANSIENT))
    fallback = _StubProvider("gemini", _success("gemini"))
    response = _service(primary, fallback).generate("s", "u", use_fallback=False)
    assert not response.success
    assert fallback.calls == 0


def test_service_prefers_transient_error_when_both_fail():
    primary = _StubProvider("openrouter", _failure("openrouter", ERROR_KIND_CONFIGURATION))
    fallback = _StubProvider("gemini", _failure("gemini", ERROR_KIND_TRANSIENT))
    response = _service(primary, fallback).chat([{"role": "user", "content": "hi"}])
    assert response.error_kind == ERROR_KIND_TRANSIENT


def test_service_rejects_unknown_provider():
    with pytest.raises(ValueError):
        LLMService(primary_provider="claude-local")


def test_singleton_reset():
    first = get_llm_service()
    assert get_llm_service() is first
    reset_llm_service()
    assert get_llm_service() is not first
