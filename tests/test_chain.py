# tests/test_chain.py
"""Tests for backend ordering, routing and fallback."""
import pytest

from clai.ai.backends import MockBackend, create_backend
from clai.ai.chain import BackendChain, chain_order
from clai.ai.types import ChatMessage, ChatRequest
from clai.errors import AIError, AuthError, NetworkError, NoAvailableBackendError

from tests.conftest import FakeBackend, make_config


def _request(model=None):
    return ChatRequest(model=model, messages=[ChatMessage(role="user", content="hi")])


def _chain(backends, config=None):
    config = config or make_config()
    built = []

    def factory(name, cfg):
        built.append(name)
        if name not in backends:
            raise AIError(f"Unknown backend: {name}")
        return backends[name]

    chain = BackendChain(list(backends), config, factory)
    return chain, built


def test_chain_order_primary_then_fallbacks_deduplicated():
    config = make_config({"provider": {"default": "a", "fallback": ["b", "a", "c", "b"]}})
    assert chain_order(config) == ["a", "b", "c"]


def test_chain_order_provider_override_goes_first():
    config = make_config({"provider": {"default": "a", "fallback": ["b"]}}, provider_name="b")
    assert chain_order(config) == ["b", "a"]


def test_chain_order_override_keeps_default_before_fallbacks():
    config = make_config({"provider": {"default": "a", "fallback": ["c"]}}, provider_name="b")
    assert chain_order(config) == ["b", "a", "c"]


def test_chain_order_mock_mode():
    config = make_config({"provider": {"default": "a", "fallback": ["b"]}}, mock_ai=True)
    assert chain_order(config) == ["mock"]


@pytest.mark.asyncio
async def test_first_failure_falls_back_to_second():
    a = FakeBackend("a", error=NetworkError("down"))
    b = FakeBackend("b", content="ls")
    chain, _ = _chain({"a": a, "b": b})

    response = await chain.complete(_request())
    assert response.content == "ls"
    assert len(a.requests) == 1


@pytest.mark.asyncio
async def test_all_failing_raises_last_failure():
    first = NetworkError("a is down")
    last = AuthError("b rejected the key", status_code=401)
    chain, _ = _chain({"a": FakeBackend("a", error=first), "b": FakeBackend("b", error=last)})

    with pytest.raises(AuthError) as excinfo:
        await chain.complete(_request())
    assert excinfo.value is last


@pytest.mark.asyncio
async def test_unavailable_backends_are_skipped_without_calls():
    a = FakeBackend("a", content="never", available=False)
    b = FakeBackend("b", content="pwd")
    chain, _ = _chain({"a": a, "b": b})

    response = await chain.complete(_request())
    assert response.content == "pwd"
    assert a.requests == []


@pytest.mark.asyncio
async def test_nothing_available_raises_no_available_backend():
    chain, _ = _chain({"a": FakeBackend("a", available=False), "b": FakeBackend("b", available=False)})
    with pytest.raises(NoAvailableBackendError):
        await chain.complete(_request())


@pytest.mark.asyncio
async def test_unknown_backend_is_recorded_and_skipped():
    b = FakeBackend("b", content="ls")
    config = make_config()
    chain = BackendChain(["nope", "b"], config, lambda name, cfg: {"b": b}[name] if name == "b" else create_backend(name, cfg))

    response = await chain.complete(_request())
    assert response.content == "ls"


@pytest.mark.asyncio
async def test_backends_are_built_lazily_and_cached():
    a = FakeBackend("a", content="ls")
    b = FakeBackend("b", content="never")
    chain, built = _chain({"a": a, "b": b})

    await chain.complete(_request())
    await chain.complete(_request())
    assert built == ["a"]


def test_route_model_prefixed_with_backend_in_chain():
    chain, _ = _chain({"a": FakeBackend("a"), "b": FakeBackend("b")})
    assert chain.route_model("b/some-model") == ("b", "some-model")


def test_route_model_provider_qualified_id_goes_to_primary():
    chain, _ = _chain({"openrouter": FakeBackend("openrouter")})
    assert chain.route_model("openai/gpt-4o") == ("openrouter", "openai/gpt-4o")


def test_route_model_none():
    chain, _ = _chain({"a": FakeBackend("a")})
    assert chain.route_model(None) == (None, None)


@pytest.mark.asyncio
async def test_model_applies_only_to_its_backend():
    a = FakeBackend("a", error=NetworkError("down"))
    b = FakeBackend("b", content="ls")
    chain, _ = _chain({"a": a, "b": b})

    await chain.complete(_request("a/special"))
    assert a.requests[0].model == "special"
    assert b.requests[0].model is None


def test_create_backend_from_registry():
    config = make_config()
    assert isinstance(create_backend("mock", config), MockBackend)
    with pytest.raises(AIError):
        create_backend("does-not-exist", config)


def test_openrouter_uses_configured_key_and_model(monkeypatch):
    monkeypatch.setenv("MY_KEY", "from-env")
    config = make_config({"providers": {"openrouter": {"api_key_env": "MY_KEY", "model": "x/y"}}})
    backend = create_backend("openrouter", config)
    assert backend.api_key == "from-env"
    assert backend.default_model == "x/y"


@pytest.mark.asyncio
async def test_mock_backend_single_and_multi():
    mock = MockBackend()
    single = await mock.complete(ChatRequest(messages=[ChatMessage(role="system", content="one command")]))
    assert single.content == 'echo "mock command"'

    multi = await mock.complete(ChatRequest(messages=[
        ChatMessage(role="system", content="Generate exactly 2 different command options as JSON"),
    ]))
    assert multi.content == '{"commands": ["echo \\"mock command 1\\"", "echo \\"mock command 2\\""]}'
