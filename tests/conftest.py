"""Shared fixtures for tests."""

import asyncio
import os
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from mermaid_editor.config import EngineConfig, ModelConfig, ModelProvider
from mermaid_editor.credentials import CredentialStore
from mermaid_editor.engine import RenderEngineLoader
from mermaid_editor.errors import InvalidSyntaxError
from mermaid_editor.renderer import DiagramRenderer


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (may require external services)"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )


# ============================================================================
# Environment Detection Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def openai_available() -> bool:
    """Check if an OpenAI API key is configured."""
    api_key = os.environ.get("OPENAI_API_KEY", "")
    return api_key.startswith("sk-") and len(api_key) > 20


@pytest.fixture(scope="session")
def chromium_available() -> bool:
    """Check if Playwright has a Chromium build installed."""
    try:
        from playwright.sync_api import sync_playwright

        with sync_playwright() as p:
            return Path(p.chromium.executable_path).exists()
    except Exception:
        return False


@pytest.fixture
def require_openai(openai_available):
    """Skip test if OpenAI is not configured."""
    if not openai_available:
        pytest.skip("OpenAI API key not configured")


@pytest.fixture
def require_chromium(chromium_available):
    """Skip test if the headless browser is not installed."""
    if not chromium_available:
        pytest.skip("Playwright Chromium not installed (run: playwright install chromium)")


# ============================================================================
# Fake Rendering Engine
# ============================================================================

class FakeEngine:
    """In-memory stand-in for the Mermaid engine.

    Sources containing "invalid" fail with a syntax error. A source with a
    gate registered in `gates` blocks until that event is set.
    """

    def __init__(self):
        self.calls: list[tuple[str, str]] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    async def render(self, element_id: str, source: str) -> str:
        self.calls.append((element_id, source))
        gate = self.gates.get(source)
        if gate is not None:
            await gate.wait()
        if "invalid" in source:
            raise InvalidSyntaxError(detail=f"Parse error on line 1: {source}")
        return f'<svg id="{element_id}"><text>{source}</text></svg>'

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def engine_factory(fake_engine):
    """Factory returning `fake_engine`, counting how often it is called."""
    calls = []

    async def factory(config: EngineConfig):
        calls.append(config)
        await asyncio.sleep(0)
        return fake_engine

    factory.calls = calls
    return factory


@pytest.fixture
def loader(engine_factory) -> RenderEngineLoader:
    return RenderEngineLoader(factory=engine_factory, config=EngineConfig())


@pytest.fixture
def renderer(loader) -> DiagramRenderer:
    return DiagramRenderer(loader=loader)


# ============================================================================
# Completion Service Fixtures
# ============================================================================

@pytest.fixture
def model_config() -> ModelConfig:
    return ModelConfig(
        provider=ModelProvider.OPENAI,
        model="gpt-4o-mini",
        base_url="https://api.openai.test/v1",
    )


def _completion_body(content) -> dict:
    """A chat completion response body carrying `content`."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.fixture
def completion_body() -> Callable[..., dict]:
    return _completion_body


class RecordingTransport:
    """Builds an httpx.MockTransport and keeps every request it served."""

    def __init__(self, status_code: int = 200, json_body=None, content: Optional[bytes] = None,
                 handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._json_body = json_body
        self._content = content
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        if self._content is not None:
            return httpx.Response(self._status_code, content=self._content)
        return httpx.Response(self._status_code, json=self._json_body)


@pytest.fixture
def completion_transport() -> Callable[..., RecordingTransport]:
    return RecordingTransport


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def storage_dir(tmp_path, monkeypatch) -> Path:
    """Point durable storage at a temporary directory."""
    path = tmp_path / "storage"
    monkeypatch.setenv("MERMAID_EDITOR_HOME", str(path))
    return path


@pytest.fixture
def store(storage_dir) -> CredentialStore:
    return CredentialStore(storage_dir=storage_dir)


@pytest.fixture
def output_dir(tmp_path) -> Path:
    """Create a temporary output directory for tests."""
    output = tmp_path / "output"
    output.mkdir(exist_ok=True)
    return output
