from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, Union

import httpx
import pytest

# Load dotenv files early so test fixtures can read secrets via os.getenv
try:  # pragma: no cover
    from dotenv import load_dotenv

    TEST_ROOT = Path(__file__).resolve().parent
    load_dotenv(TEST_ROOT / ".env", override=False)
except Exception:
    pass

from ai_cmd.console import Console
from ai_cmd.core.config import AIProviderConfig, Settings
from ai_cmd.agent_core.abstraction.base import CompletionProvider
from ai_cmd.agent_core.factory import build_context
from ai_cmd.agent_core.schemas.domain import ChatMessage


class RecordingConsole(Console):
    """Console that keeps every line instead of printing it."""

    def __init__(self) -> None:
        self.lines: List[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.lines.append(("info", message))

    def success(self, message: str) -> None:
        self.lines.append(("success", message))

    def error(self, message: str) -> None:
        self.lines.append(("error", message))

    def plain(self, message: str) -> None:
        self.lines.append(("plain", message))

    async def stream(self, text: str, delay_ms: int = 10) -> None:
        self.lines.append(("stream", text))

    def of(self, kind: str) -> List[str]:
        return [message for k, message in self.lines if k == kind]


class ScriptedCompletion(CompletionProvider):
    """Completion provider that replays canned replies and records requests."""

    def __init__(self, replies: Iterable[Union[str, Exception]] = ()) -> None:
        self.replies: List[Union[str, Exception]] = list(replies)
        self.requests: List[List[ChatMessage]] = []

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        self.requests.append(list(messages))
        if not self.replies:
            raise AssertionError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, ai=AIProviderConfig(type="openai", api_key="test", stream=False))


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def completion() -> ScriptedCompletion:
    return ScriptedCompletion()


@pytest.fixture
def engine_context(settings: Settings, console: RecordingConsole, completion: ScriptedCompletion):
    return build_context(settings, completion=completion, console=console)


@pytest.fixture
def in_tmp_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "/",
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
