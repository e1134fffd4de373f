"""Shared fakes and helpers for conversation client tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
import json

import pytest

from convo_client.api.schemas.agents import Agent
from convo_client.api.schemas.chat import ChatRequest
from convo_client.core.settings import Settings
from convo_client.services.agent_registry import AgentRegistry
from convo_client.services.turn_controller import TurnController


def frame(**payload: object) -> str:
    """One stream line carrying a server event, terminator already stripped."""

    return f"data: {json.dumps(payload)}"


class FakeChatStream:
    """Scripted chat response: fixed lines, optional queue-fed lines, optional failures."""

    def __init__(
        self,
        lines: Sequence[str] = (),
        *,
        open_error: Exception | None = None,
        stream_error: Exception | None = None,
        queue: asyncio.Queue[str | None] | None = None,
    ) -> None:
        self.lines = list(lines)
        self.open_error = open_error
        self.stream_error = stream_error
        self.queue = queue
        self.cancelled = False

    async def iter_lines(self) -> AsyncIterator[str]:
        try:
            for line in self.lines:
                yield line
            if self.queue is not None:
                while True:
                    line = await self.queue.get()
                    if line is None:
                        break
                    yield line
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.stream_error is not None:
            raise self.stream_error


class FakeBackend:
    """In-memory stand-in for the agent API at the transport boundary."""

    def __init__(
        self,
        agents: Sequence[Agent] | None = None,
        *,
        list_error: Exception | None = None,
        streams: Sequence[FakeChatStream] = (),
    ) -> None:
        self.agents = list(agents or [])
        self.list_error = list_error
        self.streams = list(streams)
        self.chat_calls: list[tuple[int, dict[str, object]]] = []
        self.closed = False

    async def list_agents(self) -> list[Agent]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.agents)

    @asynccontextmanager
    async def open_chat_stream(self, *, agent_id: int, request: ChatRequest) -> AsyncIterator[AsyncIterator[str]]:
        self.chat_calls.append((agent_id, request.to_payload()))
        script = self.streams.pop(0) if self.streams else FakeChatStream()
        if script.open_error is not None:
            raise script.open_error
        yield script.iter_lines()

    async def close(self) -> None:
        self.closed = True


class GatedBackend(FakeBackend):
    """Holds every chat request open until ``gate`` is set."""

    def __init__(self, *args, gate: asyncio.Event, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.gate = gate

    @asynccontextmanager
    async def open_chat_stream(self, *, agent_id: int, request: ChatRequest) -> AsyncIterator[AsyncIterator[str]]:
        await self.gate.wait()
        async with super().open_chat_stream(agent_id=agent_id, request=request) as lines:
            yield lines


def make_agents(*names: str) -> list[Agent]:
    return [Agent(id=index, agent_name=name) for index, name in enumerate(names, start=1)]


async def build_controller(backend: FakeBackend) -> TurnController:
    registry = AgentRegistry(backend=backend)
    controller = TurnController(backend=backend, registry=registry)
    await controller.refresh_agents()
    return controller


async def wait_until(predicate, timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(CONVO_BACKEND_BASE_URL="http://backend.test/api/proxy/tangerine/api")


@pytest.fixture
def agents() -> list[Agent]:
    return make_agents("general", "inscope-all-docs-agent")
