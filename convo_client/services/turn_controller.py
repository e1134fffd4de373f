from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
import logging

from convo_client.api.schemas.agents import Agent
from convo_client.api.schemas.chat import ChatRequest
from convo_client.core.errors import ConvoClientError, NoAgentSelectedError
from convo_client.services.agent_registry import AgentRegistry
from convo_client.services.contracts import ConvoBackendProtocol, SnapshotListener
from convo_client.services.sse_decoder import iter_frames
from convo_client.services.stream_events import iter_events
from convo_client.services.transcript import ConversationEntry, Transcript, merge_event

logger = logging.getLogger(__name__)


class TurnState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (TurnState.SENDING, TurnState.STREAMING)


@dataclass(frozen=True)
class ConversationSnapshot:
    """Read-only view handed to presentation layers after every state change."""

    entries: tuple[ConversationEntry, ...]
    state: TurnState
    error_message: str | None = None
    agents: tuple[Agent, ...] = ()
    selected_agent: Agent | None = None
    agents_error: bool = False

    @property
    def loading(self) -> bool:
        return self.state is TurnState.SENDING

    @property
    def streaming(self) -> bool:
        return self.state is TurnState.STREAMING

    @property
    def error(self) -> bool:
        return self.state is TurnState.FAILED

    @property
    def can_submit(self) -> bool:
        return not self.state.is_active


class TurnController:
    """Runs one request/response cycle at a time and owns the transcript.

    ``submit`` and ``reset`` must be called from the event loop that runs the turn task.
    Each frame is merged and published without an intermediate ``await``, so listeners
    never observe a half-applied frame.
    """

    def __init__(self, backend: ConvoBackendProtocol, registry: AgentRegistry) -> None:
        self._backend = backend
        self._registry = registry
        self._transcript = Transcript()
        self._state = TurnState.IDLE
        self._error_message: str | None = None
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._listeners: list[SnapshotListener] = []

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def registry(self) -> AgentRegistry:
        return self._registry

    def snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(
            entries=self._transcript.snapshot(),
            state=self._state,
            error_message=self._error_message,
            agents=self._registry.agents,
            selected_agent=self._registry.selected,
            agents_error=self._registry.error,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def refresh_agents(self) -> None:
        await self._registry.fetch_agents()
        self._publish()

    def select_agent(self, agent_id: int) -> None:
        self._registry.select_agent(agent_id)
        self._publish()

    def submit(self, text: str) -> bool:
        """Start a turn for ``text``; returns ``False`` when the submission was ignored."""

        if not text.strip():
            return False
        if self._state.is_active:
            logger.warning("ignoring submission while a turn is in flight", extra={"state": self._state.value})
            return False

        superseded = self._transcript.drop_unanswered_user()
        if superseded is not None:
            logger.info("replacing unanswered user message", extra={"message_length": len(superseded.text)})
        self._transcript.append_user(text)
        self._error_message = None
        self._generation += 1

        agent = self._registry.selected
        if agent is None:
            self._fail(NoAgentSelectedError("No agent is available to answer the query"))
            return True

        request = ChatRequest(query=text, prev_msgs=self._transcript.prior_messages())
        self._set_state(TurnState.SENDING)
        self._task = asyncio.create_task(self._run_turn(self._generation, agent.id, request))
        return True

    def reset(self) -> None:
        """Start a new chat: drop the transcript and abandon any in-flight turn."""

        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.info("cancelled in-flight turn on reset")
        self._transcript = Transcript()
        self._error_message = None
        self._state = TurnState.IDLE
        self._publish()

    async def wait_for_turn(self) -> None:
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    async def aclose(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
        if self._state.is_active:
            self._state = TurnState.IDLE
        self._listeners.clear()

    async def _run_turn(self, generation: int, agent_id: int, request: ChatRequest) -> None:
        try:
            async with self._backend.open_chat_stream(agent_id=agent_id, request=request) as lines:
                if generation != self._generation:
                    return
                self._set_state(TurnState.STREAMING)
                async with aclosing(iter_events(iter_frames(lines))) as events:
                    async for event in events:
                        if generation != self._generation:
                            logger.debug("discarding event from stale stream")
                            return
                        merge_event(self._transcript, event)
                        self._publish()
        except ConvoClientError as exc:
            if generation == self._generation:
                self._fail(exc)
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("turn failed unexpectedly", extra={"agent_id": agent_id})
            if generation == self._generation:
                self._fail(exc)
            return

        if generation == self._generation:
            logger.debug("turn completed", extra={"agent_id": agent_id, "entries": len(self._transcript)})
            self._set_state(TurnState.COMPLETED)

    def _fail(self, exc: Exception) -> None:
        logger.error("turn failed", extra={"error": str(exc), "error_type": type(exc).__name__})
        self._error_message = str(exc)
        self._set_state(TurnState.FAILED)

    def _set_state(self, state: TurnState) -> None:
        self._state = state
        self._publish()

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("snapshot listener failed")
