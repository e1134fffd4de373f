from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Callable, Protocol

from convo_client.api.schemas.agents import Agent
from convo_client.api.schemas.chat import ChatRequest

if TYPE_CHECKING:
    from convo_client.services.turn_controller import ConversationSnapshot


class ConvoBackendProtocol(Protocol):
    """Transport contract for the agent listing and streamed chat endpoints."""

    async def list_agents(self) -> list[Agent]:
        """Fetch the agents configured on the backend, in server order."""

    def open_chat_stream(self, *, agent_id: int, request: ChatRequest) -> AbstractAsyncContextManager[AsyncIterator[str]]:
        """Send a chat request; the context yields the body line by line, terminators stripped, once the server accepted it.

        Entering the context raises ``HttpError`` for non-2xx responses and ``NetworkError`` when
        the request fails. Iterating the lines raises ``NetworkError`` when the connection breaks.
        """

    async def close(self) -> None:
        """Release pooled HTTP connections."""


SnapshotListener = Callable[["ConversationSnapshot"], None]
