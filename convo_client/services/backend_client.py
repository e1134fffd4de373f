from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from convo_client.api.schemas.agents import Agent
from convo_client.api.schemas.chat import ChatRequest
from convo_client.core.errors import HttpError, NetworkError, ParseError
from convo_client.services.contracts import ConvoBackendProtocol

logger = logging.getLogger(__name__)

_AGENT_LIST = TypeAdapter(list[Agent])
_ERROR_DETAIL_MAX_CHARS = 512


class ConvoBackendClient(ConvoBackendProtocol):
    """httpx client for the agent API behind the host's backend proxy."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        stream_idle_timeout_seconds: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(timeout_seconds, read=stream_idle_timeout_seconds),
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def list_agents(self) -> list[Agent]:
        try:
            response = await self._client.get("/agents")
        except httpx.RequestError as exc:
            raise NetworkError(f"Failed to fetch agents: {exc}") from exc
        if not response.is_success:
            raise HttpError(status_code=response.status_code, detail=response.reason_phrase)

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise ParseError(f"agent list is not valid JSON: {exc}") from exc
        # The backend proxy wraps list responses as {"data": [...]}.
        if isinstance(payload, dict):
            payload = payload.get("data")
        try:
            return _AGENT_LIST.validate_python(payload)
        except ValidationError as exc:
            raise ParseError(str(exc)) from exc

    @asynccontextmanager
    async def open_chat_stream(self, *, agent_id: int, request: ChatRequest) -> AsyncIterator[AsyncIterator[str]]:
        logger.debug(
            "sending chat request",
            extra={"agent_id": agent_id, "query_length": len(request.query), "prior_messages": len(request.prev_msgs)},
        )
        try:
            async with self._client.stream(
                "POST",
                f"/agents/{agent_id}/chat",
                json=request.to_payload(),
                headers={"Cache-Control": "no-cache"},
            ) as response:
                if not response.is_success:
                    raise HttpError(status_code=response.status_code, detail=await self._error_detail(response))
                yield self._iter_lines(response)
        except httpx.RequestError as exc:
            raise NetworkError(f"Failed to send query to server: {exc}") from exc

    @staticmethod
    async def _iter_lines(response: httpx.Response) -> AsyncIterator[str]:
        try:
            async for line in response.aiter_lines():
                yield line
        except httpx.RequestError as exc:
            raise NetworkError(f"Stream interrupted: {exc}") from exc

    @staticmethod
    async def _error_detail(response: httpx.Response) -> str:
        try:
            body = (await response.aread()).decode("utf-8", errors="replace").strip()
        except httpx.RequestError:
            body = ""
        return body[:_ERROR_DETAIL_MAX_CHARS] or response.reason_phrase
