from __future__ import annotations

from collections.abc import Sequence
import logging

from convo_client.api.schemas.agents import Agent
from convo_client.core.errors import ConvoClientError
from convo_client.services.contracts import ConvoBackendProtocol

logger = logging.getLogger(__name__)

DEFAULT_AGENT_NAME = "inscope-all-docs-agent"


def choose_default_agent(agents: Sequence[Agent], preferred_name: str = DEFAULT_AGENT_NAME) -> Agent | None:
    for agent in agents:
        if agent.name == preferred_name:
            return agent
    return agents[0] if agents else None


class AgentRegistry:
    """Selectable agents and the active selection read by the turn controller."""

    def __init__(self, backend: ConvoBackendProtocol, default_agent_name: str = DEFAULT_AGENT_NAME) -> None:
        self._backend = backend
        self._default_agent_name = default_agent_name
        self._agents: tuple[Agent, ...] = ()
        self._selected: Agent | None = None
        self.error = False

    @property
    def agents(self) -> tuple[Agent, ...]:
        return self._agents

    @property
    def selected(self) -> Agent | None:
        return self._selected

    async def fetch_agents(self) -> None:
        try:
            agents = await self._backend.list_agents()
        except ConvoClientError as exc:
            logger.error("error fetching agents from backend", extra={"error": str(exc)})
            self.error = True
            self._agents = ()
            self._selected = None
            return

        self.error = False
        self._agents = tuple(agents)
        self._selected = choose_default_agent(self._agents, self._default_agent_name)
        logger.info(
            "loaded agents",
            extra={
                "agents_count": len(self._agents),
                "selected_agent": self._selected.name if self._selected else None,
            },
        )

    def get(self, agent_id: int) -> Agent | None:
        return next((agent for agent in self._agents if agent.id == agent_id), None)

    def select_agent(self, agent_id: int) -> None:
        agent = self.get(agent_id)
        if agent is None:
            logger.debug("ignoring selection of unknown agent", extra={"agent_id": agent_id})
            return
        self._selected = agent
