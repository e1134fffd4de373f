from __future__ import annotations

import punq

from convo_client.core.settings import Settings
from convo_client.services.agent_registry import AgentRegistry
from convo_client.services.backend_client import ConvoBackendClient
from convo_client.services.contracts import ConvoBackendProtocol
from convo_client.services.turn_controller import TurnController


def build_container(settings: Settings) -> punq.Container:
    container = punq.Container()
    container.register(Settings, instance=settings)

    container.register(
        ConvoBackendProtocol,
        factory=lambda: ConvoBackendClient(
            base_url=settings.backend_base_url,
            timeout_seconds=settings.request_timeout_seconds,
            stream_idle_timeout_seconds=settings.stream_idle_timeout_seconds,
        ),
        scope=punq.Scope.singleton,
    )
    container.register(
        AgentRegistry,
        factory=lambda: AgentRegistry(
            backend=container.resolve(ConvoBackendProtocol),
            default_agent_name=settings.default_agent_name,
        ),
        scope=punq.Scope.singleton,
    )
    container.register(
        TurnController,
        factory=lambda: TurnController(
            backend=container.resolve(ConvoBackendProtocol),
            registry=container.resolve(AgentRegistry),
        ),
        scope=punq.Scope.singleton,
    )

    return container
