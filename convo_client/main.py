from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from convo_client.core.logging import configure_logging
from convo_client.core.settings import Settings, get_settings
from convo_client.dependency_injection import build_container
from convo_client.services.contracts import ConvoBackendProtocol
from convo_client.services.turn_controller import TurnController

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_session(settings: Settings | None = None) -> AsyncIterator[TurnController]:
    """Lifespan for a host embedding the client: wire services, load agents, tear down on exit."""

    settings = settings or get_settings()
    configure_logging(settings.effective_log_level)
    logger.info("starting conversation session", extra={"app_env": settings.app_env})

    container = build_container(settings)
    controller: TurnController = container.resolve(TurnController)
    backend: ConvoBackendProtocol = container.resolve(ConvoBackendProtocol)

    try:
        await controller.refresh_agents()
        yield controller
    finally:
        await controller.aclose()
        await backend.close()
        logger.info("conversation session closed")
