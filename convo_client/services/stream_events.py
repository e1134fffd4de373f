from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
import logging

from pydantic import ValidationError

from convo_client.api.schemas.stream import StreamEvent
from convo_client.core.errors import ParseError

logger = logging.getLogger(__name__)


def parse_frame(frame: str) -> StreamEvent:
    try:
        return StreamEvent.model_validate_json(frame)
    except ValidationError as exc:
        raise ParseError(str(exc)) from exc


def interpret_frame(frame: str) -> StreamEvent | None:
    """Map a frame payload to a stream event, or ``None`` when it carries nothing usable."""

    try:
        event = parse_frame(frame)
    except ParseError as exc:
        logger.warning("skipping unparseable stream event", extra={"error": str(exc), "frame_length": len(frame)})
        return None

    if not event.is_meaningful:
        logger.debug("discarding empty stream event")
        return None
    return event


async def iter_events(frames: AsyncIterable[str]) -> AsyncIterator[StreamEvent]:
    async for frame in frames:
        event = interpret_frame(frame)
        if event is not None:
            yield event
