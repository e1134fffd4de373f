from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
import logging

from convo_client.core.errors import DecodeError

logger = logging.getLogger(__name__)

_DATA_FIELD = "data:"
_IGNORED_FIELDS = ("event:", "id:", "retry:")


def decode_line(line: str) -> str | None:
    """Return the JSON payload of a ``data:`` line, ``None`` for lines that carry no frame.

    Raises ``DecodeError`` when a ``data:`` line does not hold a JSON object.
    """

    if not line or line.startswith(":") or line.startswith(_IGNORED_FIELDS):
        return None
    if not line.startswith(_DATA_FIELD):
        raise DecodeError(f"unexpected stream line {line[:80]!r}")

    payload = line[len(_DATA_FIELD) :]
    if payload.startswith(" "):
        payload = payload[1:]
    payload = payload.strip()
    if not (payload.startswith("{") and payload.endswith("}")):
        raise DecodeError(f"data field is not a JSON object: {payload[:80]!r}")
    return payload


async def iter_frames(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield frame payloads, in arrival order, from already-split stream lines.

    Malformed lines (including a frame cut off by the end of the body) are logged and skipped.
    """

    async for line in lines:
        try:
            frame = decode_line(line.rstrip("\r\n"))
        except DecodeError as exc:
            logger.warning("skipping malformed stream frame", extra={"error": str(exc)})
            continue
        if frame is not None:
            yield frame
