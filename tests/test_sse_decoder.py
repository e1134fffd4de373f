"""Unit tests for server-sent-event line decoding."""

from __future__ import annotations

import logging

import pytest

from convo_client.core.errors import DecodeError
from convo_client.services.sse_decoder import decode_line, iter_frames


async def _collect(lines) -> list[str]:
    async def _source():
        for line in lines:
            yield line

    return [frame async for frame in iter_frames(_source())]


def test_decode_line_extracts_json_object_payload() -> None:
    assert decode_line('data: {"text_content": "hi"}') == '{"text_content": "hi"}'
    assert decode_line('data:{"a": 1}') == '{"a": 1}'


def test_decode_line_ignores_blank_comment_and_other_fields() -> None:
    assert decode_line("") is None
    assert decode_line(": keep-alive") is None
    assert decode_line("event: message") is None
    assert decode_line("id: 7") is None


@pytest.mark.parametrize("line", ["data: [DONE]", "data: not json", "garbage"])
def test_decode_line_rejects_non_object_frames(line: str) -> None:
    with pytest.raises(DecodeError):
        decode_line(line)


@pytest.mark.asyncio
async def test_iter_frames_tolerates_lingering_terminators() -> None:
    frames = await _collect(['data: {"text_content": "a"}\r\n', "\r\n", 'data: {"text_content": "b"}\n'])

    assert frames == ['{"text_content": "a"}', '{"text_content": "b"}']


@pytest.mark.asyncio
async def test_iter_frames_skips_malformed_frame_and_logs(caplog: pytest.LogCaptureFixture) -> None:
    lines = ['data: {"text_content": "a"}', "data: oops", 'data: {"text_content": "b"}']

    with caplog.at_level(logging.WARNING, logger="convo_client.services.sse_decoder"):
        frames = await _collect(lines)

    assert frames == ['{"text_content": "a"}', '{"text_content": "b"}']
    assert any("malformed stream frame" in record.message for record in caplog.records)


@pytest.mark.asyncio
async def test_iter_frames_skips_frame_cut_off_at_end_of_body(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="convo_client.services.sse_decoder"):
        frames = await _collect(['data: {"text_content": "a"}', 'data: {"text_content": "b'])

    assert frames == ['{"text_content": "a"}']
    assert any("malformed stream frame" in record.message for record in caplog.records)
