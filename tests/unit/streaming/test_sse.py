"""Tests for SSE framing."""

import json
from uuid import uuid4

from deepcurrent.streaming.events import (
    CompleteEvent,
    ErrorEvent,
    NoteCreatedEvent,
    StatusEvent,
)
from deepcurrent.streaming.sse import SSE_HEADERS, format_sse, sse_stream


def _payload(frame: str) -> dict:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame[len("data: ") : -2])


class TestFormatSse:
    """Tests for format_sse."""

    def test_camel_case_keys(self) -> None:
        note_id = uuid4()
        frame = format_sse(NoteCreatedEvent(note_id=note_id, note_title="Research: q"))

        assert _payload(frame) == {
            "type": "note_created",
            "noteId": str(note_id),
            "noteTitle": "Research: q",
        }

    def test_none_fields_omitted(self) -> None:
        payload = _payload(format_sse(StatusEvent(status="saving", message="Creating note...")))
        assert payload == {"type": "status", "status": "saving", "message": "Creating note..."}

    def test_headers_disable_buffering(self) -> None:
        assert SSE_HEADERS["Cache-Control"] == "no-cache"
        assert SSE_HEADERS["X-Accel-Buffering"] == "no"


class TestSseStream:
    """Tests for sse_stream."""

    async def test_frames_every_event(self) -> None:
        episode_id, note_id = uuid4(), uuid4()

        async def events():
            yield ErrorEvent(error="boom")
            yield CompleteEvent(episode_id=episode_id, note_id=note_id)

        frames = [frame async for frame in sse_stream(events())]

        assert [_payload(f)["type"] for f in frames] == ["error", "complete"]
        assert _payload(frames[1])["episodeId"] == str(episode_id)
