"""Server-Sent Events framing for episode streams."""

import json
from collections.abc import AsyncIterator

from deepcurrent.streaming.events import StreamEvent

SSE_MEDIA_TYPE = "text/event-stream"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: StreamEvent) -> str:
    """Frame one event as ``data: <json>`` followed by a blank line."""
    return f"data: {json.dumps(event.to_wire())}\n\n"


async def sse_stream(events: AsyncIterator[StreamEvent]) -> AsyncIterator[str]:
    """Frame every event of a stream."""
    async for event in events:
        yield format_sse(event)
