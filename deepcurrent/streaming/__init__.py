"""Episode event streaming: canonical events, translation and SSE framing."""

from deepcurrent.streaming.channel import ChannelClosedError, EventChannel
from deepcurrent.streaming.events import StreamEvent
from deepcurrent.streaming.translator import EventStreamTranslator

__all__ = ["ChannelClosedError", "EventChannel", "EventStreamTranslator", "StreamEvent"]
