"""
Events sent to the chat client, and their server-sent event encoding.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel

from ai_tools.schemas import TEXT_DELTA, ContentBlockDeltaEvent, StreamEvent
from pokemon_tools.models import ToolResult

STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class TextEvent(BaseModel):
    type: Literal["text"] = "text"
    content: str


class ToolResultEvent(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    tool_name: str
    result: ToolResult


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    content: str


class DoneEvent(BaseModel):
    """Terminal sentinel, encoded as `data: [DONE]`."""

    type: Literal["done"] = "done"


OutboundEvent = Union[TextEvent, ToolResultEvent, ErrorEvent, DoneEvent]


def relay_text(event: StreamEvent) -> Optional[TextEvent]:
    """Wraps a text delta for the client; every other event yields None."""
    if isinstance(event, ContentBlockDeltaEvent) and event.delta.type == TEXT_DELTA:
        return TextEvent(content=event.delta.text or "")
    return None


def encode_sse(event: OutboundEvent) -> str:
    if isinstance(event, DoneEvent):
        return "data: [DONE]\n\n"
    return f"data: {event.model_dump_json(by_alias=True)}\n\n"
