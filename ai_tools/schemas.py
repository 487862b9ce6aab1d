"""
Pydantic models for the Anthropic Messages wire format: conversation turns
sent upstream and the server-sent events streamed back.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

TOOL_USE = "tool_use"
TEXT_DELTA = "text_delta"
INPUT_JSON_DELTA = "input_json_delta"


# --- Conversation ---


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock], Field(discriminator="type")
]


class ConversationTurn(BaseModel):
    """
    One role-tagged message. Role alternation is the caller's responsibility;
    the pipeline only ever appends turns.
    """

    role: Literal["user", "assistant"]
    content: Union[str, List[ContentBlock]]


class ToolInvocation(BaseModel):
    """A complete tool call assembled from a stream. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)

    def to_content_block(self) -> ToolUseBlock:
        return ToolUseBlock(id=self.id, name=self.name, input=dict(self.input))


# --- Stream events ---


class ContentBlockInfo(BaseModel):
    # Any block type validates; only tool_use is acted upon
    type: str
    id: Optional[str] = None
    name: Optional[str] = None
    text: Optional[str] = None


class Delta(BaseModel):
    type: str
    text: Optional[str] = None
    partial_json: Optional[str] = None


class MessageStartEvent(BaseModel):
    type: Literal["message_start"] = "message_start"
    message: Optional[Dict[str, Any]] = None


class ContentBlockStartEvent(BaseModel):
    type: Literal["content_block_start"] = "content_block_start"
    index: int = 0
    content_block: ContentBlockInfo


class ContentBlockDeltaEvent(BaseModel):
    type: Literal["content_block_delta"] = "content_block_delta"
    index: int = 0
    delta: Delta


class ContentBlockStopEvent(BaseModel):
    type: Literal["content_block_stop"] = "content_block_stop"
    index: int = 0


class MessageStopEvent(BaseModel):
    type: Literal["message_stop"] = "message_stop"


StreamEvent = Annotated[
    Union[
        MessageStartEvent,
        ContentBlockStartEvent,
        ContentBlockDeltaEvent,
        ContentBlockStopEvent,
        MessageStopEvent,
    ],
    Field(discriminator="type"),
]

STREAM_EVENT_TYPES = {
    "message_start",
    "content_block_start",
    "content_block_delta",
    "content_block_stop",
    "message_stop",
}

stream_event_adapter: TypeAdapter = TypeAdapter(StreamEvent)
