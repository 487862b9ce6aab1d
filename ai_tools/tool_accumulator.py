import json
import logging
from typing import Any, Dict, List, Optional

from ai_tools.errors import ToolCallOverlapError
from ai_tools.schemas import (
    INPUT_JSON_DELTA,
    TOOL_USE,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    StreamEvent,
    ToolInvocation,
)

logger = logging.getLogger(__name__)


def parse_tool_input(raw: str) -> Dict[str, Any]:
    """
    Parses the concatenated `partial_json` fragments of one tool block.

    An empty buffer means a call without arguments. Anything that is not a
    JSON object yields an empty input rather than an error.
    """
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse tool input JSON %r: %s", raw, e)
        return {}
    if not isinstance(parsed, dict):
        logger.error("Tool input is not a JSON object: %r", raw)
        return {}
    return parsed


class ToolCallAccumulator:
    """
    Assembles tool invocations from the events of one model turn.

    Only a single tool block is tracked at a time. If a new tool block starts
    while one is still open, the open one is dropped with a warning, or
    `ToolCallOverlapError` is raised when `strict` is set.

    Create one accumulator per turn.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.current: Optional[Dict[str, str]] = None
        self.input_buffer = ""
        self.completed: List[ToolInvocation] = []
        self.abandoned: List[Dict[str, str]] = []

    def feed(self, event: StreamEvent) -> None:
        if isinstance(event, ContentBlockStartEvent):
            self._on_block_start(event)
        elif isinstance(event, ContentBlockDeltaEvent):
            self._on_block_delta(event)
        elif isinstance(event, ContentBlockStopEvent):
            self._on_block_stop()

    def _on_block_start(self, event: ContentBlockStartEvent) -> None:
        block = event.content_block
        if block.type != TOOL_USE:
            return

        if self.current is not None:
            if self.strict:
                raise ToolCallOverlapError(
                    f"Tool block {block.id} started while {self.current['id']} was open",
                    event,
                )
            logger.warning(
                "Abandoning unfinished tool call %s (%s): tool block %s started",
                self.current["id"],
                self.current["name"],
                block.id,
            )
            self.abandoned.append(self.current)

        self.current = {"id": block.id or "", "name": block.name or ""}
        self.input_buffer = ""

    def _on_block_delta(self, event: ContentBlockDeltaEvent) -> None:
        delta = event.delta
        if delta.type == INPUT_JSON_DELTA and self.current is not None:
            if delta.partial_json:
                self.input_buffer += delta.partial_json

    def _on_block_stop(self) -> None:
        if self.current is None:
            return

        invocation = ToolInvocation(
            id=self.current["id"],
            name=self.current["name"],
            input=parse_tool_input(self.input_buffer),
        )
        self.completed.append(invocation)
        self.current = None
        self.input_buffer = ""
