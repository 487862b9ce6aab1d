from typing import Any, Dict, List, Sequence

from ai_tools.schemas import ConversationTurn, ToolInvocation, ToolResultBlock
from pokemon_tools.models import ToolResult


def serialize_tool_result(result: ToolResult) -> str:
    return result.model_dump_json(by_alias=True)


def splice(
    original: Sequence[ConversationTurn],
    invocation: ToolInvocation,
    result: ToolResult,
) -> List[ConversationTurn]:
    """
    Extends a conversation with a tool call and its result so the model can
    continue from the fetched data.

    Appends an assistant turn holding the `tool_use` block and a user turn
    holding the matching `tool_result` block (same id). The original sequence
    is left untouched.
    """
    return [
        *original,
        ConversationTurn(role="assistant", content=[invocation.to_content_block()]),
        ConversationTurn(
            role="user",
            content=[
                ToolResultBlock(
                    tool_use_id=invocation.id,
                    content=serialize_tool_result(result),
                )
            ],
        ),
    ]


def to_api_messages(turns: Sequence[ConversationTurn]) -> List[Dict[str, Any]]:
    """Serializes turns for the Messages API request body."""
    return [turn.model_dump(mode="json") for turn in turns]
