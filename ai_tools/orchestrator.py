import logging
from typing import Generator, Iterator, List, Sequence

from ai_tools.anthropic_client import AnthropicStreamClient
from ai_tools.conversation import splice
from ai_tools.errors import DispatchError
from ai_tools.outbound import (
    DoneEvent,
    ErrorEvent,
    OutboundEvent,
    ToolResultEvent,
    relay_text,
)
from ai_tools.schemas import ConversationTurn, ToolInvocation
from ai_tools.stream_parser import StreamParser
from ai_tools.tool_accumulator import ToolCallAccumulator
from ai_tools.tool_dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

# Follow-up turns chained after a tool result. Tool calls requested in the
# deepest follow-up turn are not executed.
MAX_FOLLOW_UP_DEPTH = 1

TurnGenerator = Generator[OutboundEvent, None, List[ToolInvocation]]


class ChatOrchestrator:
    """
    Drives one chat request from the user's conversation to the final sentinel.

    `run` is a generator of outbound events. The initial model turn streams
    text straight through while tool calls are assembled; afterwards every
    tool call is executed in order, its result is sent to the client and a
    follow-up model turn continues the answer with that data.

    An orchestrator serves a single request. Closing the generator returned
    by `run` cancels the request: no further upstream calls are made.
    """

    def __init__(
        self,
        llm: AnthropicStreamClient,
        dispatcher: ToolDispatcher,
        strict_tool_blocks: bool = False,
    ):
        self.llm = llm
        self.dispatcher = dispatcher
        self.strict_tool_blocks = strict_tool_blocks

    def run(self, messages: Sequence[ConversationTurn]) -> Iterator[OutboundEvent]:
        try:
            invocations = yield from self._run_turn(messages, depth=0)
        except Exception as e:
            logger.exception("Stream error during initial turn")
            yield ErrorEvent(content=f"Stream error: {e}")
            return

        yield from self._handle_invocations(messages, invocations, depth=0)
        yield DoneEvent()

    def close(self) -> None:
        """Releases the HTTP sessions held for this request."""
        self.llm.close()
        self.dispatcher.client.close()

    def _run_turn(self, messages: Sequence[ConversationTurn], depth: int) -> TurnGenerator:
        """
        Streams one model turn: relays its text and returns the tool calls it
        assembled, in the order their blocks closed.
        """
        parser = StreamParser()
        accumulator = ToolCallAccumulator(strict=self.strict_tool_blocks)

        with self.llm.stream(messages) as chunks:
            for event in parser.parse(chunks):
                text = relay_text(event)
                if text is not None:
                    yield text
                accumulator.feed(event)

        if parser.parse_errors:
            logger.warning(
                "Skipped %d malformed chunk(s) in turn at depth %d",
                parser.parse_errors,
                depth,
            )
        return accumulator.completed

    def _handle_invocations(
        self,
        messages: Sequence[ConversationTurn],
        invocations: List[ToolInvocation],
        depth: int,
    ) -> Iterator[OutboundEvent]:
        """Executes tool calls one after another, each with its follow-up turn."""
        for invocation in invocations:
            try:
                result = self.dispatcher.execute(invocation)
            except DispatchError as e:
                yield ErrorEvent(content=f"Error executing {invocation.name}: {e}")
                continue
            except Exception as e:
                logger.exception("Unexpected failure executing %s", invocation.name)
                yield ErrorEvent(content=f"Error executing {invocation.name}: {e}")
                continue

            yield ToolResultEvent(tool_name=invocation.name, result=result)

            follow_up = splice(messages, invocation, result)
            try:
                further = yield from self._run_turn(follow_up, depth=depth + 1)
            except Exception:
                logger.exception(
                    "Error processing follow-up response for %s", invocation.name
                )
                yield ErrorEvent(
                    content=f"Unable to continue the answer after {invocation.name}"
                )
                continue

            if not further:
                continue
            if depth + 1 < MAX_FOLLOW_UP_DEPTH:
                yield from self._handle_invocations(follow_up, further, depth + 1)
            else:
                logger.info(
                    "Not executing %d tool call(s) from follow-up turn: %s",
                    len(further),
                    ", ".join(call.name for call in further),
                )
