from typing import Any, Optional


class PokedexError(Exception):
    """Base class for failures inside the chat pipeline."""


class TransportError(PokedexError):
    """An upstream service could not be reached or answered with a non-2xx status."""


class AnthropicAPIError(TransportError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class StreamParseError(PokedexError):
    """A streamed chunk could not be understood. Never fatal for the stream."""

    def __init__(self, message: str, chunk: Any = None):
        super().__init__(message)
        self.chunk = chunk


class ToolCallOverlapError(StreamParseError):
    """A tool block started while another one was still open (strict mode only)."""


class DispatchError(PokedexError):
    """A tool invocation could not be serviced. Scoped to that single invocation."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name
