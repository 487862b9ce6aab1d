import codecs
import json
import logging
from typing import Iterable, Iterator, Optional

from pydantic import ValidationError

from ai_tools.errors import StreamParseError
from ai_tools.schemas import STREAM_EVENT_TYPES, StreamEvent, stream_event_adapter

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_PAYLOAD = "[DONE]"


class StreamParser:
    """
    Turns the raw bytes of a server-sent event stream into `StreamEvent`s.

    Chunks may split anywhere, including inside a line or a multi-byte
    character: the unterminated tail of every chunk is kept and completed by
    the next one. Only `data: ` lines are considered. A `[DONE]` payload ends
    the stream immediately. Payloads that cannot be decoded are logged,
    counted in `parse_errors` and skipped.

    One parser handles one stream; `parse` is a single-use generator.
    """

    def __init__(self) -> None:
        self.parse_errors = 0
        self.done = False

    def parse(self, chunks: Iterable[bytes]) -> Iterator[StreamEvent]:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        buffer = ""

        for chunk in chunks:
            buffer += decoder.decode(chunk)
            lines = buffer.split("\n")
            buffer = lines.pop()

            for line in lines:
                payload = self._extract_payload(line)
                if payload is None:
                    continue
                if payload == DONE_PAYLOAD:
                    self.done = True
                    return
                event = self._decode(payload)
                if event is not None:
                    yield event

        buffer += decoder.decode(b"", final=True)
        if buffer.strip():
            logger.debug("Discarding unterminated stream tail: %r", buffer)

    @staticmethod
    def _extract_payload(line: str) -> Optional[str]:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return None
        return line[len(DATA_PREFIX) :]

    def _decode(self, payload: str) -> Optional[StreamEvent]:
        try:
            return self.parse_event(payload)
        except StreamParseError as e:
            self.parse_errors += 1
            logger.error("Error parsing chunk: %s (%r)", e, e.chunk)
            return None

    @staticmethod
    def parse_event(payload: str) -> Optional[StreamEvent]:
        """
        Decodes one `data:` payload.

        Returns None for well-formed events the pipeline does not use
        (`ping`, `message_delta`, ...).

        Raises:
            StreamParseError: If the payload is not a valid stream event.
        """
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise StreamParseError(f"Invalid JSON: {e}", payload) from e

        if not isinstance(data, dict):
            raise StreamParseError("Stream event is not a JSON object", payload)

        event_type = data.get("type")
        if event_type not in STREAM_EVENT_TYPES:
            if event_type == "error":
                logger.warning("Upstream reported an error: %s", data.get("error"))
            else:
                logger.debug("Ignoring stream event of type %s", event_type)
            return None

        try:
            return stream_event_adapter.validate_python(data)
        except ValidationError as e:
            raise StreamParseError(f"Malformed {event_type} event: {e}", payload) from e
