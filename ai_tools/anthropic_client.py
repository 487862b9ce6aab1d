import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import requests

from ai_tools.conversation import to_api_messages
from ai_tools.errors import AnthropicAPIError
from ai_tools.schemas import ConversationTurn

logger = logging.getLogger(__name__)


class AnthropicStreamClient:
    """
    Opens streaming requests against the Anthropic Messages API.

    Only one conversational shape is supported: a fixed system prompt and tool
    set, with the conversation supplied per call.
    """

    API_URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"
    CONNECT_TIMEOUT = 10
    READ_TIMEOUT = 120

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        max_tokens: int = 1024,
        system_prompt: str = "",
        tools: Optional[List[Dict[str, Any]]] = None,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            api_key (str, optional): Anthropic API key sent as `x-api-key`.
            model (str): The model to use.
            max_tokens (int, optional): Output token cap per turn. Defaults to 1024.
            system_prompt (str, optional): The system prompt to use. Defaults to "".
            tools (List[Dict], optional): Tool definitions offered to the model.
            api_url (str, optional): Override for the Messages endpoint.
            session (requests.Session, optional): HTTP session to reuse across turns.
        """
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self.tools = tools or []
        self.api_url = api_url or self.API_URL
        self.session = session if session is not None else requests.Session()

    def _prepare_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key or "",
            "anthropic-version": self.API_VERSION,
        }

    def _prepare_request_body(self, messages: Sequence[ConversationTurn]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": self.system_prompt,
            "messages": to_api_messages(messages),
            "tools": self.tools,
            "stream": True,
        }

    @contextmanager
    def stream(self, messages: Sequence[ConversationTurn]) -> Iterator[Iterator[bytes]]:
        """
        Starts one model turn and yields the raw response body as byte chunks.
        The HTTP response is closed when the context exits.

        Raises:
            AnthropicAPIError: If the API is unreachable, answers with a non-2xx
                status, or the connection breaks mid-stream.
        """
        try:
            response = self.session.post(
                self.api_url,
                headers=self._prepare_headers(),
                json=self._prepare_request_body(messages),
                stream=True,
                timeout=(self.CONNECT_TIMEOUT, self.READ_TIMEOUT),
            )
        except requests.exceptions.RequestException as e:
            raise AnthropicAPIError(f"Anthropic API unreachable: {e}") from e

        try:
            if not response.ok:
                raise AnthropicAPIError(
                    f"Anthropic API error: {response.status_code} {response.reason}",
                    response.status_code,
                )
            yield self._iter_chunks(response)
        finally:
            response.close()

    @staticmethod
    def _iter_chunks(response: requests.Response) -> Iterator[bytes]:
        try:
            for chunk in response.iter_content(chunk_size=None):
                if chunk:
                    yield chunk
        except requests.exceptions.RequestException as e:
            raise AnthropicAPIError(f"Anthropic stream interrupted: {e}") from e

    def close(self) -> None:
        self.session.close()
