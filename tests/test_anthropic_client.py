import os
import sys
import unittest
from unittest.mock import MagicMock

import requests

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from ai_tools.anthropic_client import AnthropicStreamClient
from ai_tools.errors import AnthropicAPIError, TransportError
from ai_tools.schemas import ConversationTurn
from ai_tools.tool_dispatcher import POKEMON_TOOLS


def streaming_response(chunks, status_code=200, reason="OK"):
    response = MagicMock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.reason = reason
    response.iter_content.return_value = iter(chunks)
    return response


class TestAnthropicStreamClient(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock(spec=requests.Session)
        self.client = AnthropicStreamClient(
            api_key="sk-test",
            model="claude-test",
            max_tokens=256,
            system_prompt="You are PokéBot.",
            tools=POKEMON_TOOLS,
            session=self.session,
        )
        self.messages = [ConversationTurn(role="user", content="Hi")]

    def test_request_shape(self):
        self.session.post.return_value = streaming_response([b"data: x\n"])

        with self.client.stream(self.messages) as chunks:
            list(chunks)

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "https://api.anthropic.com/v1/messages")
        self.assertEqual(kwargs["headers"]["x-api-key"], "sk-test")
        self.assertEqual(kwargs["headers"]["anthropic-version"], "2023-06-01")
        self.assertTrue(kwargs["stream"])

        body = kwargs["json"]
        self.assertEqual(body["model"], "claude-test")
        self.assertEqual(body["max_tokens"], 256)
        self.assertEqual(body["system"], "You are PokéBot.")
        self.assertEqual(body["messages"], [{"role": "user", "content": "Hi"}])
        self.assertEqual(len(body["tools"]), 3)
        self.assertTrue(body["stream"])

    def test_yields_non_empty_chunks_and_closes(self):
        response = streaming_response([b"data: a\n", b"", b"data: b\n"])
        self.session.post.return_value = response

        with self.client.stream(self.messages) as chunks:
            received = list(chunks)

        self.assertEqual(received, [b"data: a\n", b"data: b\n"])
        response.close.assert_called_once()

    def test_error_status_raises(self):
        response = streaming_response([], status_code=529, reason="Overloaded")
        self.session.post.return_value = response

        with self.assertRaises(AnthropicAPIError) as ctx:
            with self.client.stream(self.messages):
                self.fail("stream should not open")

        self.assertEqual(ctx.exception.status, 529)
        self.assertEqual(str(ctx.exception), "Anthropic API error: 529 Overloaded")
        response.close.assert_called_once()

    def test_unreachable_api_raises_transport_error(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(TransportError):
            with self.client.stream(self.messages):
                pass

    def test_interrupted_stream_raises(self):
        def broken():
            yield b"data: a\n"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

        response = streaming_response([])
        response.iter_content.return_value = broken()
        self.session.post.return_value = response

        with self.assertRaises(AnthropicAPIError):
            with self.client.stream(self.messages) as chunks:
                list(chunks)
        response.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
