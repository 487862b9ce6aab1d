import logging
from typing import AsyncIterator, List, Sequence

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import iterate_in_threadpool
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

import chatbot
from ai_tools.outbound import STREAM_HEADERS, encode_sse
from ai_tools.schemas import ConversationTurn
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="PokéBot")


class ChatApiRequest(BaseModel):
    messages: List[ConversationTurn]


async def stream_chat(
    request: Request, messages: Sequence[ConversationTurn]
) -> AsyncIterator[str]:
    """
    Runs the blocking orchestrator in the threadpool and forwards its events
    as server-sent events. A client disconnect closes the orchestrator.
    """
    orchestrator = chatbot.get_chat_orchestrator()
    events = orchestrator.run(messages)
    try:
        async for event in iterate_in_threadpool(events):
            if await request.is_disconnected():
                logger.info("Client disconnected, abandoning chat request")
                break
            yield encode_sse(event)
    finally:
        events.close()
        orchestrator.close()


@app.post("/api/chat")
async def chat(body: ChatApiRequest, request: Request) -> StreamingResponse:
    logger.info("Chat request with %d message(s)", len(body.messages))
    return StreamingResponse(
        stream_chat(request, body.messages),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
