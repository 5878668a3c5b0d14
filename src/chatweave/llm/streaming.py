"""Turning producer output into response fragments.

This module sits between a model transport and a ChatResponseModel:

- ``parse_ndjson_stream`` buffers chunked text into JSON objects
- ``fragments_from_openai_chunks`` maps OpenAI-compatible streaming chunks
  to text and tool call fragments
- ``consume_fragment_stream`` feeds fragments into a response one at a time,
  honoring cancellation and driving the response to a terminal state
"""

import json
from typing import Any, AsyncIterator, Dict, Optional

from chatweave.chat.response import ChatResponseModel
from chatweave.models.config import StreamingConfig
from chatweave.models.content import (
    ChatResponseContent,
    ErrorChatResponseContent,
    TextChatResponseContent,
    ToolCallChatResponseContent,
)
from chatweave.services.exceptions import FragmentStreamError
from chatweave.utils.logging import get_logger


logger = get_logger(__name__)


async def parse_ndjson_stream(stream: AsyncIterator[str]) -> AsyncIterator[dict]:
    """
    Parse NDJSON from chunked async stream.

    Input: Token-by-token chunks ('{"', 'foo', '": ', '"bar', '"}', '\\n', ...)
    Output: Complete JSON objects as they become parseable

    Error Handling:
    - Invalid JSON on a line → Log warning, skip line, continue
    - Incomplete line at stream end → Log warning, discard
    - Empty lines → Skip silently

    Args:
        stream: Async iterator yielding string chunks

    Yields:
        Parsed JSON objects (dicts) as complete lines arrive
    """
    buffer = ""
    line_number = 0

    async for chunk in stream:
        buffer += chunk

        while "\n" in buffer:
            line_end = buffer.index("\n")
            complete_line = buffer[:line_end].strip()
            buffer = buffer[line_end + 1 :]
            line_number += 1

            obj = _parse_line(complete_line, line_number)
            if obj is not None:
                yield obj

    # Handle any remaining content in buffer at stream end
    if buffer.strip():
        line_number += 1
        obj = _parse_line(buffer.strip(), line_number, final=True)
        if obj is not None:
            yield obj

    logger.debug("ndjson_stream_parsed", lines=line_number)


def _parse_line(line: str, line_number: int, final: bool = False) -> Optional[dict]:
    if not line:
        return None
    try:
        obj = json.loads(line)
    except json.JSONDecodeError as e:
        logger.warning(
            "ndjson_line_malformed",
            line_number=line_number,
            final=final,
            line=line[:100],
            position=e.pos,
            error=e.msg,
        )
        return None
    if not isinstance(obj, dict):
        logger.warning("ndjson_line_not_object", line_number=line_number, type=type(obj).__name__)
        return None
    return obj


def _extract_delta(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Extract the delta of the first choice of an OpenAI-style streaming chunk.

    OpenAI-compatible endpoints return chunks like:
    {
        "choices": [{
            "delta": {"content": "...", "tool_calls": [...]},
            "finish_reason": null
        }]
    }
    """
    try:
        choices = data.get("choices") or []
        if choices and isinstance(choices[0].get("delta"), dict):
            return choices[0]["delta"]
    except (AttributeError, KeyError, IndexError, TypeError):
        pass
    return None


async def fragments_from_openai_chunks(
    chunks: AsyncIterator[Dict[str, Any]],
) -> AsyncIterator[ChatResponseContent]:
    """
    Map OpenAI-compatible streaming chunks to response fragments.

    Text deltas become text fragments, which merge into one element. Tool
    call deltas become tool call fragments; the API only sends the call id on
    the first delta of each call, so later deltas are tagged with the id
    remembered for their ``index`` and the response routes them to the right
    element.

    Args:
        chunks: Parsed streaming chunks (e.g. from ``parse_ndjson_stream``)

    Yields:
        TextChatResponseContent and ToolCallChatResponseContent fragments
    """
    tool_call_ids: dict[int, str] = {}

    async for data in chunks:
        delta = _extract_delta(data)
        if delta is None:
            logger.debug("openai_chunk_without_delta", keys=sorted(data.keys()))
            continue

        content = delta.get("content")
        if content:
            yield TextChatResponseContent(content=content)

        for tool_call in delta.get("tool_calls") or []:
            index = tool_call.get("index", 0)
            function = tool_call.get("function") or {}
            call_id = tool_call.get("id") or tool_call_ids.get(index)
            if call_id is None:
                logger.warning("openai_tool_call_without_id", index=index)
                continue
            tool_call_ids[index] = call_id
            yield ToolCallChatResponseContent(
                id=call_id,
                name=function.get("name"),
                arguments=function.get("arguments"),
            )


async def consume_fragment_stream(
    response: ChatResponseModel,
    fragments: AsyncIterator[ChatResponseContent],
    config: Optional[StreamingConfig] = None,
) -> int:
    """
    Feed fragments into a response until the stream ends, fails or is canceled.

    The response is checked before each fragment is added; once it is
    canceled or otherwise terminal (e.g. completed by another caller) the
    stream is closed and nothing more is added. A producer exception is
    recorded with ``response.error()`` wrapped in a FragmentStreamError and is
    not re-raised; if the response is already terminal by then the failure
    is only logged.

    Args:
        response: Response to fill
        fragments: Lazy, finite fragment stream
        config: Streaming settings (defaults apply when omitted)

    Returns:
        Number of fragments added
    """
    config = config or StreamingConfig()
    consumed = 0

    try:
        async for fragment in fragments:
            if response.is_terminal:
                break
            response.response.add_content(fragment)
            consumed += 1
    except Exception as e:
        logger.error(
            "fragment_stream_failed",
            response_id=response.id,
            fragments_consumed=consumed,
            error=str(e),
            exc_info=True,
        )
        if not response.is_terminal:
            if config.record_errors_as_content:
                response.response.add_content(ErrorChatResponseContent(error=e))
            response.error(FragmentStreamError(e, consumed))
        return consumed
    finally:
        aclose = getattr(fragments, "aclose", None)
        if aclose is not None:
            await aclose()

    if response.cancellation_token.is_cancellation_requested:
        logger.info("fragment_stream_canceled", response_id=response.id, fragments_consumed=consumed)
        return consumed

    logger.info("fragment_stream_finished", response_id=response.id, fragments_consumed=consumed)
    if config.complete_on_exhaustion and not response.is_terminal:
        response.complete()
    return consumed
