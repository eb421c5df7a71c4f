# textcoach/services/llm.py
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel

from textcoach.core.config import (
    COMPLETION_MAX_TOKENS,
    COMPLETION_TEMPERATURE,
    COMPLETION_TIMEOUT,
    OPENAI_MODEL,
    openai_api_key,
)

log = logging.getLogger("llm")

Role = Literal["system", "user", "assistant"]
Message = Dict[str, str]  # {"role": Role, "content": str}


class CompletionResult(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


# Anything that takes chat messages and returns a CompletionResult
CompletionFn = Callable[[List[Message]], Awaitable[CompletionResult]]

MISSING_KEY_ERROR = (
    "OpenAI API key not configured. Please add OPENAI_API_KEY to your environment variables."
)


async def complete(messages: List[Message]) -> CompletionResult:
    """
    Single call to OpenAI Chat Completions.

    Never raises: a missing key, a non-2xx status, a timeout or an empty
    reply all come back as ``success=False`` with an explanatory error.
    """
    api_key = openai_api_key()
    if not api_key:
        return CompletionResult(success=False, error=MISSING_KEY_ERROR)

    log.info("LLM chat call model=%s, messages=%d", OPENAI_MODEL, len(messages))
    # one request per call; the caller falls back instead of retrying
    client = AsyncOpenAI(api_key=api_key, timeout=COMPLETION_TIMEOUT, max_retries=0)
    try:
        resp = await client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=messages,
            max_tokens=COMPLETION_MAX_TOKENS,
            temperature=COMPLETION_TEMPERATURE,
        )
    except openai.APIStatusError as e:
        reason = getattr(e.response, "reason_phrase", "") or ""
        log.warning("LLM request failed: status=%s %s", e.status_code, reason)
        return CompletionResult(
            success=False, error=f"API request failed: {e.status_code} {reason}".strip())
    except openai.APITimeoutError:
        log.warning("LLM request timed out after %.1fs", COMPLETION_TIMEOUT)
        return CompletionResult(success=False, error="Request timed out")
    except openai.OpenAIError as e:
        log.warning("LLM request error: %s", e)
        return CompletionResult(success=False, error=str(e) or e.__class__.__name__)
    finally:
        await client.close()

    content = ""
    if resp.choices:
        content = (resp.choices[0].message.content or "").strip()
    if not content:
        return CompletionResult(success=False, error="No response from AI")
    return CompletionResult(success=True, message=content)


def _balanced_end(text: str, start: int, opening: str = "{", closing: str = "}") -> int:
    """Index just past the bracket closing the one at ``start``, or -1."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    First balanced ``{...}`` block in the model output that parses as a JSON
    object. The model may wrap it in prose or markdown fences.
    """
    if not text:
        return None
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end != -1:
            try:
                data = json.loads(text[start:end])
            except ValueError:
                data = None
            if isinstance(data, dict):
                return data
        start = text.find("{", start + 1)
    return None


def extract_json_array(text: str) -> Optional[List[Any]]:
    """Same scan as ``extract_json_object`` for the first ``[...]`` list."""
    if not text:
        return None
    start = text.find("[")
    while start != -1:
        end = _balanced_end(text, start, "[", "]")
        if end != -1:
            try:
                data = json.loads(text[start:end])
            except ValueError:
                data = None
            if isinstance(data, list):
                return data
        start = text.find("[", start + 1)
    return None
