# textcoach/services/revise.py
from __future__ import annotations

import logging
import re
from typing import List, Optional

from textcoach.models.requests import ImprovementType
from textcoach.services import llm
from textcoach.services.llm import CompletionFn

log = logging.getLogger("revise")

EDITOR = (
    "You are a professional writing editor. Provide improved versions of text based on "
    "the specific request. Return only the rewritten text."
)

PROMPTS = {
    "clarity": "Rewrite this text to be clearer and more concise while maintaining the original meaning:",
    "engagement": "Rewrite this text to be more engaging and compelling while keeping the core message:",
    "tone": "Adjust the tone of this text to be more professional and polished:",
    "structure": "Improve the structure and flow of this text for better readability:",
}

ADVISOR = (
    "You are a helpful writing assistant. Provide 3-5 brief, actionable suggestions to "
    "improve the given text. Focus on clarity, engagement, and readability. Each "
    "suggestion should be one sentence and start with an action verb."
)

MAX_SUGGESTIONS = 5

_LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[-•*])\s*")
_QUOTED = re.compile(r'^\s*"(.*)"\s*$', re.DOTALL)


def _unquote(text: str) -> str:
    # the prompt quotes the input, so models often echo the quotes back
    m = _QUOTED.match(text)
    return m.group(1).strip() if m else text.strip()


async def improve_text(text: str, improvement_type: ImprovementType = "clarity",
                       complete: Optional[CompletionFn] = None) -> str:
    """
    Rewrite plain text for one improvement goal.

    String in, string out: if the service is unavailable or returns nothing
    usable, the input comes back unchanged.
    """
    if not text or not text.strip():
        return text or ""
    complete = complete or llm.complete

    messages = [
        {"role": "system", "content": EDITOR},
        {"role": "user", "content": f'{PROMPTS[improvement_type]}\n\n"{text}"'},
    ]
    try:
        result = await complete(messages)
    except Exception as e:
        log.warning("Rewrite failed (%s) - returning original text.", e)
        return text

    if not result.success or not result.message:
        log.info("LLM unavailable (%s) - performing no-op rewrite.", result.error)
        return text
    return _unquote(result.message) or text


def fallback_suggestions(text: str) -> List[str]:
    suggestions: List[str] = []
    if len(text) < 50:
        suggestions.append("Consider expanding your content with more details and examples.")
    if len(text.split(".")) < 3:
        suggestions.append("Try breaking down your ideas into more sentences for better readability.")
    if "?" not in text and "!" not in text:
        suggestions.append(
            "Consider adding questions or exclamations to make your writing more engaging.")
    if len(re.findall(r"\bvery\b", text, re.IGNORECASE)) > 2:
        suggestions.append("Try replacing 'very' with stronger, more specific adjectives.")
    if len(text.split("\n\n")) < 2:
        suggestions.append("Consider organizing your content into paragraphs for better structure.")

    return suggestions or [
        "Keep writing! The more you practice, the better your writing becomes.",
        "Consider reading your text aloud to check for flow and clarity.",
        "Think about your audience and adjust your tone accordingly.",
    ]


def parse_suggestion_lines(reply: str) -> List[str]:
    lines = (_LIST_MARKER.sub("", line).strip() for line in reply.splitlines())
    return [line for line in lines if len(line) > 10][:MAX_SUGGESTIONS]


async def writing_suggestions(text: str, complete: Optional[CompletionFn] = None) -> List[str]:
    if not text or not text.strip():
        return []
    complete = complete or llm.complete

    messages = [
        {"role": "system", "content": ADVISOR},
        {"role": "user",
         "content": f'Please provide writing improvement suggestions for this text:\n\n"{text}"'},
    ]
    try:
        result = await complete(messages)
    except Exception as e:
        log.warning("Suggestion request failed (%s) - using fallback suggestions.", e)
        return fallback_suggestions(text)

    if result.success and result.message:
        parsed = parse_suggestion_lines(result.message)
        if parsed:
            return parsed
    log.info("LLM unavailable or empty reply - using fallback suggestions.")
    return fallback_suggestions(text)
