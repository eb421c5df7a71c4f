# textcoach/services/grammar_ai.py
"""
Positioned suggestions from the completion service.

The model is asked for a JSON array of edits with character offsets. Offsets
coming back from the model are untrusted: each one is checked against the
text and re-anchored on the quoted original when it drifts, and anything that
cannot be anchored is dropped.
"""
from __future__ import annotations
import asyncio
import logging
import math
import re
from typing import Any, Dict, List, Optional

from textcoach.core.config import COMPLETION_TIMEOUT
from textcoach.models.report import Suggestion
from textcoach.models.requests import WritingMode, WritingSettings
from textcoach.services import llm
from textcoach.services.llm import CompletionFn, Message
from textcoach.services.metrics import sentences_of, words_of

log = logging.getLogger("grammar_ai")

LANGUAGE_INSTRUCTIONS = {
    "us": "Use American English spelling (e.g., 'color', 'organize', 'analyze').",
    "uk": "Use British English spelling (e.g., 'colour', 'organise', 'analyse').",
    "au": "Use Australian English spelling and conventions.",
    "ca": "Use Canadian English spelling and conventions.",
}

CITATION_INSTRUCTIONS = {
    "mla": "Follow MLA style guidelines: use present tense for literary analysis, "
           "avoid contractions, use formal academic language.",
    "apa": "Follow APA style guidelines: use past tense for research descriptions, "
           "emphasize clear and concise writing, avoid bias.",
    "chicago": "Follow Chicago style guidelines: maintain formal academic tone, "
               "use precise citations format.",
    "harvard": "Follow Harvard referencing style: maintain academic formality, "
               "use third person perspective.",
    "none": "Use general academic writing conventions.",
}

MODE_INSTRUCTIONS = {
    "academic": "Use academic writing style with formal language and proper citations.",
    "business": "Use professional business writing style with clear and concise language.",
    "creative": "Use creative writing style with expressive and engaging language.",
    "technical": "Use technical writing style with precise terminology and clear structure.",
    "casual": "Use casual writing style with informal language and natural flow.",
}

CHECKING_INSTRUCTIONS = {
    "speed": "Focus only on critical errors: grammar mistakes, spelling errors, "
             "and major clarity issues.",
    "standard": "Provide balanced checking: grammar, spelling, basic style, "
                "and readability improvements.",
    "comprehensive": "Provide thorough analysis: grammar, spelling, advanced style, "
                     "readability, tone, and structural improvements.",
}

CRITICAL_FOCUS = """Focus ONLY on:
1. Grammar errors (subject-verb agreement, tense consistency, etc.)
2. Spelling mistakes
3. Critical clarity issues that affect comprehension"""

FULL_FOCUS = """Focus on:
1. Grammar errors (subject-verb agreement, tense consistency, etc.)
2. Spelling mistakes
3. Style improvements (word choice, sentence variety, clarity)
4. Readability issues (sentence length, passive voice, filler words)"""

OUTPUT_FORMAT = """For each issue found, provide:
- The exact original text that needs changing
- The suggested replacement
- A clear reason why this change improves the writing
- The type of issue (grammar, spelling, style, readability)
- Severity level (low, medium, high)
- The exact character positions where the issue starts and ends

Respond with a JSON array of suggestions. Each suggestion should have this exact format:
{
  "original": "exact text to replace",
  "suggestion": "improved text",
  "reason": "explanation of why this is better",
  "type": "grammar|spelling|style|readability",
  "severity": "low|medium|high",
  "start_pos": number,
  "end_pos": number
}

Only suggest improvements that genuinely make the writing better. Be specific and actionable."""

SEVERITY_MAP = {"high": "error", "medium": "warning"}
KINDS = {"grammar", "spelling", "style", "readability"}
FALLBACK_MESSAGE = "AI-suggested improvement"

# '"x" should be "y"', "'x' -> 'y'", '"x" → "y"', '"x" to "y"'
_TEXT_EDIT = re.compile(
    r"[\"']([^\"']+)[\"']\s*(?:should be|→|->|to)\s*[\"']([^\"']+)[\"']", re.IGNORECASE)


def system_prompt(settings: WritingSettings) -> str:
    critical = settings.checking_mode == "speed" or settings.critical_errors_only
    parts = [
        "You are an expert writing assistant. Analyze the provided text and "
        "identify specific writing improvements.",
        "\n".join([
            LANGUAGE_INSTRUCTIONS[settings.language_variant],
            CITATION_INSTRUCTIONS[settings.academic_style],
            MODE_INSTRUCTIONS[settings.writing_mode],
            CHECKING_INSTRUCTIONS[settings.checking_mode],
        ]),
        CRITICAL_FOCUS if critical else FULL_FOCUS,
        OUTPUT_FORMAT,
    ]
    return "\n\n".join(parts)


def build_messages(text: str, settings: WritingSettings) -> List[Message]:
    return [
        {"role": "system", "content": system_prompt(settings)},
        {"role": "user", "content":
            f'Please analyze this text and provide specific writing suggestions:\n\n"{text}"'},
    ]


def _position(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        return None
    return int(value)


def _anchor(text: str, original: str, start: Optional[int], end: Optional[int]):
    """(start, end) of ``original`` in ``text``, trusting the model's offsets only if they match."""
    if start is not None and end is not None and 0 <= start < end <= len(text):
        if text[start:end] == original:
            return start, end
    found = text.find(original)
    if found == -1:
        return None
    return found, found + len(original)


def _to_suggestion(text: str, item: Dict[str, Any], index: int) -> Optional[Suggestion]:
    original = item.get("original")
    replacement = item.get("suggestion")
    if not isinstance(original, str) or not original:
        return None
    if not isinstance(replacement, str) or not replacement:
        return None

    span = _anchor(text, original, _position(item.get("start_pos")), _position(item.get("end_pos")))
    if span is None:
        log.debug("Dropping AI suggestion not found in text: %r", original)
        return None
    start, end = span

    reason = item.get("reason") if isinstance(item.get("reason"), str) else ""
    kind = item.get("type") if item.get("type") in KINDS else "style"
    return Suggestion(
        id=f"AI-{index}-{start}-{end}",
        kind=kind,
        severity=SEVERITY_MAP.get(item.get("severity"), "suggestion"),
        start=start,
        end=end,
        original_text=original,
        replacement=replacement,
        message=reason or FALLBACK_MESSAGE,
        explanation=reason,
        rule="AI",
    )


def parse_text_response(reply: str, text: str) -> List[Suggestion]:
    """Fallback for replies that carry edits as prose rather than JSON."""
    out: List[Suggestion] = []
    for index, line in enumerate(reply.splitlines()):
        m = _TEXT_EDIT.search(line)
        if not m:
            continue
        original, replacement = m.group(1), m.group(2)
        found = text.find(original)
        if found == -1:
            continue
        out.append(Suggestion(
            id=f"AI-TEXT-{index}-{found}",
            kind="style",
            severity="suggestion",
            start=found,
            end=found + len(original),
            original_text=original,
            replacement=replacement,
            message=FALLBACK_MESSAGE,
            explanation=FALLBACK_MESSAGE,
            rule="AI",
        ))
    return out


def parse_suggestions(reply: str, text: str) -> List[Suggestion]:
    items = llm.extract_json_array(reply)
    if items is None:
        log.info("No JSON array in reply - trying text parsing.")
        return _dedupe(parse_text_response(reply, text))

    out = []
    for index, item in enumerate(items):
        if isinstance(item, dict):
            s = _to_suggestion(text, item, index)
            if s is not None:
                out.append(s)
    return _dedupe(out)


def _dedupe(suggestions: List[Suggestion]) -> List[Suggestion]:
    seen = set()
    unique = []
    for s in suggestions:
        if s.span not in seen:
            seen.add(s.span)
            unique.append(s)
    return sorted(unique, key=lambda s: s.start)


async def check_with_ai(text: str, settings: Optional[WritingSettings] = None,
                        complete: Optional[CompletionFn] = None,
                        timeout: float = COMPLETION_TIMEOUT) -> List[Suggestion]:
    if not text or not text.strip():
        return []
    settings = settings or WritingSettings()
    complete = complete or llm.complete

    log.info("AI check: chars=%d mode=%s checking=%s",
             len(text), settings.writing_mode, settings.checking_mode)
    try:
        result = await asyncio.wait_for(complete(build_messages(text, settings)), timeout=timeout)
    except asyncio.TimeoutError:
        log.warning("AI check timed out after %.1fs - no suggestions.", timeout)
        return []
    except Exception as e:
        log.warning("AI check failed (%s) - no suggestions.", e)
        return []

    if not result.success or not result.message:
        log.info("LLM unavailable (%s) - no AI suggestions.", result.error)
        return []

    suggestions = parse_suggestions(result.message, text)
    log.info("AI check: %d suggestions", len(suggestions))
    return suggestions


async def check_grammar_and_style(text: str, mode: Optional[WritingMode],
                                  complete: Optional[CompletionFn] = None) -> List[Suggestion]:
    if not text or not mode:
        return []
    return await check_with_ai(text, WritingSettings(writing_mode=mode), complete=complete)


def writing_score(text: str, mode: Optional[WritingMode]) -> int:
    """Rough length-weighted score; no suggestions involved."""
    if not text or not mode:
        return 0
    words = len(words_of(text))
    sentences = len(sentences_of(text))
    avg = words / sentences if sentences else 0

    score = 100
    if avg < 5 or avg > 30:
        score -= 10
    scaled = score * (1 + math.log10(len(text) / 1000 + 1))
    return round(max(0, min(100, scaled)))
