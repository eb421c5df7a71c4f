from __future__ import annotations
from typing import Any, Dict, List, Optional
import asyncio
import logging
import math
import re

from textcoach.core.config import (
    AI_LIMITS, COMPLETION_TIMEOUT, MIN_ANALYZABLE_CHARS, PROMPT_CHAR_LIMIT,
)
from textcoach.models.report import AnalysisReport, Assessment, DetailedScore, ToneAnalysis
from textcoach.services import llm
from textcoach.services.llm import CompletionFn, Message
from textcoach.services.metrics import readability_level, text_stats, words_of
from textcoach.services.rules import check_text
from textcoach.services.scoring import score_fallback

log = logging.getLogger("analyze")

SYSTEM = (
    "You are a professional writing analyst. Analyze text and provide realistic, "
    "critical assessment scores. Be honest and don't inflate scores."
)

PROMPT = """You are an expert writing analyst. Analyze the following text and provide a detailed, content-specific assessment. Your response must be tailored to this exact text - mention specific issues, word choices, and content elements you observe.

IMPORTANT: Vary your analysis based on the actual content. Don't use generic responses. Be specific about what you see in THIS text.

Return your analysis in this exact JSON format:

{{
  "overall": <number 0-100>,
  "correctness": <number 0-100>,
  "clarity": <number 0-100>,
  "engagement": <number 0-100>,
  "delivery": <number 0-100>,
  "improvements": [<array of 3-5 specific improvements based on this text>],
  "strengths": [<array of 2-4 specific strengths you observe in this text>],
  "toneAnalysis": {{
    "tone": "<specific tone you detect: academic/conversational/formal/informal/persuasive/narrative/etc>",
    "confidence": <number 0-100>,
    "suggestions": [<array of 2-3 tone-specific suggestions for this text>]
  }}
}}

Scoring Guidelines (be realistic and content-specific):
- Correctness (0-100): Count actual grammar/spelling errors. Deduct 5-10 points per error.
- Clarity (0-100): How clear is THIS specific text? Are sentences too long/short? Is word choice appropriate?
- Engagement (0-100): Is THIS content interesting? Does it have good examples, variety, compelling points?
- Delivery (0-100): How well does THIS text flow? Are transitions smooth? Is structure logical?
- Overall (0-100): Your holistic judgement of the text, not an average of the above.

Content-Specific Instructions:
- If text has spelling errors, mention the specific words
- If sentences are too long/short, reference actual sentence lengths
- If content lacks examples, suggest specific types relevant to the topic
- If tone is inconsistent, point out where it shifts
- If vocabulary is repetitive, mention the repeated words
- If structure is unclear, suggest specific organizational improvements

Text Length: {chars} characters, {words} words

Text to analyze:
"{text}"

Remember: Your analysis must be specific to THIS text. Mention actual content, word choices, and structural elements you observe. Vary your feedback based on the writing style, topic, and quality you see."""

INSUFFICIENT = Assessment(
    score=DetailedScore(),
    improvements=["Add more content to analyze"],
    strengths=[],
    tone=ToneAnalysis(
        tone="neutral", confidence=50,
        suggestions=["Write more content for better tone analysis"],
    ),
    source="insufficient",
)


def build_messages(text: str) -> List[Message]:
    prompt = PROMPT.format(
        chars=len(text),
        words=len(words_of(text)),
        text=text[:PROMPT_CHAR_LIMIT],
    )
    return [
        {"role": "system", "content": SYSTEM},
        {"role": "user", "content": prompt},
    ]


def _score(value: Any, default: int = 0) -> int:
    # bool is an int subclass; treat it as garbage like any other non-number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, int):
        return max(0, min(100, value))
    if not math.isfinite(value):
        return default
    return max(0, min(100, int(round(value))))


def _strings(value: Any, limit: int) -> List[str]:
    if not isinstance(value, list):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()][:limit]


def parse_assessment(data: Dict[str, Any]) -> Assessment:
    """Validate and clamp an untrusted assessment object from the model."""
    tone = data.get("toneAnalysis")
    if not isinstance(tone, dict):
        tone = {}
    tone_name = tone.get("tone")
    if not isinstance(tone_name, str) or not tone_name.strip():
        tone_name = "neutral"

    return Assessment(
        score=DetailedScore(
            overall=_score(data.get("overall")),
            correctness=_score(data.get("correctness")),
            clarity=_score(data.get("clarity")),
            engagement=_score(data.get("engagement")),
            delivery=_score(data.get("delivery")),
        ),
        improvements=_strings(data.get("improvements"), AI_LIMITS["improvements"]),
        strengths=_strings(data.get("strengths"), AI_LIMITS["strengths"]),
        tone=ToneAnalysis(
            tone=tone_name.strip().lower(),
            confidence=_score(tone.get("confidence"), default=50),
            suggestions=_strings(tone.get("suggestions"), AI_LIMITS["tone_suggestions"]),
        ),
        source="ai",
    )


async def assess(text: str, complete: Optional[CompletionFn] = None,
                 timeout: float = COMPLETION_TIMEOUT) -> Assessment:
    """
    One request to the completion service; anything short of a valid JSON
    assessment falls back to the heuristic scorer.
    """
    if len(re.sub(r"\s", "", text or "")) < MIN_ANALYZABLE_CHARS:
        return INSUFFICIENT

    complete = complete or llm.complete
    try:
        result = await asyncio.wait_for(complete(build_messages(text)), timeout=timeout)
    except asyncio.TimeoutError:
        log.warning("Completion timed out after %.1fs, using heuristic fallback", timeout)
        return score_fallback(text)
    except Exception as e:
        log.warning("Completion call failed (%s), using heuristic fallback", e)
        return score_fallback(text)

    if not result.success or not result.message:
        log.warning("Completion unavailable (%s), using heuristic fallback", result.error)
        return score_fallback(text)

    data = llm.extract_json_object(result.message)
    if data is None:
        log.warning("Completion returned no JSON object, using heuristic fallback")
        return score_fallback(text)
    try:
        return parse_assessment(data)
    except Exception as e:
        log.warning("Completion JSON failed validation (%s), using heuristic fallback", e)
        return score_fallback(text)


async def analyze_text(text: str, complete: Optional[CompletionFn] = None,
                       timeout: float = COMPLETION_TIMEOUT) -> AnalysisReport:
    text = text or ""
    suggestions = check_text(text)
    stats = text_stats(text)
    assessment = await assess(text, complete=complete, timeout=timeout)

    log.info(
        "analysis: words=%d suggestions=%d source=%s overall=%d",
        stats.words, len(suggestions), assessment.source, assessment.score.overall,
    )
    return AnalysisReport(
        score=assessment.score,
        suggestions=suggestions,
        improvements=assessment.improvements,
        strengths=assessment.strengths,
        text_stats=stats,
        readability_level=readability_level(stats.readability_score),
        tone_analysis=assessment.tone,
        source=assessment.source,
    )
