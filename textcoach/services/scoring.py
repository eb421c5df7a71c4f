"""
Deterministic fallback scoring, used when the completion service cannot be
reached or returns something unusable.

Every sub-score starts from a fixed baseline and each observed text property
applies an independent deduction or bonus, so a given text always produces
the same assessment. ``overall`` is the rounded mean of the four sub-scores,
capped below a perfect score.
"""
from __future__ import annotations
from collections import Counter
from typing import Dict, List, Tuple
import re

from textcoach.core.config import FALLBACK_BOUNDS, FALLBACK_LIMITS, FALLBACK_OVERALL_CAP
from textcoach.models.report import Assessment, DetailedScore, ToneAnalysis
from textcoach.services.metrics import paragraphs_of, sentences_of, words_of
from textcoach.services.rules import MISSPELLINGS

BASELINE = {"correctness": 85, "clarity": 75, "engagement": 70, "delivery": 75}

ERROR_PENALTY = 8  # correctness points per detected error

MISSPELLING_PATTERNS = {
    wrong: re.compile(r"\b" + wrong + r"\b", re.IGNORECASE) for wrong in MISSPELLINGS
}
THERE_THEIR = re.compile(r"\b(there|their|they['’]re)\b", re.IGNORECASE)

REPETITION_STOPWORDS = {
    "that", "this", "with", "from", "they", "were", "been",
    "have", "will", "would", "could", "should",
}

TRANSITIONS = re.compile(
    r"\b(however|therefore|furthermore|moreover|additionally|consequently)\b", re.IGNORECASE)
EXAMPLES = re.compile(r"\b(example|instance|specifically|particularly)\b", re.IGNORECASE)
ANALYTICAL = re.compile(r"\b(analyze|evaluate|demonstrate|research|study)\b", re.IGNORECASE)
SECOND_PERSON = re.compile(r"\b(you|your)\b", re.IGNORECASE)

_TONE_WORDS = [
    ("academic", r"analyze|research|study|evaluate|demonstrate|hypothesis|methodology"
                 r"|conclusion|furthermore|moreover"),
    ("conversational", r"you|your|we|us|I|me|really|pretty|kind of|sort of|anyway|basically"),
    ("formal", r"therefore|consequently|furthermore|establish|implement|facilitate"
               r"|demonstrate|substantial"),
    ("persuasive", r"should|must|need to|important|crucial|essential|believe|convince|argument"),
    ("narrative", r"then|next|after|before|while|during|story|experience|remember|happened"),
    ("technical", r"system|process|method|function|analyze|data|results|performance|efficiency"),
]
# On a tie the later declared tone wins
TONE_INDICATORS: List[Tuple[str, re.Pattern]] = [
    (tone, re.compile(r"\b(" + words + r")\b", re.IGNORECASE)) for tone, words in _TONE_WORDS
]

GENERIC_IMPROVEMENT = (
    "Continue developing your writing with more practice and varied sentence structures"
)
GENERIC_STRENGTH = "Your writing shows effort and potential for improvement"


def classify_tone(text: str) -> Tuple[str, int]:
    """Dominant keyword category and its share of all hits (capped at 90)."""
    hits: Dict[str, int] = {tone: len(p.findall(text)) for tone, p in TONE_INDICATORS}
    total = sum(hits.values())
    if total == 0:
        return "neutral", 50
    dominant = None
    for tone, count in hits.items():
        # ties go to the later category
        if dominant is None or count >= hits[dominant]:
            dominant = tone
    return dominant, min(90, round(hits[dominant] / total * 100))


def _tone_suggestions(text: str, tone: str) -> List[str]:
    if tone == "academic" and not ANALYTICAL.search(text):
        return ["For academic writing, consider using more analytical language"]
    if tone == "conversational" and SECOND_PERSON.search(text):
        return ["Your conversational tone works well - maintain this engaging approach"]
    if tone == "formal" and len(text) < 200:
        return ["Your formal tone is appropriate - consider expanding with more detailed analysis"]
    return []


def _most_repeated(words: List[str]) -> Tuple[str, int] | None:
    freq: Counter = Counter()
    for word in words:
        if len(word) <= 4 or word.lower() in REPETITION_STOPWORDS:
            continue
        bare = re.sub(r"[^\w]", "", word.lower())
        if len(bare) > 4:
            freq[bare] += 1
    repeated = [(w, n) for w, n in freq.items() if n > 3]
    if not repeated:
        return None
    # stable sort keeps first-seen word on ties
    return sorted(repeated, key=lambda item: item[1], reverse=True)[0]


def _clamp(name: str, value: int) -> int:
    low, high = FALLBACK_BOUNDS[name]
    return max(low, min(high, value))


def score_fallback(text: str) -> Assessment:
    text = text or ""
    words = words_of(text)
    word_count = len(words)
    sentences = sentences_of(text)
    avg = word_count / len(sentences) if sentences else 0.0
    paragraphs = paragraphs_of(text)

    s = dict(BASELINE)
    improvements: List[str] = []
    strengths: List[str] = []

    # Common errors
    errors = 0
    for wrong, pattern in MISSPELLING_PATTERNS.items():
        found = len(pattern.findall(text))
        if found:
            errors += found
            improvements.append(
                f'Spelling error detected: "{wrong}" should be "{MISSPELLINGS[wrong]}"'
                + (f" ({found} times)" if found > 1 else ""))
    there = len(THERE_THEIR.findall(text))
    if there:
        errors += there
        improvements.append(
            f'Check usage of "there," "their," and "they\'re" - found {there} '
            f"instances that may need review")
    s["correctness"] -= errors * ERROR_PENALTY

    # Sentence length
    rounded_avg = round(avg)
    if avg > 30:
        s["clarity"] -= 20
        improvements.append(
            f"Your sentences average {rounded_avg} words each - consider breaking up "
            f"longer sentences for better readability")
    elif avg > 20:
        s["clarity"] -= 10
        improvements.append(
            f"Some sentences are quite long (averaging {rounded_avg} words) - vary your "
            f"sentence length for better flow")
    elif avg < 8:
        s["engagement"] -= 15
        improvements.append(
            f"Your sentences are very short (averaging {rounded_avg} words) - try combining "
            f"some ideas for more sophisticated writing")
    else:
        strengths.append(
            f"Good sentence length variety (averaging {rounded_avg} words per sentence)")

    # Content length
    if word_count < 30:
        s["correctness"] -= 25
        s["clarity"] -= 20
        s["engagement"] -= 30
        s["delivery"] -= 25
        improvements.append(
            f"Your text is very brief ({word_count} words) - develop your ideas with more "
            f"detail and examples")
    elif word_count < 100:
        s["engagement"] -= 20
        improvements.append(
            f"Consider expanding your content (currently {word_count} words) with more "
            f"supporting details")
    elif word_count > 500:
        strengths.append(
            f"Substantial content length ({word_count} words) shows thorough development")
    else:
        strengths.append(f"Good content length ({word_count} words) for your topic")

    # Repetition
    top = _most_repeated(words)
    if top:
        s["engagement"] -= 15
        s["delivery"] -= 10
        improvements.append(
            f'The word "{top[0]}" appears {top[1]} times - try using synonyms for variety')

    # Paragraphs
    if len(paragraphs) == 1 and word_count > 100:
        s["delivery"] -= 15
        improvements.append(
            "Consider breaking your text into multiple paragraphs to improve organization "
            "and readability")
    elif len(paragraphs) > 1:
        strengths.append(f"Good paragraph structure with {len(paragraphs)} distinct sections")

    # Punctuation variety
    if "," not in text and word_count > 50:
        s["clarity"] -= 10
        improvements.append("Consider using commas to break up complex ideas within sentences")
    if "?" in text:
        s["engagement"] += 5
        strengths.append("Good use of questions to engage readers")
    if "!" in text and word_count > 100:
        s["engagement"] += 3
    if ";" in text:
        s["delivery"] += 5
        strengths.append("Sophisticated punctuation use with semicolons")

    if TRANSITIONS.search(text):
        s["delivery"] += 5
        strengths.append("Effective use of transition words to connect ideas")
    if EXAMPLES.search(text):
        s["engagement"] += 5
        strengths.append("Good use of examples to support your points")

    s = {name: _clamp(name, value) for name, value in s.items()}

    if s["correctness"] >= 80:
        strengths.append("Strong grammar and spelling accuracy")
    if s["clarity"] >= 75:
        strengths.append("Clear and understandable writing style")
    if s["engagement"] >= 75:
        strengths.append("Engaging content that holds reader interest")
    if s["delivery"] >= 75:
        strengths.append("Well-structured and organized presentation")

    if not improvements:
        improvements.append(GENERIC_IMPROVEMENT)
    if not strengths:
        strengths.append(GENERIC_STRENGTH)

    tone, confidence = classify_tone(text)
    overall = min(FALLBACK_OVERALL_CAP, round(sum(s.values()) / 4))

    return Assessment(
        score=DetailedScore(overall=overall, **s),
        improvements=improvements[:FALLBACK_LIMITS["improvements"]],
        strengths=strengths[:FALLBACK_LIMITS["strengths"]],
        tone=ToneAnalysis(
            tone=tone,
            confidence=confidence,
            suggestions=_tone_suggestions(text, tone)[:FALLBACK_LIMITS["tone_suggestions"]],
        ),
        source="heuristic",
    )
