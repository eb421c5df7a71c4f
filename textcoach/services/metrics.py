from __future__ import annotations
from typing import List, Optional, Sequence
import math
import re

import textstat

from textcoach.core.config import HARDEST_BAND, READABILITY_BANDS
from textcoach.models.report import (
    ReadabilityScores, StructureMetrics, StyleMetrics, Suggestion, TextStats,
    ToneMetrics, VocabularyMetrics, WritingAnalytics,
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_WHITESPACE = re.compile(r"\s+")
_EDGE_PUNCT = re.compile(r"^\W+|\W+$")

# heuristic, will both under- and over-detect
PASSIVE = re.compile(r"\b(am|is|are|was|were|be|been|being)\s+(\w+ed|\w+en)\b", re.IGNORECASE)

TRANSITION_WORDS = {
    "additionally", "furthermore", "moreover", "however", "nevertheless",
    "therefore", "thus", "consequently", "meanwhile", "subsequently",
    "although", "despite", "whereas", "while", "indeed", "notably",
    "specifically", "particularly", "example", "instance", "illustration",
}

FORMAL_WORDS = {"therefore", "however", "thus", "consequently", "furthermore", "moreover"}
INFORMAL_WORDS = {"like", "just", "maybe", "stuff", "things", "okay", "yeah"}


def _ratio(num: float, den: float) -> float:
    return num / den if den else 0.0


def words_of(text: str) -> List[str]:
    return [w for w in _WHITESPACE.split((text or "").strip()) if w]


def sentences_of(text: str) -> List[str]:
    return [s for s in _SENTENCE_SPLIT.split(text or "") if s.strip()]


def paragraphs_of(text: str) -> List[str]:
    return [p for p in _PARAGRAPH_SPLIT.split(text or "") if p.strip()]


def count_syllables(word: str) -> int:
    w = word.lower()
    w = re.sub(r"(?:[^laeiouy]|ed|[^laeiouy]e)$", "", w)
    w = re.sub(r"^y", "", w)
    return len(re.findall(r"[aeiouy]{1,2}", w)) or 1


def is_passive(sentence: str) -> bool:
    return PASSIVE.search(sentence) is not None


def std_dev(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def readability_level(score: float) -> str:
    for threshold, label in READABILITY_BANDS:
        if score >= threshold:
            return label
    return HARDEST_BAND


def text_stats(text: str) -> TextStats:
    """
    Counts plus a Flesch-style reading-ease score clamped to [0, 100].

    Blank text reports zero words/sentences and a score of 100: nothing to
    read is treated as trivially readable.
    """
    text = text or ""
    if not text.strip():
        return TextStats(characters=len(text))

    words = words_of(text)
    sentences = sentences_of(text)
    chars_no_spaces = len(_WHITESPACE.sub("", text))

    avg_words = _ratio(len(words), len(sentences))
    avg_chars = _ratio(chars_no_spaces, len(words))
    if sentences and words:
        score = 206.835 - 1.015 * avg_words - 84.6 * avg_chars / 4.7
    else:
        score = 100

    return TextStats(
        words=len(words),
        characters=len(text),
        characters_no_spaces=chars_no_spaces,
        sentences=len(sentences),
        paragraphs=len(paragraphs_of(text)),
        avg_words_per_sentence=round(avg_words, 1),
        readability_score=max(0, min(100, round(score))),
    )


def smog_index(complex_words: int, sentences: int) -> float:
    # McLaughlin, normalised to a 30-sentence sample
    if not sentences:
        return 0.0
    return 1.0430 * math.sqrt(complex_words * 30 / sentences) + 3.1291


def analyze_writing(text: str, suggestions: Optional[List[Suggestion]] = None) -> WritingAnalytics:
    """Extended metrics for the display layer; every ratio is 0 when its denominator is."""
    text = text or ""
    stats = text_stats(text)

    words = words_of(text)
    sentences = sentences_of(text)
    paragraphs = paragraphs_of(text)
    lowered = [_EDGE_PUNCT.sub("", w.lower()) for w in words]

    total_chars = stats.characters_no_spaces
    total_words = len(words)
    total_sentences = len(sentences)
    syllables = [count_syllables(w) for w in lowered]
    total_syllables = sum(syllables)
    complex_words = sum(1 for n in syllables if n >= 3)

    sentence_lengths = [len(words_of(s)) for s in sentences]
    passive_count = sum(1 for s in sentences if is_passive(s))
    transition_count = sum(1 for w in lowered if w in TRANSITION_WORDS)
    adverb_count = sum(1 for w in lowered if w.endswith("ly"))
    unique_words = len(set(lowered))

    if total_words and total_sentences:
        fk = 0.39 * (total_words / total_sentences) + 11.8 * (total_syllables / total_words) - 15.59
        ari = 4.71 * (total_chars / total_words) + 0.5 * (total_words / total_sentences) - 21.43
        cli = (0.0588 * (total_chars / total_words) * 100
               - 0.296 * (total_sentences / total_words) * 100
               - 15.8)
        smog = smog_index(complex_words, total_sentences)
        reading = float(textstat.reading_time(text) or 0.0)
    else:
        fk = ari = cli = smog = reading = 0.0

    formal = sum(1 for w in lowered if w in FORMAL_WORDS)
    informal = sum(1 for w in lowered if w in INFORMAL_WORDS)
    formality = min(1.0, max(0.0, _ratio(formal - informal, total_words) + 0.5))
    issues = len(suggestions or [])
    confidence = min(1.0, max(0.0, 1 - _ratio(issues, total_sentences))) if total_sentences else 1.0

    return WritingAnalytics(
        stats=stats,
        readability_level=readability_level(stats.readability_score),
        readability_scores=ReadabilityScores(
            flesch_kincaid=round(fk, 2),
            automated_readability=round(ari, 2),
            coleman_liau=round(cli, 2),
            smog_index=round(smog, 2),
            reading_time_seconds=round(reading, 2),
        ),
        vocabulary_metrics=VocabularyMetrics(
            unique_words=unique_words,
            complex_words=complex_words,
            average_word_length=round(_ratio(total_chars, total_words), 2),
            vocabulary_richness=round(_ratio(unique_words, total_words), 4),
        ),
        structure_metrics=StructureMetrics(
            average_sentence_length=round(_ratio(total_words, total_sentences), 2),
            sentence_length_variation=round(std_dev(sentence_lengths), 2),
            paragraph_count=len(paragraphs),
            average_paragraph_length=round(_ratio(total_words, len(paragraphs)), 2),
        ),
        style_metrics=StyleMetrics(
            passive_voice_count=passive_count,
            passive_voice_percentage=round(_ratio(passive_count, total_sentences) * 100, 2),
            adverb_count=adverb_count,
            adverb_percentage=round(_ratio(adverb_count, total_words) * 100, 2),
            transition_word_count=transition_count,
            transition_word_percentage=round(_ratio(transition_count, total_words) * 100, 2),
        ),
        tone_metrics=ToneMetrics(formality=round(formality, 4), confidence=round(confidence, 4)),
    )
