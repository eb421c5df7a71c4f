from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional, Tuple

Severity = Literal["low", "medium", "high", "error", "warning", "suggestion"]
Kind = Literal["grammar", "spelling", "style", "readability", "structure", "tone"]


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: Kind
    severity: Severity
    start: int
    end: int
    original_text: str
    replacement: str = ""
    message: str
    explanation: str = ""
    rule: Optional[str] = None

    @property
    def span(self) -> Tuple[int, int]:
        return self.start, self.end


class TextStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    words: int = 0
    characters: int = 0
    characters_no_spaces: int = 0
    sentences: int = 0
    paragraphs: int = 0
    avg_words_per_sentence: float = 0.0
    readability_score: int = 100


class DetailedScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall: int = Field(0, ge=0, le=100)
    correctness: int = Field(0, ge=0, le=100)
    clarity: int = Field(0, ge=0, le=100)
    engagement: int = Field(0, ge=0, le=100)
    delivery: int = Field(0, ge=0, le=100)


class ToneAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    tone: str = "neutral"
    confidence: int = Field(50, ge=0, le=100)
    suggestions: List[str] = []


class Assessment(BaseModel):
    """Score, feedback and tone from either the generative or heuristic path."""
    model_config = ConfigDict(frozen=True)

    score: DetailedScore
    improvements: List[str] = []
    strengths: List[str] = []
    tone: ToneAnalysis = ToneAnalysis()
    source: Literal["ai", "heuristic", "insufficient"] = "heuristic"


class AnalysisReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: DetailedScore
    suggestions: List[Suggestion]
    improvements: List[str]
    strengths: List[str]
    text_stats: TextStats
    readability_level: str
    tone_analysis: ToneAnalysis
    source: Literal["ai", "heuristic", "insufficient"] = "heuristic"


# Extended analytics for the display layer

class ReadabilityScores(BaseModel):
    flesch_kincaid: float = 0.0
    automated_readability: float = 0.0
    coleman_liau: float = 0.0
    smog_index: float = 0.0
    reading_time_seconds: float = 0.0


class VocabularyMetrics(BaseModel):
    unique_words: int = 0
    complex_words: int = 0
    average_word_length: float = 0.0
    vocabulary_richness: float = 0.0


class StructureMetrics(BaseModel):
    average_sentence_length: float = 0.0
    sentence_length_variation: float = 0.0
    paragraph_count: int = 0
    average_paragraph_length: float = 0.0


class StyleMetrics(BaseModel):
    passive_voice_count: int = 0
    passive_voice_percentage: float = 0.0
    adverb_count: int = 0
    adverb_percentage: float = 0.0
    transition_word_count: int = 0
    transition_word_percentage: float = 0.0


class ToneMetrics(BaseModel):
    formality: float = 0.5    # 0-1
    confidence: float = 1.0   # 0-1


class WritingAnalytics(BaseModel):
    stats: TextStats
    readability_level: str
    readability_scores: ReadabilityScores
    vocabulary_metrics: VocabularyMetrics
    structure_metrics: StructureMetrics
    style_metrics: StyleMetrics
    tone_metrics: ToneMetrics
