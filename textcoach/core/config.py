import os

MAX_BODY_BYTES = 1 * 1024 * 1024  # 1 MB soft cap on request bodies

# Completion service
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
COMPLETION_TIMEOUT = float(os.getenv("COMPLETION_TIMEOUT", "20"))  # seconds
COMPLETION_MAX_TOKENS = 800
COMPLETION_TEMPERATURE = 0.3


def openai_api_key() -> str:
    # read at use-time so the key can be set/unset without a restart
    return (os.getenv("OPENAI_API_KEY") or "").strip()


# Analyzer configuration
PROMPT_CHAR_LIMIT = 2500      # characters of text embedded in the prompt
MIN_ANALYZABLE_CHARS = 10     # non-whitespace characters

# Generative path is trusted more than the heuristic one
AI_LIMITS = {
    "improvements": 10,
    "strengths": 10,
    "tone_suggestions": 5,
}

FALLBACK_LIMITS = {
    "improvements": 5,
    "strengths": 4,
    "tone_suggestions": 3,
}

FALLBACK_OVERALL_CAP = 95

# floor, ceiling per sub-score
FALLBACK_BOUNDS = {
    "correctness": (20, 95),
    "clarity": (25, 90),
    "engagement": (20, 85),
    "delivery": (25, 90),
}

# Readability bands, highest threshold first
READABILITY_BANDS = [
    (90, "Very Easy (5th grade)"),
    (80, "Easy (6th grade)"),
    (70, "Fairly Easy (7th grade)"),
    (60, "Standard (8th-9th grade)"),
    (50, "Fairly Difficult (10th-12th grade)"),
    (30, "Difficult (College level)"),
]
HARDEST_BAND = "Very Difficult (Graduate level)"
