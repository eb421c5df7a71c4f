# tests/test_analyze.py
import asyncio
import json

import pytest

from textcoach.models.report import AnalysisReport
from textcoach.services.analyze import analyze_text, build_messages, parse_assessment
from textcoach.services.metrics import text_stats
from textcoach.services.rules import check_text
from textcoach.services.scoring import score_fallback

TEXT = (
    "Writing clearly takes practice. Its easy to recieve feedback, but applying it is harder. "
    "Good writers revise often; they read their drafts aloud and cut what is not needed."
)

GOOD_REPLY = {
    "overall": 78,
    "correctness": 70,
    "clarity": 80,
    "engagement": 75,
    "delivery": 82,
    "improvements": ["Fix 'Its' to 'It's'", "Correct 'recieve'"],
    "strengths": ["Concise sentences"],
    "toneAnalysis": {"tone": "Instructional", "confidence": 70, "suggestions": ["Add an example"]},
}


def _run(coro):
    return asyncio.run(coro)


def test_short_text_skips_the_service(stub_completion):
    stub = stub_completion(reply=json.dumps(GOOD_REPLY))
    report = _run(analyze_text("  hi  there ", complete=stub))
    assert stub.calls == []
    assert report.source == "insufficient"
    assert report.score.model_dump() == {
        "overall": 0, "correctness": 0, "clarity": 0, "engagement": 0, "delivery": 0,
    }
    assert report.improvements == ["Add more content to analyze"]
    assert report.tone_analysis.tone == "neutral"


def test_empty_text_returns_zeroed_report(stub_completion):
    stub = stub_completion(reply="{}")
    report = _run(analyze_text("", complete=stub))
    assert stub.calls == []
    assert report.suggestions == []
    assert report.text_stats.words == 0
    assert report.text_stats.readability_score == 100


def test_generative_assessment_is_used(stub_completion):
    stub = stub_completion(reply="Here is my analysis:\n" + json.dumps(GOOD_REPLY) + "\nThanks!")
    report = _run(analyze_text(TEXT, complete=stub))

    assert len(stub.calls) == 1
    assert report.source == "ai"
    assert report.score.overall == 78
    assert report.score.delivery == 82
    assert report.improvements == GOOD_REPLY["improvements"]
    assert report.tone_analysis.tone == "instructional"
    assert report.tone_analysis.suggestions == ["Add an example"]


def test_report_merges_rules_and_stats(stub_completion):
    stub = stub_completion(reply=json.dumps(GOOD_REPLY))
    report = _run(analyze_text(TEXT, complete=stub))
    assert report.suggestions == check_text(TEXT)
    assert report.text_stats == text_stats(TEXT)
    assert report.readability_level
    assert any(s.rule == "ITS_ITS" for s in report.suggestions)
    assert any(s.kind == "spelling" and s.original_text == "recieve" for s in report.suggestions)


def test_prompt_contract(stub_completion):
    stub = stub_completion(reply=json.dumps(GOOD_REPLY))
    _run(analyze_text(TEXT, complete=stub))
    system, user = stub.calls[0]
    assert system["role"] == "system"
    assert user["role"] == "user"
    assert TEXT in user["content"]
    assert f"Text Length: {len(TEXT)} characters" in user["content"]
    for key in ("overall", "correctness", "clarity", "engagement", "delivery",
                "improvements", "strengths", "toneAnalysis"):
        assert f'"{key}"' in user["content"]


def test_prompt_truncates_long_text():
    text = "word " * 600 + "ENDMARKER"
    user = build_messages(text)[1]["content"]
    assert "ENDMARKER" not in user
    assert ("word " * 500) in user
    assert f"{len(text)} characters, 601 words" in user


def test_untrusted_values_are_clamped():
    data = {
        "overall": 150,
        "correctness": -5,
        "clarity": "high",
        "engagement": 72.6,
        "delivery": True,
        "improvements": [f"tip {i}" for i in range(12)] + [42, None],
        "strengths": "not a list",
        "toneAnalysis": {"tone": 7, "confidence": 500, "suggestions": [f"s{i}" for i in range(7)]},
    }
    a = parse_assessment(data)
    assert a.score.overall == 100
    assert a.score.correctness == 0
    assert a.score.clarity == 0
    assert a.score.engagement == 73
    assert a.score.delivery == 0
    assert a.improvements == [f"tip {i}" for i in range(10)]
    assert a.strengths == []
    assert a.tone.tone == "neutral"
    assert a.tone.confidence == 100
    assert len(a.tone.suggestions) == 5


def test_missing_tone_defaults():
    a = parse_assessment({"overall": 50, "toneAnalysis": "formal"})
    assert a.tone.tone == "neutral"
    assert a.tone.confidence == 50
    assert a.tone.suggestions == []


@pytest.mark.parametrize("kwargs", [
    {"success": False, "error": "OpenAI API key not configured."},
    {"reply": "I cannot help with that."},
    {"reply": "{broken json"},
    {"reply": None},
    {"exc": RuntimeError("network down")},
])
def test_failures_fall_back_to_heuristics(stub_completion, kwargs):
    stub = stub_completion(**kwargs)
    report = _run(analyze_text(TEXT, complete=stub))
    expected = score_fallback(TEXT)
    assert len(stub.calls) == 1
    assert report.source == "heuristic"
    assert report.score == expected.score
    assert report.improvements == expected.improvements
    assert report.strengths == expected.strengths
    assert report.tone_analysis == expected.tone


def test_slow_service_times_out_to_fallback(stub_completion):
    stub = stub_completion(reply=json.dumps(GOOD_REPLY), delay=1.0)
    report = _run(analyze_text(TEXT, complete=stub, timeout=0.01))
    assert report.source == "heuristic"


@pytest.mark.parametrize("text", [TEXT, "a b c d e f g h i j k", "?" * 40, "word\n\n\n\nword more text"])
def test_default_capability_without_key_degrades_gracefully(text):
    report = _run(analyze_text(text))
    assert isinstance(report, AnalysisReport)
    assert report.source in ("heuristic", "insufficient")
    for value in report.score.model_dump().values():
        assert 0 <= value <= 100


def test_concurrent_calls_are_independent(stub_completion):
    stub = stub_completion(reply=json.dumps(GOOD_REPLY))

    async def both():
        return await asyncio.gather(
            analyze_text(TEXT, complete=stub),
            analyze_text("Another sample text that is long enough.", complete=stub),
        )

    first, second = _run(both())
    assert len(stub.calls) == 2
    assert first.text_stats != second.text_stats


def test_huge_integer_scores_are_clamped_not_discarded(stub_completion):
    reply = json.dumps(GOOD_REPLY).replace('"overall": 78', '"overall": 1' + "0" * 400)
    stub = stub_completion(reply=reply)
    report = _run(analyze_text(TEXT, complete=stub))
    assert report.source == "ai"
    assert report.score.overall == 100
    assert report.score.correctness == 70


def test_huge_negative_and_float_values():
    a = parse_assessment({"overall": -(10 ** 400), "clarity": 1e308 * 10, "delivery": 99.6})
    assert a.score.overall == 0
    assert a.score.clarity == 0
    assert a.score.delivery == 100
