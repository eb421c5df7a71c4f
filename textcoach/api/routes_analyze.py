from fastapi import APIRouter
from textcoach.models.requests import ApplyIn, CheckAIIn, TextIn
from textcoach.services.analyze import analyze_text
from textcoach.services.grammar_ai import check_with_ai
from textcoach.services.metrics import analyze_writing
from textcoach.services.rules import apply_suggestion, check_text

router = APIRouter(tags=["analyze"])

@router.post("/analyze")
async def analyze(body: TextIn):
    report = await analyze_text(body.text)
    return report.model_dump()

@router.post("/check")
def check(body: TextIn):
    suggestions = check_text(body.text)
    return {"suggestions": [s.model_dump() for s in suggestions]}

@router.post("/check/ai")
async def check_ai(body: CheckAIIn):
    suggestions = await check_with_ai(body.text, body.settings)
    return {"suggestions": [s.model_dump() for s in suggestions]}

@router.post("/stats")
def stats(body: TextIn):
    suggestions = check_text(body.text)
    return analyze_writing(body.text, suggestions).model_dump()

@router.post("/apply")
def apply(body: ApplyIn):
    s = body.suggestion
    if not (0 <= s.start < s.end <= len(body.text)) or body.text[s.start:s.end] != s.original_text:
        # stale suggestion: the text changed since it was produced
        return {"text": body.text, "applied": False}
    return {"text": apply_suggestion(body.text, s), "applied": True}
