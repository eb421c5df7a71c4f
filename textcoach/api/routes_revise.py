from fastapi import APIRouter
from textcoach.models.requests import ImproveIn, TextIn
from textcoach.services.revise import improve_text, writing_suggestions

router = APIRouter(tags=["revise"])

@router.post("/improve")
async def improve(body: ImproveIn):
    text = await improve_text(body.text, body.improvement_type)
    return {"improvement_type": body.improvement_type, "text": text}

@router.post("/suggestions")
async def suggestions(body: TextIn):
    return {"suggestions": await writing_suggestions(body.text)}
