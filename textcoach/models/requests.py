from pydantic import BaseModel
from typing import Literal

from textcoach.models.report import Suggestion

ImprovementType = Literal["clarity", "engagement", "tone", "structure"]


class TextIn(BaseModel):
    text: str = ""


class ApplyIn(BaseModel):
    text: str
    suggestion: Suggestion


class ImproveIn(BaseModel):
    text: str
    improvement_type: ImprovementType = "clarity"


WritingMode = Literal["academic", "business", "creative", "technical", "casual"]


class WritingSettings(BaseModel):
    academic_style: Literal["none", "mla", "apa", "chicago", "harvard"] = "none"
    language_variant: Literal["us", "uk", "au", "ca"] = "us"
    checking_mode: Literal["speed", "standard", "comprehensive"] = "standard"
    writing_mode: WritingMode = "academic"
    critical_errors_only: bool = False


class CheckAIIn(BaseModel):
    text: str = ""
    settings: WritingSettings = WritingSettings()
