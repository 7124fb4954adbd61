"""Emotion Data Models."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

EMOTIONS = ("happiness", "sadness", "anxiety", "sleepiness", "curiosity")


class EmotionScores(BaseModel):
    """Five-way emotion distribution; values are rounded and sum to ~1.0."""

    model_config = ConfigDict(frozen=True)

    happiness: float = Field(ge=0)
    sadness: float = Field(ge=0)
    anxiety: float = Field(ge=0)
    sleepiness: float = Field(ge=0)
    curiosity: float = Field(ge=0)

    @property
    def total(self) -> float:
        return sum(getattr(self, name) for name in EMOTIONS)

    @property
    def dominant(self) -> str:
        return max(EMOTIONS, key=lambda name: getattr(self, name))


class AnalyzeRequest(BaseModel):
    # Required fields are checked by the handler so a missing one is a 400, not a 422
    image_base64: str = Field(default="", alias="imageBase64")
    user_id: str = Field(default="", alias="userId")
    pet_id: str | None = Field(default=None, alias="petId")
    memo: str | None = None


class AnalysisData(BaseModel):
    id: str
    emotion_analysis: EmotionScores
    image_url: str
    created_at: datetime | None


class AnalyzeResponse(BaseModel):
    success: bool = True
    data: AnalysisData


class HealthResponse(BaseModel):
    status: str
    service: str
    providers: dict[str, bool]
