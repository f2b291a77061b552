from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

Difficulty = Literal["Easy", "Medium", "Hard"]


class ExerciseSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str
    duration_seconds: int = Field(..., alias="durationSeconds")
    difficulty: Difficulty
    fun_fact: str = Field(..., alias="funFact")
    image_url: Optional[str] = Field(None, alias="imageUrl")


class BloodPressureReading(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    systolic: float
    diastolic: float
    timestamp: int = Field(..., description="Epoch milliseconds")
    note: Optional[str] = None


class HealthAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    trend: str
    advice: str
    generated_at: int = Field(..., alias="generatedAt", description="Epoch milliseconds")


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


# --- Request / response bodies ---
class ExerciseRequest(BaseModel):
    context: Optional[str] = None


class BPAnalysisRequest(BaseModel):
    readings: Optional[List[BloodPressureReading]] = None


class HealthTipResponse(BaseModel):
    tip: str


class ErrorResponse(BaseModel):
    message: str
