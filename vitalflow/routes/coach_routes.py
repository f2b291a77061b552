from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends

from vitalflow.agent import LLMClient
from vitalflow.coach import VitalCoach
from vitalflow.config import get_settings
from vitalflow.logger import get_logger
from vitalflow.utils.errors import InvalidRequestError
from vitalflow.utils.models import (
    BPAnalysisRequest,
    ErrorResponse,
    ExerciseRequest,
    ExerciseSuggestion,
    HealthAnalysis,
    HealthTipResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Coach"], responses={500: {"model": ErrorResponse}})


@lru_cache
def get_coach() -> VitalCoach:
    """Dependency that provides the process-wide coach, built from settings on first use."""
    settings = get_settings()
    return VitalCoach(LLMClient(settings), settings)


@router.post("/exercise", response_model=ExerciseSuggestion, response_model_exclude_none=True)
async def suggest_exercise(
    payload: Optional[ExerciseRequest] = None,
    coach: VitalCoach = Depends(get_coach),
):
    context = payload.context if payload else None
    logger.info(f"Exercise suggestion requested for context: {context!r}")
    return await coach.suggest_exercise(context)


@router.get("/health-tip", response_model=HealthTipResponse)
async def health_tip(coach: VitalCoach = Depends(get_coach)):
    tip = await coach.tip_for_healthy_habits()
    return HealthTipResponse(tip=tip)


@router.post("/bp-analysis", response_model=HealthAnalysis, responses={400: {"model": ErrorResponse}})
async def bp_analysis(payload: BPAnalysisRequest, coach: VitalCoach = Depends(get_coach)):
    if not payload.readings:
        raise InvalidRequestError("readings 字段必须是非空数组")
    logger.info(f"Analyzing {len(payload.readings)} blood pressure readings.")
    return await coach.analyze_trend(payload.readings)
