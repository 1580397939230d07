"""
Score recording, leaderboards and level promotion.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from schoolhub.api.deps import get_performance_service
from schoolhub.models.performance import Level
from schoolhub.schemas.performance import ScoreCreate, PerformanceResponse, PromotionRequest, PromotionResult
from schoolhub.services.performance_service import PerformanceService
from schoolhub.core.security import require_admin

router = APIRouter(prefix="/performance", tags=["Performance"])


@router.post(
    "/",
    response_model=PerformanceResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def record_score(score_data: ScoreCreate, service: PerformanceService = Depends(get_performance_service)):
    """Create or overwrite a student's score at a level. Status resets to Participated."""
    return await service.record_score(score_data)


@router.get("/leaderboard", response_model=list[PerformanceResponse])
async def get_leaderboard(
    event_id: int = Query(...),
    level: Level = Query(Level.CLASS),
    class_name: Optional[str] = Query(None),
    service: PerformanceService = Depends(get_performance_service),
):
    """Top 100 for an event and level, ordered by the event's metric direction."""
    return await service.leaderboard(event_id, level, class_name)


@router.post("/promote", response_model=PromotionResult, dependencies=[Depends(require_admin)])
async def promote_students(request: PromotionRequest, service: PerformanceService = Depends(get_performance_service)):
    promoted = await service.promote(request)
    message = "Promotion executed" if promoted else "No candidates found"
    return PromotionResult(message=message, promoted=promoted)
