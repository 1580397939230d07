"""
Admin participation analytics.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.db.session import get_db
from schoolhub.schemas.analytics import ClassParticipation, ActivityParticipation, StudentParticipation
from schoolhub.services import analytics_service
from schoolhub.core.security import require_admin

router = APIRouter(prefix="/admin/participation", tags=["Analytics"], dependencies=[Depends(require_admin)])


@router.get("/class-wise", response_model=list[ClassParticipation])
async def class_wise(db: AsyncSession = Depends(get_db)):
    return await analytics_service.class_participation(db)


@router.get("/activity-wise", response_model=list[ActivityParticipation])
async def activity_wise(db: AsyncSession = Depends(get_db)):
    return await analytics_service.activity_participation(db)


@router.get("/student-wise", response_model=list[StudentParticipation])
async def student_wise(db: AsyncSession = Depends(get_db)):
    return await analytics_service.student_participation(db)
