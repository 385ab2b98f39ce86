"""Report endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_report_service, require_admin
from app.core.database import get_db
from app.core.exceptions import NotFound, ReportsDisabled
from app.models.user import User
from app.schemas.report import ReportCreate, ReportInDB, ReportUpdate
from app.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportInDB, status_code=201)
async def create_report(
    report: ReportCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    report_service: ReportService = Depends(get_report_service),
):
    """File a report against a user, venue or booking."""
    try:
        return await report_service.create_report(db, user.id, report)
    except ReportsDisabled as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=List[ReportInDB])
async def list_reports(
    status: Optional[str] = Query(default=None, description="Filter by status"),
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    report_service: ReportService = Depends(get_report_service),
):
    """List reports, newest first (admin only)."""
    return await report_service.list_reports(db, status)


@router.patch("/{report_id}", response_model=ReportInDB)
async def update_report(
    report_id: int,
    update: ReportUpdate,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    report_service: ReportService = Depends(get_report_service),
):
    """Move a report through review (admin only)."""
    try:
        return await report_service.update_report(db, report_id, update)
    except ReportsDisabled as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
