"""Reports capability, resolved once at startup."""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound, ReportsDisabled
from app.models.report import Report
from app.schemas.report import ReportCreate, ReportUpdate

logger = logging.getLogger(__name__)


class ReportService:
    """Interface for filing and moderating reports."""

    enabled = True

    async def create_report(
        self, db: AsyncSession, reporter_id: int, report: ReportCreate
    ) -> Report:
        raise NotImplementedError

    async def list_reports(self, db: AsyncSession, status: Optional[str] = None) -> List[Report]:
        raise NotImplementedError

    async def update_report(
        self, db: AsyncSession, report_id: int, update: ReportUpdate
    ) -> Report:
        raise NotImplementedError


class DatabaseReportService(ReportService):
    """Reports stored in the reports table."""

    async def create_report(
        self, db: AsyncSession, reporter_id: int, report: ReportCreate
    ) -> Report:
        db_report = Report(reporter_id=reporter_id, **report.model_dump())
        db.add(db_report)
        await db.commit()
        await db.refresh(db_report)

        logger.info(
            f"Report {db_report.id} filed by user {reporter_id} "
            f"against {db_report.target_type} {db_report.target_id}"
        )
        return db_report

    async def list_reports(self, db: AsyncSession, status: Optional[str] = None) -> List[Report]:
        query = select(Report).order_by(Report.created_at.desc(), Report.id.desc())
        if status:
            query = query.where(Report.status == status)

        result = await db.execute(query)
        return list(result.scalars().all())

    async def update_report(
        self, db: AsyncSession, report_id: int, update: ReportUpdate
    ) -> Report:
        report = await db.get(Report, report_id)
        if not report:
            raise NotFound("Report not found")

        for field, value in update.model_dump(exclude_unset=True).items():
            setattr(report, field, value)

        await db.commit()
        await db.refresh(report)
        return report


class NullReportService(ReportService):
    """Used when reports are turned off: nothing to list, nothing accepted."""

    enabled = False

    async def create_report(
        self, db: AsyncSession, reporter_id: int, report: ReportCreate
    ) -> Report:
        raise ReportsDisabled()

    async def list_reports(self, db: AsyncSession, status: Optional[str] = None) -> List[Report]:
        return []

    async def update_report(
        self, db: AsyncSession, report_id: int, update: ReportUpdate
    ) -> Report:
        raise ReportsDisabled()


def build_report_service(enabled: bool) -> ReportService:
    if enabled:
        return DatabaseReportService()
    logger.info("Reports disabled")
    return NullReportService()
