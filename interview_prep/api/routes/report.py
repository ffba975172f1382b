from fastapi import APIRouter, Depends

from ...container import ServiceContainer
from ...models.user import User
from ..dependencies import get_current_user, get_services
from ..schemas import ReportRequest

router = APIRouter()


@router.post("/pdf")
async def generate_report(
    body: ReportRequest,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """Generate the report for an interview session."""
    report_url = await services.reports.generate_report(user.id, body.interview_id, body.resume_id)
    return {"success": True, "report_url": report_url}


@router.get("/{interview_id}")
async def get_report(
    interview_id: str,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    report_url = await services.reports.get_report(user.id, interview_id)
    return {"report_url": report_url}
