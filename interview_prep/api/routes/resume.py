from fastapi import APIRouter, Depends, File, UploadFile

from ...container import ServiceContainer
from ...models.user import User
from ..dependencies import get_current_user, get_services
from ..schemas import AnalyzeResumeRequest

router = APIRouter()


@router.post("/upload", status_code=201)
async def upload_resume(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """Upload a PDF or Word resume."""
    contents = await file.read()
    resume = await services.resume_analyzer.upload(user.id, file.filename or "", contents)
    return {
        "id": resume.id,
        "file_name": resume.file_name,
        "file_url": resume.file_url,
        "skills": resume.skills,
    }


@router.post("/ats-score")
async def analyze_resume(
    body: AnalyzeResumeRequest,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """Score a resume against a job role."""
    analysis = await services.resume_analyzer.analyze(user.id, body.resume_id, body.role)
    return analysis.model_dump(mode="json")


@router.get("")
async def list_resumes(
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    resumes = await services.resume_analyzer.list_resumes(user.id)
    return [r.model_dump(mode="json") for r in resumes]


@router.get("/{resume_id}")
async def get_resume(
    resume_id: str,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    resume = await services.resume_analyzer.get_resume(user.id, resume_id)
    return resume.model_dump(mode="json")
