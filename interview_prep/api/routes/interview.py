from fastapi import APIRouter, Depends

from ...container import ServiceContainer
from ...models.user import User
from ..dependencies import get_current_user, get_services
from ..schemas import FeedbackRequest, StartInterviewRequest, SubmitAnswerRequest

router = APIRouter()


@router.post("/start", status_code=201)
async def start_interview(
    body: StartInterviewRequest,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """Start a new interview session."""
    session = await services.orchestrator.start_interview(user.id, body.role, body.job_description)
    return {
        "id": session.id,
        "role": session.role,
        "questions": [q.model_dump(mode="json") for q in session.questions],
    }


@router.post("/submit-answer")
async def submit_answer(
    body: SubmitAnswerRequest,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """Submit the answer to one question."""
    result = await services.orchestrator.submit_answer(
        user.id, body.session_id, body.question_index, body.answer, body.audio_url
    )
    return {"success": True, **result.model_dump(mode="json")}


@router.post("/feedback")
async def generate_feedback(
    body: FeedbackRequest,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """Generate (or return the stored) feedback for a session."""
    result = await services.orchestrator.generate_feedback(user.id, body.session_id)
    return result.model_dump(mode="json")


@router.get("")
async def list_sessions(
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    sessions = await services.orchestrator.list_sessions(user.id)
    return [s.model_dump(mode="json") for s in sessions]


@router.get("/{session_id}")
async def get_session(
    session_id: str,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    session = await services.orchestrator.get_session(user.id, session_id)
    return session.model_dump(mode="json")
