from fastapi import APIRouter, Depends

from ...container import ServiceContainer
from ...models.user import User
from ..dependencies import get_current_user, get_services
from ..schemas import LoginRequest, ProfileUpdateRequest, RegisterRequest

router = APIRouter()


def _account_payload(user: User, token: str) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "level": user.level.value,
        "xp_points": user.xp_points,
        "token": token,
    }


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, services: ServiceContainer = Depends(get_services)):
    """Register a new account."""
    user, token = await services.accounts.register(body.name, body.email, body.password)
    return _account_payload(user, token)


@router.post("/login")
async def login(body: LoginRequest, services: ServiceContainer = Depends(get_services)):
    """Authenticate and get a token."""
    user, token = await services.accounts.login(body.email, body.password)
    return _account_payload(user, token)


@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)):
    return user.public_profile()


@router.put("/profile")
async def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """Update name, email or password."""
    updated, token = await services.accounts.update_profile(user.id, body.name, body.email, body.password)
    return _account_payload(updated, token)


@router.get("/performance")
async def get_performance(
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    metrics = await services.accounts.get_performance(user.id)
    return metrics.model_dump(mode="json")


@router.get("/dashboard")
async def get_dashboard(
    user: User = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    summary = await services.accounts.get_dashboard(user.id)
    return summary.model_dump(mode="json")
