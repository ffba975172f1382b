"""FastAPI dependencies: service lookup, bearer-token authentication and feature flags."""

from typing import Callable, Optional

from fastapi import Depends, Request

from ..container import ServiceContainer
from ..models.user import User
from ..utils.exceptions import AuthenticationError, NotFoundError


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def extract_bearer_token(request: Request) -> Optional[str]:
    auth_header = (request.headers.get("authorization") or "").strip()
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return None


async def get_current_user(
    request: Request,
    services: ServiceContainer = Depends(get_services),
) -> User:
    """Resolve the caller from the Authorization header.

    Raises:
        AuthenticationError: If the token is missing, invalid or expired
    """
    token = extract_bearer_token(request)
    if not token:
        raise AuthenticationError("Not authorized, no token", auth_method="bearer")
    return await services.accounts.authenticate(token)


def require_feature(feature_name: str) -> Callable[[Request], None]:
    """Dependency that hides a router while its feature flag is off."""

    def check_feature(request: Request) -> None:
        if not request.app.state.config_manager.is_feature_enabled(feature_name):
            raise NotFoundError("Not found", resource_type="Feature", resource_id=feature_name)

    return check_feature
