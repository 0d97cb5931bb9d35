"""
API v1 - Authentication Routes
"""
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from annotator_app.api.dependencies.domain_services import get_auth_service
from annotator_app.domains.identity.services.auth_service import AuthService
from annotator_app.shared.exceptions import UnauthorizedError

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/login")
async def login(
    request: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)] = None
):
    """Check credentials and return the signed-in state with its role"""
    state = auth_service.login(request.username, request.password)
    if state is None:
        raise UnauthorizedError("Invalid username or password")
    return {"success": True, "auth": state.to_dict()}
