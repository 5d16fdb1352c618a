from fastapi import APIRouter, Depends
from profile_pages.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    Identity, MeResponse, CanEditResponse
)
from profile_pages.modules.auth.service import AuthService
from profile_pages.core.dependencies import get_auth_service, get_access_token, require_identity
from typing import Optional

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Self-service registration"""
    return service.sign_up(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.sign_in(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: Optional[str] = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate the session"""
    service.sign_out(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(identity: Identity = Depends(require_identity)):
    """Current identity and role, used by the frontend to gate admin views."""
    return MeResponse(**identity.model_dump(), is_admin=identity.role == "admin")


@router.get("/can-edit/{username}", response_model=CanEditResponse)
async def can_edit(
    username: str,
    token: Optional[str] = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service)
):
    return CanEditResponse(username=username, can_edit=service.can_edit(token, username))
