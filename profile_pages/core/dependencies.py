"""
Core dependencies for resolving the caller's session.

Route-level checks here are a convenience for the HTTP surface only. Every
admin-restricted service method re-validates the live session itself through
AuthService.ensure_admin, so services stay safe when called directly.
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from profile_pages.database.supabase_client import get_supabase
from profile_pages.modules.auth.schemas import Identity
from profile_pages.modules.auth.service import AuthService
from supabase import Client
from typing import Optional

security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    """Bearer token from the Authorization header, or None for anonymous callers"""
    if credentials is None:
        return None
    return credentials.credentials


def get_current_identity(
    token: Optional[str] = Depends(get_access_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Identity]:
    return auth_service.get_current_identity(token)


def require_identity(
    identity: Optional[Identity] = Depends(get_current_identity)
) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign-in required"
        )
    return identity
