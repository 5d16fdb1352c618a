from supabase import Client
from profile_pages.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, Identity
)
from fastapi import HTTPException
from pydantic import EmailStr, TypeAdapter, ValidationError
from typing import Optional
import logging

logger = logging.getLogger(__name__)

ADMIN_REQUIRED = "Admin privileges required"

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    """True when the (already normalized) address has a valid email shape."""
    try:
        _email_adapter.validate_python(email)
        return True
    except ValidationError:
        return False


def validate_email(email: str) -> str:
    """Normalize an email address, raising 400 before any backend call if it is malformed."""
    normalized = normalize_email(email)
    if not is_valid_email(normalized):
        raise HTTPException(status_code=400, detail=f"Invalid email address: {email}")
    return normalized


def is_already_registered_error(error_message: str) -> bool:
    """Supabase reports a taken email as 'User already registered' (sign-up) or
    'A user with this email address has already been registered' (admin API, code email_exists)."""
    lowered = error_message.lower()
    return any(marker in lowered for marker in (
        "already registered",
        "already been registered",
        "already exists",
        "email_exists",
    ))


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def sign_in(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": normalize_email(login_data.email),
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def sign_up(self, register_data: RegisterRequest) -> RegisterResponse:
        """Self-service registration, followed by creation of the profile row."""
        email = validate_email(register_data.email)
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": email,
                "password": register_data.password,
                "options": {
                    "data": {
                        "username": register_data.username,
                        "name": register_data.name,
                    }
                }
            })
        except Exception as e:
            error_message = str(e)
            logger.error(f"Sign-up failed for {email}: {error_message}")
            if is_already_registered_error(error_message):
                raise HTTPException(status_code=409, detail="Email address is already registered")
            raise HTTPException(status_code=400, detail=error_message or "Failed to register user")

        if not auth_response.user:
            raise HTTPException(status_code=500, detail="User creation failed")

        from profile_pages.modules.users.service import ensure_profile_row
        ensure_profile_row(
            self.supabase,
            user_id=auth_response.user.id,
            username=register_data.username,
            name=register_data.name,
        )

        return RegisterResponse(
            user_id=auth_response.user.id,
            email=auth_response.user.email or email,
            message="User registered successfully"
        )

    def sign_out(self, token: Optional[str]) -> bool:
        """Logout user using Supabase Auth"""
        try:
            # Supabase access tokens are stateless JWTs; this only ends the client session
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")
            return False

    def get_current_identity(self, token: Optional[str]) -> Optional[Identity]:
        """Resolve the signed-in identity for a token, or None. Always hits the live session."""
        if not token:
            return None
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                return None
            user = user_response.user
            profile_result = self.supabase.table("profiles")\
                .select("username, role")\
                .eq("id", user.id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.warning(f"Could not resolve current identity: {e}")
            return None

        profile = (profile_result.data if profile_result else None) or {}
        return Identity(
            id=user.id,
            email=user.email,
            username=profile.get("username"),
            role="admin" if profile.get("role") == "admin" else "user",
        )

    def is_admin(self, token: Optional[str]) -> bool:
        identity = self.get_current_identity(token)
        return identity is not None and identity.role == "admin"

    def can_edit(self, token: Optional[str], username: str) -> bool:
        identity = self.get_current_identity(token)
        if identity is None:
            return False
        return identity.username == username or identity.role == "admin"

    def ensure_admin(self, token: Optional[str]) -> Identity:
        """Re-validate admin role against the live session; raise 403 otherwise."""
        identity = self.get_current_identity(token)
        if identity is None or identity.role != "admin":
            raise HTTPException(status_code=403, detail=ADMIN_REQUIRED)
        return identity
