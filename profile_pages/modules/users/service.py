from supabase import Client
from profile_pages.config.settings import settings
from profile_pages.modules.auth.service import (
    AuthService, validate_email, normalize_email, is_valid_email, is_already_registered_error
)
from profile_pages.modules.auth.schemas import Identity, UserRole
from profile_pages.modules.users.mappers import row_to_profile, profile_patch_to_row
from profile_pages.modules.users.schemas import (
    Profile, ProfileUpdate, AdminUserCreate, AdminUserCreateResponse,
    BulkUserInput, BulkUserResult
)
from profile_pages.modules.users.csv_import import parse_csv_users
from typing import List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

SERVICE_ROLE_REQUIRED = (
    "Server misconfiguration: SUPABASE_SERVICE_ROLE_KEY is required for this operation. "
    "Add the service_role key from the Supabase dashboard (Settings > API) to the server environment."
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_message(error: Exception) -> str:
    if isinstance(error, HTTPException):
        return str(error.detail)
    return str(error)


def is_duplicate_error(error_message: str) -> bool:
    """A unique-key violation, or our own pre-check reporting one."""
    lowered = error_message.lower()
    return "already exists" in lowered or "duplicate" in lowered or "23505" in error_message


def ensure_profile_row(client: Client, user_id: str, username: str, name: str, role: UserRole = "user") -> None:
    """Create the profile row for a freshly created identity.

    A signup trigger may already have inserted it, so duplicates are fine. Any
    other failure only matters if the row really is missing afterwards.

    A username held by a different account also reads as a duplicate: the
    identity is kept and no profile row is written for it. An admin has to
    assign a free username to such an account afterwards.
    """
    try:
        UserService(client).create_user(username, name, user_id, role)
        return
    except Exception as e:
        message = _error_message(e)
        if is_duplicate_error(message):
            logger.info(f"Profile for {user_id} already exists, skipping insert")
            return
        logger.warning(f"Profile creation failed for {user_id}, checking for trigger-created row: {message}")

    try:
        existing = client.table("profiles")\
            .select("id")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
    except Exception as e:
        logger.error(f"Profile existence check failed for {user_id}: {e}")
        existing = None

    if not existing or not existing.data:
        raise HTTPException(
            status_code=500,
            detail="User was created but the profile could not be created. Contact an administrator."
        )


class UserService:
    def __init__(
        self,
        supabase: Client,
        auth: Optional[AuthService] = None,
        token: Optional[str] = None,
        admin_client: Optional[Client] = None,
    ):
        self.supabase = supabase
        self.auth = auth or AuthService(supabase)
        self.token = token
        self.admin_client = admin_client

    def _require_admin(self) -> Identity:
        return self.auth.ensure_admin(self.token)

    def _get_admin_client(self) -> Client:
        if self.admin_client is None:
            logger.error("SUPABASE_SERVICE_ROLE_KEY is not configured")
            raise HTTPException(status_code=500, detail=SERVICE_ROLE_REQUIRED)
        return self.admin_client

    def list_users(self) -> List[Profile]:
        """All profiles, newest first"""
        self._require_admin()
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [row_to_profile(row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_by_username(self, username: str) -> Optional[Profile]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("username", username)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return None
            return row_to_profile(result.data)
        except Exception as e:
            logger.warning(f"Profile lookup by username failed: {e}")
            return None

    def get_user_by_id(self, user_id: str) -> Optional[Profile]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return None
            return row_to_profile(result.data)
        except Exception as e:
            logger.warning(f"Profile lookup by id failed: {e}")
            return None

    def create_user(self, username: str, name: str, user_id: str, role: UserRole = "user") -> Profile:
        """Insert the profile row for an existing auth identity"""
        # Fast-path check; the unique index on username is authoritative
        if self.get_user_by_username(username):
            raise HTTPException(status_code=409, detail="Username already exists")

        try:
            result = self.supabase.table("profiles").insert({
                "id": user_id,
                "username": username,
                "name": name,
                "bio": "",
                "image": settings.default_profile_image,
                "role": role,
            }).execute()
        except Exception as e:
            message = str(e)
            if is_duplicate_error(message):
                raise HTTPException(status_code=409, detail=f"Profile already exists: {message}")
            raise HTTPException(status_code=500, detail=message or "Failed to create user")

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create user")
        return row_to_profile(result.data[0])

    def _update_profile(self, column: str, value: str, patch: ProfileUpdate) -> Profile:
        try:
            update_data = profile_patch_to_row(patch)
            update_data["updated_at"] = _now()

            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq(column, value)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return row_to_profile(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e) or "Failed to update profile")

    def update_profile(self, user_id: str, patch: ProfileUpdate) -> Profile:
        """Sparse profile update by id. Callers are responsible for authorization."""
        return self._update_profile("id", user_id, patch)

    def update_profile_by_username(self, username: str, patch: ProfileUpdate) -> Profile:
        """Sparse profile update by username. Callers are responsible for authorization."""
        return self._update_profile("username", username, patch)

    def update_profile_with_auth(self, username: str, patch: ProfileUpdate) -> Profile:
        """Profile edit allowed to the profile's owner or an admin"""
        identity = self.auth.get_current_identity(self.token)
        if identity is None:
            raise HTTPException(status_code=401, detail="Sign-in required")

        target = self.get_user_by_username(username)
        if target is None:
            raise HTTPException(status_code=404, detail="Profile not found")

        if identity.id != target.id and identity.role != "admin":
            raise HTTPException(status_code=403, detail="You do not have permission to edit this profile")

        return self.update_profile_by_username(username, patch)

    def create_user_with_admin_api(self, data: AdminUserCreate) -> AdminUserCreateResponse:
        """Admin-issued signup: the identity is confirmed immediately, no email round-trip."""
        self._require_admin()
        email = validate_email(data.email)
        admin = self._get_admin_client()

        try:
            auth_response = admin.auth.admin.create_user({
                "email": email,
                "password": data.password,
                "email_confirm": True,
                "user_metadata": {
                    "username": data.username,
                    "name": data.name,
                },
            })
        except Exception as e:
            error_message = str(e)
            logger.error(f"Admin createUser failed for {email}: {error_message}")
            if is_already_registered_error(error_message):
                raise HTTPException(status_code=409, detail="Email address is already registered")
            raise HTTPException(status_code=400, detail=error_message or "Failed to register user")

        if not auth_response or not auth_response.user:
            raise HTTPException(status_code=500, detail="User creation failed")

        ensure_profile_row(admin, auth_response.user.id, data.username, data.name)

        return AdminUserCreateResponse(
            user_id=auth_response.user.id,
            email=email,
            username=data.username,
        )

    def delete_user(self, user_id: str) -> bool:
        """Delete the auth identity (cascading to the profile), falling back to the profile row.

        Returns False when nothing could be deleted; details are in the logs.
        """
        identity = self._require_admin()
        if identity.id == user_id:
            raise HTTPException(status_code=400, detail="You cannot delete your own account")
        admin = self._get_admin_client()

        try:
            admin.auth.admin.delete_user(user_id)
            logger.info(f"Deleted user {user_id}")
            return True
        except Exception as e:
            logger.error(f"Error deleting user {user_id} from auth, deleting profile only: {e}")

        try:
            result = admin.table("profiles")\
                .delete()\
                .eq("id", user_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            logger.error(f"Error deleting profile {user_id}: {e}")
            return False

    def bulk_create_users(self, users: List[BulkUserInput]) -> List[BulkUserResult]:
        """Create every entry independently; failures are reported per entry, never raised."""
        self._require_admin()
        admin = self._get_admin_client()
        return [self._create_bulk_entry(admin, entry) for entry in users]

    def bulk_create_users_from_csv(self, csv_text: str) -> List[BulkUserResult]:
        return self.bulk_create_users(parse_csv_users(csv_text))

    def _create_bulk_entry(self, admin: Client, entry: BulkUserInput) -> BulkUserResult:
        def failed(error: str) -> BulkUserResult:
            return BulkUserResult(success=False, email=entry.email, username=entry.username, error=error)

        try:
            email = normalize_email(entry.email)
            if not is_valid_email(email):
                return failed("Invalid email address")

            try:
                auth_response = admin.auth.admin.create_user({
                    "email": email,
                    "password": entry.password,
                    "email_confirm": True,
                    "user_metadata": {
                        "username": entry.username,
                        "name": entry.name,
                    },
                })
            except Exception as e:
                error_message = str(e)
                logger.warning(f"Bulk import: auth user creation failed for {email}: {error_message}")
                if is_already_registered_error(error_message):
                    return failed("Email address is already registered")
                return failed(error_message)

            if not auth_response or not auth_response.user:
                return failed("User creation failed")

            try:
                admin.table("profiles").insert({
                    "id": auth_response.user.id,
                    "username": entry.username,
                    "name": entry.name,
                    "bio": "",
                    "image": settings.default_profile_image,
                    "role": "user",
                }).execute()
            except Exception as e:
                if not is_duplicate_error(str(e)):
                    # The identity exists either way; the row may still come from the trigger
                    logger.warning(f"Bulk import: profile creation failed for {email}: {e}")

            return BulkUserResult(success=True, email=entry.email, username=entry.username)
        except Exception as e:
            logger.exception(f"Bulk import: unexpected failure for {entry.email}")
            return failed(str(e) or "Unknown error")
