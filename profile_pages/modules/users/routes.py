from fastapi import APIRouter, Depends, HTTPException, Request, status
from profile_pages.database.supabase_client import get_supabase, get_supabase_admin
from profile_pages.modules.users.schemas import (
    Profile, ProfileUpdate, AdminUserCreate, AdminUserCreateResponse,
    BulkUserRequest, BulkUserResponse, BulkUserResult, DeleteUserResponse
)
from profile_pages.modules.users.service import UserService
from profile_pages.modules.auth.service import AuthService
from profile_pages.core.dependencies import get_auth_service, get_access_token
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(
    supabase: Client = Depends(get_supabase),
    admin_client: Optional[Client] = Depends(get_supabase_admin),
    auth: AuthService = Depends(get_auth_service),
    token: Optional[str] = Depends(get_access_token),
) -> UserService:
    return UserService(supabase, auth=auth, token=token, admin_client=admin_client)


def _bulk_response(results: List[BulkUserResult]) -> BulkUserResponse:
    succeeded = sum(1 for r in results if r.success)
    return BulkUserResponse(results=results, succeeded=succeeded, failed=len(results) - succeeded)


@router.get("", response_model=List[Profile])
async def list_users(service: UserService = Depends(get_user_service)):
    """List all users, newest first (admin only)"""
    return service.list_users()


@router.post("", response_model=AdminUserCreateResponse, status_code=201)
async def create_user(
    user_data: AdminUserCreate,
    service: UserService = Depends(get_user_service)
):
    """Create a confirmed user without email verification (admin only)"""
    return service.create_user_with_admin_api(user_data)


@router.post("/bulk", response_model=BulkUserResponse)
async def bulk_create_users(
    request: BulkUserRequest,
    service: UserService = Depends(get_user_service)
):
    """Create many users; each entry succeeds or fails on its own"""
    return _bulk_response(service.bulk_create_users(request.users))


@router.post("/bulk/csv", response_model=BulkUserResponse)
async def bulk_create_users_from_csv(
    request: Request,
    service: UserService = Depends(get_user_service)
):
    """Bulk import from CSV text: header line, then email,username,name[,password]"""
    csv_text = (await request.body()).decode("utf-8")
    return _bulk_response(service.bulk_create_users_from_csv(csv_text))


@router.get("/by-username/{username}", response_model=Profile)
async def get_user_by_username(
    username: str,
    service: UserService = Depends(get_user_service)
):
    """Public profile view"""
    user = service.get_user_by_username(username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/by-username/{username}", response_model=Profile)
async def update_profile(
    username: str,
    profile_data: ProfileUpdate,
    service: UserService = Depends(get_user_service)
):
    """Edit a profile (owner or admin)"""
    return service.update_profile_with_auth(username, profile_data)


@router.get("/{user_id}", response_model=Profile)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    user = service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.delete("/{user_id}", response_model=DeleteUserResponse)
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    """Delete a user (admin only). deleted=false means nothing was removed; check the server logs."""
    return DeleteUserResponse(deleted=service.delete_user(user_id))
