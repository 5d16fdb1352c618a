from typing import Any, Dict

from profile_pages.config.settings import settings
from profile_pages.modules.users.schemas import Profile, ProfileUpdate


def row_to_profile(row: Dict[str, Any]) -> Profile:
    return Profile(
        id=row["id"],
        username=row["username"],
        name=row.get("name") or "",
        bio=row.get("bio") or "",
        image=row.get("image") or settings.default_profile_image,
        role="admin" if row.get("role") == "admin" else "user",
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def profile_patch_to_row(patch: ProfileUpdate) -> Dict[str, Any]:
    """Only the fields the caller actually sent; None never overwrites a profile column."""
    return {
        key: value
        for key, value in patch.model_dump(exclude_unset=True).items()
        if value is not None
    }
