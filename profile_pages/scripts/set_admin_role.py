"""
Grant or revoke the admin role for a profile.

Admins can only be created from outside the application (there is no HTTP
endpoint that changes roles), so the first admin is promoted with this script:

    python -m profile_pages.scripts.set_admin_role alice
    python -m profile_pages.scripts.set_admin_role alice --revoke

Requires SUPABASE_SERVICE_ROLE_KEY.
"""

import argparse
import sys
from datetime import datetime, timezone

from profile_pages.database.supabase_client import get_supabase_admin
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def set_role(supabase: Client, username: str, role: str) -> bool:
    result = supabase.table("profiles")\
        .update({"role": role, "updated_at": datetime.now(timezone.utc).isoformat()})\
        .eq("username", username)\
        .execute()
    return bool(result.data)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Grant or revoke the admin role")
    parser.add_argument("username")
    parser.add_argument("--revoke", action="store_true", help="Set the role back to 'user'")
    args = parser.parse_args(argv)

    supabase = get_supabase_admin()
    if supabase is None:
        logger.error("SUPABASE_SERVICE_ROLE_KEY is not configured")
        sys.exit(1)

    role = "user" if args.revoke else "admin"
    try:
        if not set_role(supabase, args.username, role):
            logger.error(f"No profile with username {args.username}")
            sys.exit(1)
    except Exception as e:
        logger.error(f"Error updating role: {e}")
        sys.exit(1)

    logger.info(f"{args.username} is now '{role}'")


if __name__ == "__main__":
    main()
