"""
Bulk user import from pasted CSV text.

Expected columns: email, username, name[, password]. The first line is a
header and is skipped. Quoting is not supported; fields are split on commas.
"""

import secrets
from typing import List

from profile_pages.modules.users.schemas import BulkUserInput


def generate_temporary_password(email: str) -> str:
    """Placeholder password: email local part plus a random 0-999 suffix.

    Not unique and not secure; the admin has to hand it to the user out-of-band.
    """
    prefix = email.split("@")[0]
    return f"{prefix}{secrets.randbelow(1000)}!"


def parse_csv_users(csv_text: str) -> List[BulkUserInput]:
    users = []
    lines = csv_text.strip().splitlines()

    for line in lines[1:]:
        line = line.strip()
        if not line:
            continue

        parts = [p.strip() for p in line.split(",")]
        if len(parts) < 3:
            # TODO: surface skipped lines to the caller instead of dropping them
            continue

        email, username, name = parts[0], parts[1], parts[2]
        if not (email and username and name):
            continue

        password = parts[3] if len(parts) > 3 and parts[3] else generate_temporary_password(email)
        users.append(BulkUserInput(email=email, username=username, name=name, password=password))

    return users
