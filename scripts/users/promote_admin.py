"""Grant the admin role to an existing account.

Roles cannot be changed from the app by non-admins, so the first admin is
bootstrapped here:

    ENV_FILE=.env python scripts/users/promote_admin.py --email owner@example.com
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

# Add project root to path to import libs
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from dotenv import load_dotenv

# MUST be done before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env")
load_dotenv(project_root / env_file, override=True)

import httpx
from sqlalchemy import text

from libs.common.config import get_settings
from libs.db.session import db_session

settings = get_settings()

PAGE_SIZE = 200


async def find_user_id(email: str) -> Optional[str]:
    """Look the account up through the Supabase admin API."""
    headers = {
        "apikey": settings.SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {settings.SUPABASE_SERVICE_ROLE_KEY}",
    }
    url = f"{settings.SUPABASE_URL}/auth/v1/admin/users"

    async with httpx.AsyncClient(timeout=30.0) as client:
        page = 1
        while True:
            response = await client.get(
                url, headers=headers, params={"page": page, "per_page": PAGE_SIZE}
            )
            response.raise_for_status()
            users = response.json().get("users", [])
            for user in users:
                if (user.get("email") or "").lower() == email.lower():
                    return user["id"]
            if len(users) < PAGE_SIZE:
                return None
            page += 1


async def promote(email: str) -> int:
    print(f"Looking up {email} at {settings.SUPABASE_URL}...")
    user_id = await find_user_id(email)
    if not user_id:
        print(f"❌ No account found for {email}")
        return 1

    async with db_session() as session:
        await session.execute(
            text(
                "INSERT INTO public.user_roles (user_id, role) "
                "VALUES (:user_id, 'admin') ON CONFLICT (user_id, role) DO NOTHING"
            ),
            {"user_id": user_id},
        )

    print(f"✅ {email} ({user_id}) is now an admin")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Grant the admin role to a user.")
    parser.add_argument("--email", required=True, help="Email of an existing account")
    args = parser.parse_args()
    sys.exit(asyncio.run(promote(args.email)))


if __name__ == "__main__":
    main()
