"""
Script to create a platform admin for local testing and print a session token.
"""

import argparse
import asyncio
import os
import sys

from sqlmodel import select

# Add the project root to sys.path to allow importing from 'app'
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from app.core.auth import create_session_token
from app.core.config import get_settings
from app.core.database import create_engine_for, create_session_factory, init_db, session_scope
from app.models.user import User
from listing_shared.schemas.common import AccountType
from listing_shared.schemas.users import UserStatus


async def create_admin(email: str, create_tables: bool = False) -> None:
    settings = get_settings()
    engine = create_engine_for(settings.database_url)
    if create_tables:
        await init_db(engine)

    async with session_scope(create_session_factory(engine)) as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if not user:
            user = User(
                email=email,
                account_type=AccountType.ADMIN.value,
                status=UserStatus.ACTIVE.value,
            )
            session.add(user)
            await session.flush()
            print(f"Created platform admin: {email}")
        else:
            print(f"User {email} already exists.")

        token = create_session_token(user.id, settings=settings)

    await engine.dispose()
    print(f"Session token ({settings.session_cookie_name}):")
    print(token)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a local platform admin.")
    parser.add_argument("--email", required=True, help="Email address for the admin")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables first (SQLite and throwaway databases only)",
    )

    args = parser.parse_args()

    asyncio.run(create_admin(args.email, args.create_tables))
