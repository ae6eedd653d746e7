#!/usr/bin/env python3
"""Promote an existing user to the admin role. Run on the server."""
import argparse
import asyncio

from sqlalchemy import update

import bank_portal.models  # noqa: F401
from bank_portal.database import AsyncSessionLocal, engine
from bank_portal.models.user import User, UserRole


async def promote(email: str) -> None:
    async with AsyncSessionLocal() as s:
        r = await s.execute(
            update(User)
            .where(User.email == email)
            .values(role=UserRole.ADMIN)
        )
        await s.commit()
        print(f"Rows updated: {r.rowcount}")
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    asyncio.run(promote(parser.parse_args().email))
