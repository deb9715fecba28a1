#!/usr/bin/env python3
"""Create or update a profile and print a development access token.

Profiles normally come from the identity provider; this is for local setups
and demos.
"""

import asyncio

from sqlalchemy import select

from hallbook.core.permissions import UserRole
from hallbook.core.security import create_access_token
from hallbook.database import get_db_context
from hallbook.domain.campus import ALL_DEPARTMENTS
from hallbook.models.profile import Profile


async def create_profile(
    email: str,
    name: str,
    role: str = UserRole.FACULTY.value,
    department: str | None = None,
) -> None:
    """Create the profile if it doesn't exist, otherwise update role/department."""
    async with get_db_context() as session:
        result = await session.execute(select(Profile).where(Profile.email == email))
        profile = result.scalar_one_or_none()

        if profile:
            profile.name = name
            profile.role = role
            profile.department = department
            profile.is_active = True
            print(f"Updated existing profile: {email}")
        else:
            profile = Profile(email=email, name=name, role=role, department=department)
            session.add(profile)
            await session.flush()
            print(f"Created profile: {email}")

        token = create_access_token({"sub": str(profile.id)})

    print(f"Role: {role}")
    print(f"Department: {department or '-'}")
    print(f"Access token: {token}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create a hall booking profile")
    parser.add_argument("--email", required=True, help="Profile email")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument(
        "--role",
        default=UserRole.FACULTY.value,
        choices=[r.value for r in UserRole],
        help="Role",
    )
    parser.add_argument("--department", choices=ALL_DEPARTMENTS, help="Department")

    args = parser.parse_args()

    asyncio.run(
        create_profile(
            email=args.email,
            name=args.name,
            role=args.role,
            department=args.department,
        )
    )
