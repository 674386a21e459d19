"""Create or refresh the platform administrator account."""

from __future__ import annotations

import argparse
import asyncio
import os
from dataclasses import dataclass

from app.core.database import close_engine, session_scope
from app.core.enums import RoleEnum
from app.core.security import hash_password, verify_password
from app.modules.identity.repository import IdentityRepository
from app.modules.identity.service import IdentityService

DEFAULT_ADMIN_NAME = "Admin User"
MIN_PASSWORD_LENGTH = 8


@dataclass(slots=True)
class AdminResult:
    email: str
    created: bool
    updated_fields: list[str]


async def _ensure_admin(*, name: str, email: str, password: str) -> AdminResult:
    async with session_scope() as session:
        repository = IdentityRepository(session)
        await IdentityService(repository).ensure_default_roles()

        role = await repository.get_role_by_name(RoleEnum.ADMIN)
        if role is None:
            raise RuntimeError("Admin role was not found after ensure_default_roles")

        user = await repository.get_user_by_email(email)
        if user is None:
            user = await repository.create_user(
                name=name,
                email=email,
                password_hash=hash_password(password),
                phone_number=None,
                role_id=role.id,
            )
            return AdminResult(email=user.email, created=True, updated_fields=[])

        updated: list[str] = []
        if not verify_password(password, user.password_hash):
            user.password_hash = hash_password(password)
            updated.append("password")
        if user.role_id != role.id:
            user.role_id = role.id
            updated.append("role")
        if not user.is_active:
            user.is_active = True
            updated.append("is_active")
        if user.is_blocked:
            user.is_blocked = False
            updated.append("is_blocked")
        await session.flush()
        return AdminResult(email=user.email, created=False, updated_fields=updated)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create the TutorLink admin account, or re-activate it if it already exists.",
    )
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL"), help="Admin email (env ADMIN_EMAIL).")
    parser.add_argument(
        "--password",
        default=os.getenv("ADMIN_PASSWORD"),
        help="Admin password (env ADMIN_PASSWORD).",
    )
    parser.add_argument("--name", default=DEFAULT_ADMIN_NAME, help="Display name for a new admin.")
    return parser


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()
    if not args.email:
        parser.error("--email or ADMIN_EMAIL is required")
    if not args.password or len(args.password) < MIN_PASSWORD_LENGTH:
        parser.error(f"--password or ADMIN_PASSWORD must be at least {MIN_PASSWORD_LENGTH} characters")

    try:
        result = asyncio.run(_ensure_admin(name=args.name, email=args.email, password=args.password))
    except Exception as exc:
        print(f"Admin setup failed: {exc}")
        return 1
    finally:
        asyncio.run(close_engine())

    if result.created:
        print(f"Admin user created: {result.email}")
    elif result.updated_fields:
        print(f"Admin user {result.email} updated: {', '.join(result.updated_fields)}")
    else:
        print(f"Admin user already exists: {result.email}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
