"""
Storefront Backend — Admin Seed Script
========================================

What:  Creates the first ADMIN account from ADMIN_EMAIL / ADMIN_PASSWORD
       (fallbacks admin@example.com / admin123). Running it again is a
       no-op that reports the existing account.
Usage: storefront-seed-admin
       python -m storefront.seed_admin
"""

import asyncio
import logging
from typing import Optional

from storefront.config import Settings
from storefront.context import AppContext
from storefront.services.auth_service import AuthService

logger = logging.getLogger(__name__)


async def seed_admin(settings: Optional[Settings] = None) -> bool:
    """
    Ensure the admin account exists.

    Returns:
        True when the account was created, False when it already existed.
    """
    settings = settings or Settings()
    context = AppContext.from_settings(settings)
    auth_service = AuthService(context.password_hasher, context.token_signer)

    try:
        async with context.session_factory() as session:
            async with session.begin():
                user = await auth_service.ensure_admin(
                    session,
                    email=settings.admin_email,
                    password=settings.admin_password,
                )
    finally:
        await context.aclose()

    if user is None:
        print(f"Admin user already exists: {settings.admin_email}")
        return False

    logger.info("Admin user created: %s", user.id)
    print("Admin user created successfully!")
    print(f"Email: {settings.admin_email}")
    print(f"Password: {settings.admin_password}")
    return True


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    asyncio.run(seed_admin())


if __name__ == "__main__":
    run()
