"""
Storefront Backend — Admin Seed Script Tests
==============================================

What we test:
    ✅ First run creates an ADMIN with a bcrypt hash of the configured password
    ✅ Second run reports the existing account and changes nothing
    ✅ The seeded admin can sign in
"""

import pytest
from sqlalchemy import func, select

from storefront.models import User, UserRole
from storefront.seed_admin import seed_admin


class TestSeedAdmin:
    @pytest.mark.asyncio
    async def test_creates_admin_once(self, settings, context, capsys):
        settings.admin_email = "owner@example.com"
        settings.admin_password = "owner-pass"

        created = await seed_admin(settings)
        first_output = capsys.readouterr().out
        again = await seed_admin(settings)
        second_output = capsys.readouterr().out

        assert created is True
        assert "Admin user created successfully!" in first_output
        assert "owner@example.com" in first_output
        assert again is False
        assert "Admin user already exists: owner@example.com" in second_output

        async with context.session_factory() as session:
            users = (await session.execute(select(User))).scalars().all()
            assert len(users) == 1
            assert users[0].role == UserRole.ADMIN
            assert users[0].password != "owner-pass"
            assert context.password_hasher.verify_sync("owner-pass", users[0].password)

    @pytest.mark.asyncio
    async def test_seeded_admin_can_log_in(self, settings, client, context):
        await seed_admin(settings)

        response = await client.post(
            "/api/auth/login",
            json={"email": settings.admin_email, "password": settings.admin_password},
        )

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "ADMIN"

    @pytest.mark.asyncio
    async def test_existing_customer_email_is_left_alone(self, settings, context, customer_user):
        settings.admin_email = customer_user.email

        assert await seed_admin(settings) is False

        async with context.session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(User))
            user = await session.get(User, customer_user.id)
        assert count == 1
        assert user.role == UserRole.CUSTOMER
