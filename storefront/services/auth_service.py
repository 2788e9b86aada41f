"""
Storefront Backend — Authentication Service
=============================================

What:  Registration, credential checks, session issuance and profile lookup.
How:   Password hashes via PasswordHasher, tokens via TokenSigner; both are
       handed in from the AppContext. Cookie handling stays in the route.
Who:   /api/auth/* routes and the admin seed script.

Flows:
    register:  email unused? → hash → INSERT user(role=CUSTOMER) → token
    login:     user by email → bcrypt verify → token
               (unknown email and wrong password raise the same error)
    profile:   identity.user_id → user + addresses, NotFoundError if deleted
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.exceptions import (
    AuthenticationError,
    DatabaseError,
    EmailAlreadyRegisteredError,
    NotFoundError,
)
from storefront.models.user import User, UserRole
from storefront.schemas.auth import LoginRequest, RegisterRequest
from storefront.services.security import Identity, PasswordHasher, TokenSigner

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def identity_for(user: User) -> Identity:
    return Identity(user_id=user.id, email=user.email, role=user.role)


class AuthService:
    def __init__(self, hasher: PasswordHasher, signer: TokenSigner):
        self.hasher = hasher
        self.signer = signer

    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        role: UserRole = UserRole.CUSTOMER,
    ) -> User:
        """
        Hash `password` and insert a user.

        Raises:
            EmailAlreadyRegisteredError: the unique email constraint fired
            (a concurrent registration won the race).
        """
        user = User(
            email=email,
            password=await self.hasher.hash(password),
            name=name,
            phone=phone,
            role=role,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as e:
            raise EmailAlreadyRegisteredError(email) from e
        return user

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> Tuple[User, str]:
        """
        Create a CUSTOMER account and issue its session token.

        Raises:
            EmailAlreadyRegisteredError: email already in use (→ 400)
        """
        try:
            if await self.find_by_email(db, payload.email) is not None:
                raise EmailAlreadyRegisteredError(payload.email)

            user = await self.create_user(
                db,
                email=payload.email,
                password=payload.password,
                name=payload.name,
                phone=payload.phone,
                role=UserRole.CUSTOMER,
            )
        except SQLAlchemyError as e:
            logger.error("Database error during registration: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        logger.info("User registered: %s", user.id)
        return user, self.signer.issue(identity_for(user))

    async def login(self, db: AsyncSession, payload: LoginRequest) -> Tuple[User, str]:
        """
        Check credentials and issue a session token.

        Raises:
            AuthenticationError("Invalid credentials") for an unknown email
            or a wrong password alike.
        """
        try:
            user = await self.find_by_email(db, payload.email)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        if user is None or not await self.hasher.verify(payload.password, user.password):
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        logger.info("User logged in: %s", user.id)
        return user, self.signer.issue(identity_for(user))

    async def get_profile(self, db: AsyncSession, identity: Identity) -> User:
        """
        Load the session's user with addresses.

        Raises:
            NotFoundError: the token is valid but the user row is gone (→ 404)
        """
        result = await db.execute(
            select(User)
            .options(selectinload(User.addresses))
            .where(User.id == identity.user_id)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(identity.user_id), message="User not found")
        return user

    async def ensure_admin(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        name: str = "Admin",
    ) -> Optional[User]:
        """Create an ADMIN account unless `email` exists; returns None when it did."""
        if await self.find_by_email(db, email) is not None:
            return None
        return await self.create_user(db, email=email, password=password, name=name, role=UserRole.ADMIN)
