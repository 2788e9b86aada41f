"""
Storefront Backend — Password Hashing & Session Tokens
========================================================

What:  PasswordHasher (bcrypt) and TokenSigner (HS256 JWT via python-jose),
       plus the Identity value carried inside a session token.
How:   bcrypt is CPU-bound; hashing and verification run in Starlette's
       threadpool so a login does not stall the event loop.
Who:   AuthService (register/login), the identity dependency, the seed script.

Token payload:
    {"sub": "<user uuid>", "email": "...", "role": "ADMIN|CUSTOMER", "exp": <unix ts>}
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from starlette.concurrency import run_in_threadpool

from storefront.models.user import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as recovered from a session token."""

    user_id: uuid.UUID
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


# bcrypt only reads the first 72 bytes; recent releases raise beyond that
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify_sync(self, password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            logger.warning("Password verification rejected a malformed input")
            return False

    async def hash(self, password: str) -> str:
        return await run_in_threadpool(self.hash_sync, password)

    async def verify(self, password: str, hashed: str) -> bool:
        return await run_in_threadpool(self.verify_sync, password, hashed)


class TokenSigner:
    """
    Issues and reads signed session tokens.

    read() never raises: any malformed, tampered, or expired token yields
    None, which callers treat as "no identity".
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)):
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, identity: Identity) -> str:
        expire = datetime.now(timezone.utc) + self.ttl
        payload = {
            "sub": str(identity.user_id),
            "email": identity.email,
            "role": identity.role.value,
            "exp": expire,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def read(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
            return Identity(
                user_id=uuid.UUID(payload["sub"]),
                email=payload["email"],
                role=UserRole(payload["role"]),
            )
        except (JWTError, KeyError, ValueError) as e:
            logger.debug("Rejected session token: %s", type(e).__name__)
            return None
