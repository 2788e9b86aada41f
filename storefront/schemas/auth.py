"""
Storefront Backend — Authentication Schemas
=============================================

Request bodies for register/login and the profile returned by /auth/me.
"""

import uuid
from typing import List, Optional

from pydantic import EmailStr, Field

from storefront.schemas.common import CamelModel, PublicUser


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    name: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class AddressOut(CamelModel):
    id: uuid.UUID
    street: str
    city: str
    state: str
    zip: str
    is_default: bool


class UserProfile(PublicUser):
    """PublicUser plus the saved addresses (returned by GET /auth/me)."""

    addresses: List[AddressOut] = Field(default_factory=list)


class UserEnvelope(CamelModel):
    user: PublicUser


class UserProfileEnvelope(CamelModel):
    user: UserProfile
