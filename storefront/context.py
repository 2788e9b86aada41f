"""
Storefront Backend — Application Context
==========================================

What:  One object owning every process-wide collaborator: settings, the async
       engine and session factory, password hasher, token signer, email
       sender, image processor and upload storage.
How:   Built once by create_app() and stored on `app.state.context`.
       Dependencies in storefront.dependencies read it from the request;
       nothing else in the package holds collaborators at module level.
When:  Constructed at app creation; `aclose()` runs in the lifespan shutdown.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from storefront.config import Settings
from storefront.database import create_engine_from_settings, create_session_factory
from storefront.services.email_service import EmailService
from storefront.services.image_service import ImageService
from storefront.services.security import PasswordHasher, TokenSigner
from storefront.services.upload_service import UploadService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    password_hasher: PasswordHasher
    token_signer: TokenSigner
    email_service: EmailService
    image_service: ImageService
    upload_service: UploadService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = create_engine_from_settings(settings)
        image_service = ImageService()
        return cls(
            settings=settings,
            engine=engine,
            session_factory=create_session_factory(engine),
            password_hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            token_signer=TokenSigner(
                secret=settings.jwt_secret,
                algorithm=settings.jwt_algorithm,
                ttl=timedelta(days=settings.session_ttl_days),
            ),
            email_service=EmailService(settings),
            image_service=image_service,
            upload_service=UploadService(settings, image_service),
        )

    async def aclose(self) -> None:
        """Close every pooled database connection."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
