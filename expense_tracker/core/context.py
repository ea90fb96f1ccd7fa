# expense_tracker/core/context.py
import logging

from .config import Settings
from .database import Database
from .sessions import SessionManager, build_session_store

logger = logging.getLogger(__name__)


class AppContext:
    """
    Process-wide state: settings, database pool and session manager.

    Created by the app lifespan; nothing else holds an engine or a
    session store.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.database = Database(settings)
        self.sessions = SessionManager(
            build_session_store(settings.SESSION_BACKEND, self.database),
            settings.SECRET_KEY,
            cookie_name=settings.SESSION_COOKIE_NAME,
            max_age=settings.SESSION_MAX_AGE_SECONDS,
            secure=settings.SESSION_COOKIE_SECURE,
            timeout=settings.DB_STATEMENT_TIMEOUT,
        )

    async def startup(self) -> None:
        from expense_tracker.crud.category import seed_default_categories

        if self.settings.CREATE_TABLES_ON_STARTUP:
            await self.database.create_all()
            logger.info("✅ Database tables created successfully")
        if self.settings.SEED_DEFAULT_CATEGORIES:
            async with self.database.sessionmaker() as db:
                created = await seed_default_categories(db)
            if created:
                logger.info(f"✅ Seeded {len(created)} default categories")
        logger.info(f"✅ Session backend: {self.settings.SESSION_BACKEND}")

    async def shutdown(self) -> None:
        await self.sessions.close()
        await self.database.dispose()
        logger.info("Database pool disposed")
