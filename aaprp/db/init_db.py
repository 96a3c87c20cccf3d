"""Database initialization utilities."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.db.base import Base
from aaprp.db.session import engine
from aaprp.models.questionnaire import Questionnaire
from aaprp.questionnaires.loader import QuestionnaireLoader
from aaprp.services.questionnaire import QuestionnaireService

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    """Create all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def drop_tables() -> None:
    """Drop all database tables (use with caution)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database tables dropped")


async def seed_questionnaires(session: AsyncSession, loader: QuestionnaireLoader | None = None) -> int:
    """Import bundled questionnaire definitions that are not yet in the database.

    Returns:
        Number of questionnaires imported
    """
    loader = loader or QuestionnaireLoader()
    service = QuestionnaireService(session)
    imported = 0

    for filename in loader.list_definitions():
        definition, definition_hash = loader.load(filename)
        result = await session.execute(
            select(Questionnaire.id)
            .where(Questionnaire.code == definition.code)
            .where(Questionnaire.version == definition.version)
        )
        if result.scalar_one_or_none() is not None:
            logger.info(f"Questionnaire {definition.code} v{definition.version} already present")
            continue

        await service.import_definition(definition, definition_hash)
        imported += 1

    return imported


async def init_db(session: AsyncSession) -> None:
    """Create tables and load bundled questionnaires."""
    await create_tables()
    imported = await seed_questionnaires(session)
    logger.info(f"Database initialization complete ({imported} questionnaires imported)")
