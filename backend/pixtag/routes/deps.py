"""Shared FastAPI dependencies for the route modules."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pixtag.database import get_db_session
from pixtag.store import AnnotationStore


async def get_store(db: AsyncSession = Depends(get_db_session)) -> AnnotationStore:
    """Build the request's AnnotationStore around its database session."""
    return AnnotationStore(db)
