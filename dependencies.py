# dependencies.py

from typing import AsyncGenerator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import async_session_maker, RestaurantSettings, User


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yields a database session for the lifetime of a request."""
    async with async_session_maker() as session:
        yield session


async def get_restaurant_settings(session: AsyncSession, user: User) -> RestaurantSettings:
    """Returns the owner's settings row, creating it with defaults when missing."""
    res = await session.execute(select(RestaurantSettings).where(RestaurantSettings.user_id == user.id))
    settings = res.scalar_one_or_none()
    if settings is None:
        settings = RestaurantSettings(user_id=user.id)
        session.add(settings)
        await session.commit()
        await session.refresh(settings)
    return settings
