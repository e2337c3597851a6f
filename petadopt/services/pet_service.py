from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from petadopt.models.pet import Pet


async def pet_exists(session: AsyncSession, pet_id: int) -> bool:
    result = await session.execute(select(Pet.id).where(Pet.id == pet_id))
    return result.scalar_one_or_none() is not None


async def get_pets_by_ids(session: AsyncSession, pet_ids: set[int]) -> dict[int, Pet]:
    if not pet_ids:
        return {}
    result = await session.execute(select(Pet).where(Pet.id.in_(pet_ids)))
    return {p.id: p for p in result.scalars().all()}
