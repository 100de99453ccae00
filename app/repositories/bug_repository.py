"""버그 레포지토리.

Bug repository — Handles bugs table queries.
"""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bug import Bug
from app.repositories.base import BaseRepository


class BugRepository(BaseRepository[Bug]):

    def __init__(self) -> None:
        super().__init__(Bug)

    async def list_all(self, db: AsyncSession) -> Sequence[Bug]:
        """생성 시각 오름차순 전체 목록 (All bugs, oldest first)."""
        return await self.get_all(db, order_by=Bug.created_at.asc())

    async def count_reference(self, db: AsyncSession) -> int:
        return await self.count(db, {"reference": True})

    async def delete_non_reference(self, db: AsyncSession) -> int:
        return await self.delete_where(db, {"reference": False})


bug_repository: BugRepository = BugRepository()
