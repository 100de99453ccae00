"""공통 레포지토리 — 단일 테이블 CRUD와 조건 삭제/카운트.

Shared repository for single-table access.
Subclasses bind a model and add their own queries on top of these.

Usage:
    class BugRepository(BaseRepository[Bug]):
        def __init__(self) -> None:
            super().__init__(Bug)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """모델 하나에 대한 CRUD (CRUD for one mapped model).

    Writes only flush; committing is left to the router that owns the
    request transaction.
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    def _where(self, query: Any, filters: dict[str, Any] | None) -> Any:
        # {'컬럼명': 값} 동등 조건 (Equality conditions by column name)
        for column_name, value in (filters or {}).items():
            query = query.where(getattr(self.model, column_name) == value)
        return query

    async def get_by_id(self, db: AsyncSession, record_id: UUID) -> ModelType | None:
        query: Select = select(self.model).where(self.model.id == record_id)
        return (await db.execute(query)).scalar_one_or_none()

    async def get_all(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """조건에 맞는 레코드 목록 (Records matching ``filters``, optionally ordered)."""
        query: Select = self._where(select(self.model), filters)
        if order_by is not None:
            query = query.order_by(order_by)
        return (await db.execute(query)).scalars().all()

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """레코드를 삽입하고 DB 기본값이 반영된 객체를 반환합니다.

        Insert a row and return it refreshed from the database.
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
    ) -> ModelType | None:
        """부분 업데이트 — 전달된 컬럼만 변경. 없으면 None.

        Apply a partial update. Columns missing from ``update_data`` keep
        their stored values. Returns None for an unknown id.
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return None
        for column_name, value in update_data.items():
            setattr(db_obj, column_name, value)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, record_id: UUID) -> bool:
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return False
        await db.delete(db_obj)
        await db.flush()
        return True

    async def delete_where(self, db: AsyncSession, filters: dict[str, Any]) -> int:
        """조건 일괄 삭제, 삭제된 행 수 반환 (Single-statement delete, returns rowcount)."""
        result = await db.execute(self._where(delete(self.model), filters))
        await db.flush()
        return result.rowcount or 0

    async def count(self, db: AsyncSession, filters: dict[str, Any] | None = None) -> int:
        query: Select = self._where(select(func.count()).select_from(self.model), filters)
        return (await db.execute(query)).scalar() or 0
