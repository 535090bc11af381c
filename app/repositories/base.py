"""
Generic async repository shared by the user and apartment repositories.
Every write commits its own transaction and rolls back on failure.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Create, fetch, update and delete for a single mapped model.
    Subclasses add the model-specific queries.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    async def _commit(self, action: str, db_obj: Optional[ModelType] = None) -> None:
        """
        Commit the session and refresh ``db_obj`` when given.

        Raises:
            Exception: Whatever the commit raised, after rolling back
        """
        try:
            await self.db.commit()
            if db_obj is not None:
                await self.db.refresh(db_obj)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to {action} {self.model_name}: {e}")
            raise

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Insert a new row built from ``obj_in``.

        Returns:
            The stored instance with server defaults loaded
        """
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        await self._commit("create", db_obj)
        logger.debug(f"Created {self.model_name} {db_obj.id}")
        return db_obj

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        obj = result.scalar_one_or_none()
        if obj is None:
            logger.debug(f"{self.model_name} {id} not found")
        return obj

    async def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """
        Copy ``obj_in`` onto a loaded instance and persist it.
        Keys missing from ``obj_in`` keep their stored values; unknown keys are ignored.
        """
        if not obj_in:
            return db_obj

        for field, value in obj_in.items():
            if hasattr(self.model, field):
                setattr(db_obj, field, value)

        await self._commit("update", db_obj)
        logger.debug(f"Updated {self.model_name} {db_obj.id}")
        return db_obj

    async def delete(self, db_obj: ModelType) -> None:
        record_id = db_obj.id
        await self.db.delete(db_obj)
        await self._commit("delete")
        logger.debug(f"Deleted {self.model_name} {record_id}")
