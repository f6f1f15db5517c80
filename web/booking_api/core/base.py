from typing import Generic, TypeVar, Optional, Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Persistence for one ORM model; flushes but never commits"""

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        return await self.session.get(self.model, id)

    async def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Insert a row and reload it so server defaults are populated"""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.flush()
        await self.session.refresh(db_obj)
        return db_obj

    async def apply(self, db_obj: ModelType, changes: Dict[str, Any]) -> ModelType:
        """Set mapped attributes from *changes* on a loaded row"""
        for field, value in changes.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self.session.flush()
        await self.session.refresh(db_obj)
        return db_obj


class BaseService:
    """Service bound to the request's unit of work; services own the commit"""

    def __init__(self, session: AsyncSession):
        self.session = session
