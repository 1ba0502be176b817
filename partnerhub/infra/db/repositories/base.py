"""
Base repository class with common CRUD operations.
"""
from typing import Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.base import Base, generate_id, utcnow

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing common CRUD operations.
    
    Inherit from this class and specify the model type:
        class PartnershipRepository(BaseRepository[Partnership]):
            def __init__(self, session: AsyncSession):
                super().__init__(Partnership, session)
    
    Every write commits immediately. Writes are atomic per record only;
    callers must not assume two repository calls succeed or fail together.
    """
    
    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session
    
    async def create(self, **kwargs) -> ModelType:
        """Create a new record."""
        if "id" not in kwargs:
            kwargs["id"] = generate_id()
        
        obj = self.model(**kwargs)
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj
    
    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get a record by ID."""
        stmt = select(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
    
    async def apply(self, obj: ModelType, **kwargs) -> ModelType:
        """Write field changes onto an already loaded record."""
        for key, value in kwargs.items():
            setattr(obj, key, value)
        obj.updated_at = utcnow()
        await self.session.commit()
        await self.session.refresh(obj)
        return obj
    
    async def delete(self, id: str) -> bool:
        """Delete a record by ID. Returns True if deleted."""
        stmt = delete(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
