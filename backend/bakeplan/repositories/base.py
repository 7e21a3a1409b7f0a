"""
Base Repository — Repository Pattern (GoF)
Generic data access shared by the concrete repositories.
"""
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from bakeplan.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    def __init__(self, model: Type[ModelT], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, entity_id: int) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def create(self, entity: ModelT, commit: bool = True) -> ModelT:
        self.db.add(entity)
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()
        return entity
