"""
BaseRepository

Common query helpers shared by the repositories.

Methods:
- count() -> int: Row count
- flush(): Flush pending writes, mapping unique-key collisions to ConstraintViolation
"""

from typing import Generic, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from friday.models import Base
from friday.errors import ConstraintViolation

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Repository over one mapped table."""

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(self.model)) or 0

    def flush(self) -> None:
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise ConstraintViolation(
                f"Unique constraint violated on {self.model.__tablename__}",
                detail=str(e.orig),
            ) from e
