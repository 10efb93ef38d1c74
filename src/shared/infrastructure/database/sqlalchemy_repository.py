"""
SQLAlchemy Implementation of Generic Repository
Concrete async repository using SQLAlchemy 2.x
"""
from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.sql.elements import ColumnElement

from shared.domain.base_entity import BaseEntity
from shared.infrastructure.database.base_model import Base
from shared.infrastructure.database.session import DatabaseSessionFactory
from shared.infrastructure.observability.logger import get_logger
from shared.utils.pagination import (
    PageOptions,
    PaginatedResult,
    calculate_offset,
    calculate_page_result,
)

logger = get_logger(__name__)

TEntity = TypeVar("TEntity", bound=BaseEntity)
TModel = TypeVar("TModel", bound=Base)


class SQLAlchemyRepository(Generic[TEntity, TModel]):
    """
    Generic async SQLAlchemy repository implementation.

    Every operation opens its own short-lived session, so no connection or
    cursor is held between calls. Pages are ordered by ``(created_at, id)``
    to stay stable across offset queries.

    Type Parameters:
        TEntity: Domain entity type
        TModel: SQLAlchemy ORM model type
    """

    def __init__(
        self,
        session_factory: DatabaseSessionFactory,
        model_class: Type[TModel],
        entity_class: Type[TEntity],
    ) -> None:
        self.session_factory = session_factory
        self.model_class = model_class
        self.entity_class = entity_class

    def _to_entity(self, model: TModel) -> TEntity:
        """Convert ORM model to domain entity."""
        raise NotImplementedError("Subclass must implement _to_entity")

    def _to_model(self, entity: TEntity) -> TModel:
        """Convert domain entity to ORM model."""
        raise NotImplementedError("Subclass must implement _to_model")

    def _select(self) -> Select[Any]:
        """Base SELECT for reads; override to add loader options."""
        return select(self.model_class)

    async def add(self, entity: TEntity) -> None:
        try:
            async with self.session_factory.session() as session:
                session.add(self._to_model(entity))
            logger.debug("entity_added", entity=self.entity_class.__name__, entity_id=str(entity.id))
        except Exception as e:
            logger.error(
                "entity_add_failed",
                entity=self.entity_class.__name__,
                entity_id=str(entity.id),
                error=str(e),
            )
            raise

    async def get_by_id(self, entity_id: UUID) -> Optional[TEntity]:
        try:
            async with self.session_factory.session() as session:
                stmt = self._select().where(self.model_class.id == entity_id)
                model = (await session.execute(stmt)).scalar_one_or_none()
                if model is None:
                    logger.debug("entity_not_found", entity=self.entity_class.__name__, entity_id=str(entity_id))
                    return None
                return self._to_entity(model)
        except Exception as e:
            logger.error(
                "entity_get_failed",
                entity=self.entity_class.__name__,
                entity_id=str(entity_id),
                error=str(e),
            )
            raise

    async def get_by_ids(self, entity_ids: Sequence[UUID]) -> list[TEntity]:
        """Batch lookup in one query; missing ids are skipped."""
        if not entity_ids:
            return []
        try:
            async with self.session_factory.session() as session:
                stmt = self._select().where(self.model_class.id.in_(list(entity_ids)))
                models = (await session.execute(stmt)).scalars().all()
                return [self._to_entity(model) for model in models]
        except Exception as e:
            logger.error(
                "entity_batch_get_failed",
                entity=self.entity_class.__name__,
                count=len(entity_ids),
                error=str(e),
            )
            raise

    async def find_page(
        self,
        criteria: Sequence[ColumnElement[bool]] = (),
        page_options: Optional[PageOptions] = None,
    ) -> PaginatedResult[TEntity]:
        """
        Rows matching ``criteria``; one page of them when ``page_options`` is given.

        The count and the page are read in the same session.
        """
        try:
            async with self.session_factory.session() as session:
                stmt = self._select().where(*criteria).order_by(
                    self.model_class.created_at, self.model_class.id
                )

                if page_options is None:
                    models = (await session.execute(stmt)).scalars().all()
                    return PaginatedResult(results=[self._to_entity(m) for m in models])

                count_stmt = select(func.count()).select_from(self.model_class).where(*criteria)
                total = (await session.execute(count_stmt)).scalar_one()

                stmt = stmt.offset(calculate_offset(page_options)).limit(page_options.limit)
                models = (await session.execute(stmt)).scalars().all()
                return PaginatedResult(
                    results=[self._to_entity(m) for m in models],
                    page_result=calculate_page_result(total, page_options),
                )
        except Exception as e:
            logger.error("entity_page_failed", entity=self.entity_class.__name__, error=str(e))
            raise

    async def update_values(self, entity_id: UUID, values: dict[str, Any]) -> int:
        """
        Discrete UPDATE of the given columns.

        Returns:
            Number of rows matched
        """
        try:
            async with self.session_factory.session() as session:
                stmt = update(self.model_class).where(self.model_class.id == entity_id).values(**values)
                result = await session.execute(stmt)
            if result.rowcount == 0:
                logger.warning("entity_update_no_rows", entity=self.entity_class.__name__, entity_id=str(entity_id))
            return result.rowcount
        except Exception as e:
            logger.error(
                "entity_update_failed",
                entity=self.entity_class.__name__,
                entity_id=str(entity_id),
                error=str(e),
            )
            raise
