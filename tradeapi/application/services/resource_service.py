#!/usr/bin/env python3
"""
Resource Services - users and trades
====================================

Business operations over the repositories, returning API models.

LAYERING:
---------
    Route (HTTP, caching, invalidation)
      -> Service (not-found semantics, record <-> model mapping)
        -> Repository (SQL)

Services know nothing about the cache. Routes decide what to cache and
what to evict after a write; see routes/users.py and routes/trades.py.

Both services implement the PageSource protocol consumed by
services/pagination.py (fetch_page + count).
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

from tradeapi.application.api.models.trades import Trade, TradeCreate
from tradeapi.application.api.models.users import User, UserCreate
from tradeapi.core.exceptions import ResourceNotFoundError, TradeNotFoundError, UserNotFoundError
from tradeapi.core.logging.logger import get_logger
from tradeapi.infrastructure.database.repositories import (
    SqlRepository,
    TradeRepository,
    UserRepository,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
CreateT = TypeVar("CreateT", bound=BaseModel)


class ResourceService(Generic[ModelT, CreateT]):
    """CRUD over one repository. Subclasses set the model and error types."""

    model: type[ModelT]
    not_found_error: type[ResourceNotFoundError] = ResourceNotFoundError
    entity_name: str = "resource"

    def __init__(self, repository: SqlRepository):
        self._repository = repository

    def _not_found(self, entity_id: int) -> ResourceNotFoundError:
        return self.not_found_error(
            f"{self.entity_name.capitalize()} not found with id: {entity_id}",
            details={f"{self.entity_name}_id": entity_id},
        )

    def _to_model(self, record) -> ModelT:
        return self.model.model_validate(record)

    # Reads

    def get_by_id(self, entity_id: int) -> ModelT:
        """
        Raises:
            ResourceNotFoundError: (subclass) when no row has this id
        """
        record = self._repository.get_by_id(entity_id)
        if record is None:
            raise self._not_found(entity_id)
        return self._to_model(record)

    def list_all(self) -> list[ModelT]:
        return [self._to_model(r) for r in self._repository.list_all()]

    def fetch_page(
        self,
        offset: int,
        limit: int,
        sort_by: str | None = None,
        descending: bool = False,
    ) -> list[ModelT]:
        records = self._repository.list_page(offset, limit, sort_by=sort_by, descending=descending)
        return [self._to_model(r) for r in records]

    def count(self) -> int:
        return self._repository.count()

    # Writes

    def create(self, body: CreateT) -> ModelT:
        record = self._repository.add(**body.model_dump())
        logger.info(f"{self.entity_name.capitalize()} created", entity_id=record.id)
        return self._to_model(record)

    def update(self, entity_id: int, body: CreateT) -> ModelT:
        record = self._repository.update(entity_id, **body.model_dump())
        if record is None:
            raise self._not_found(entity_id)
        logger.info(f"{self.entity_name.capitalize()} updated", entity_id=entity_id)
        return self._to_model(record)

    def delete(self, entity_id: int) -> None:
        if not self._repository.delete(entity_id):
            raise self._not_found(entity_id)
        logger.info(f"{self.entity_name.capitalize()} deleted", entity_id=entity_id)


class UserService(ResourceService[User, UserCreate]):
    model = User
    not_found_error = UserNotFoundError
    entity_name = "user"

    def __init__(self, repository: UserRepository):
        super().__init__(repository)


class TradeService(ResourceService[Trade, TradeCreate]):
    model = Trade
    not_found_error = TradeNotFoundError
    entity_name = "trade"

    def __init__(self, repository: TradeRepository):
        super().__init__(repository)
