"""Persistent store: owner-scoped select/insert/update/delete.

Each call opens its own session and commits on its own, mirroring a hosted
Postgres REST client where every query is a separate request. Nothing here
spans several operations in one transaction; callers that need multi-step
consistency (inquiry promotion) make each step idempotent instead.
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventdesk.core.errors import NotFound, StoreError
from eventdesk.core.logging import get_logger
from eventdesk.models import Base, Client, OAuthProvider, OAuthToken

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class Store:
    """Query/insert/update/delete client over the application tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def select(
        self,
        model: type[ModelT],
        user_id: str,
        *filters: Any,
        order_by: Any = None,
    ) -> list[ModelT]:
        """Return every row of `model` owned by `user_id` matching `filters`."""
        stmt = select(model).where(model.user_id == user_id, *filters)
        stmt = stmt.order_by(order_by if order_by is not None else model.id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._store_error("select", model, exc) from exc

    async def get(self, model: type[ModelT], user_id: str, row_id: int) -> ModelT:
        """Return one owned row or raise NotFound."""
        rows = await self.select(model, user_id, model.id == row_id)
        if not rows:
            raise NotFound(f"{model.__name__} {row_id} not found")
        return rows[0]

    async def insert(self, row: ModelT) -> ModelT:
        """Insert a row and return it with its generated id."""
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return row
        except SQLAlchemyError as exc:
            raise self._store_error("insert", type(row), exc) from exc

    async def insert_many(self, rows: Sequence[ModelT]) -> list[ModelT]:
        """Insert several rows in one round trip."""
        if not rows:
            return []
        try:
            async with self._session_factory() as session:
                session.add_all(rows)
                await session.commit()
                for row in rows:
                    await session.refresh(row)
                return list(rows)
        except SQLAlchemyError as exc:
            raise self._store_error("insert", type(rows[0]), exc) from exc

    async def update(
        self,
        model: type[ModelT],
        user_id: str,
        row_id: int,
        values: dict[str, Any],
    ) -> ModelT:
        """Apply a partial update to an owned row and return the new row."""
        if not await self._update_rows(model, user_id, row_id, values):
            raise NotFound(f"{model.__name__} {row_id} not found")
        return await self.get(model, user_id, row_id)

    async def update_if(
        self,
        model: type[ModelT],
        user_id: str,
        row_id: int,
        condition: Any,
        values: dict[str, Any],
    ) -> bool:
        """Update an owned row only while `condition` holds.

        Returns False when the row is missing or no longer matches, which
        lets a caller claim a row against a concurrent writer.
        """
        return await self._update_rows(model, user_id, row_id, values, condition) > 0

    async def _update_rows(
        self,
        model: type[ModelT],
        user_id: str,
        row_id: int,
        values: dict[str, Any],
        *conditions: Any,
    ) -> int:
        stmt = (
            update(model)
            .where(model.id == row_id, model.user_id == user_id, *conditions)
            .values(**values)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise self._store_error("update", model, exc) from exc
        return result.rowcount

    async def delete(self, model: type[ModelT], user_id: str, row_id: int) -> None:
        """Delete an owned row; deleting a missing row raises NotFound."""
        stmt = delete(model).where(model.id == row_id, model.user_id == user_id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise self._store_error("delete", model, exc) from exc
        if result.rowcount == 0:
            raise NotFound(f"{model.__name__} {row_id} not found")

    async def find_client(self, user_id: str, fraternity: str, school: str) -> Client | None:
        """Match a client by case-insensitive (fraternity, school)."""
        rows = await self.select(
            Client,
            user_id,
            func.lower(Client.fraternity) == fraternity.strip().lower(),
            func.lower(Client.school) == school.strip().lower(),
        )
        return rows[0] if rows else None

    # OAuth tokens are keyed by (user, provider) rather than by row id.

    async def get_token(self, user_id: str, provider: OAuthProvider) -> OAuthToken | None:
        """Return the stored token row, if the user connected this provider."""
        stmt = select(OAuthToken).where(
            OAuthToken.user_id == user_id, OAuthToken.provider == provider
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalars().first()
        except SQLAlchemyError as exc:
            raise self._store_error("select", OAuthToken, exc) from exc

    async def update_token(
        self,
        user_id: str,
        provider: OAuthProvider,
        values: dict[str, Any],
    ) -> None:
        """Rotate fields on an existing token row."""
        stmt = (
            update(OAuthToken)
            .where(OAuthToken.user_id == user_id, OAuthToken.provider == provider)
            .values(**values, updated_at=utcnow())
        )
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise self._store_error("update", OAuthToken, exc) from exc

    @staticmethod
    def _store_error(operation: str, model: type, exc: Exception) -> StoreError:
        logger.error(
            "store_operation_failed",
            operation=operation,
            table=getattr(model, "__tablename__", model.__name__),
            error=str(exc),
        )
        return StoreError(f"Failed to {operation} {model.__name__}: {exc}")
