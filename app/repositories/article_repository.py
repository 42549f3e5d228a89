"""
Article repository: CRUD access to the ``articles`` table.

Design notes
------------
- Every operation exists twice: a direct form (``get``) that runs in its
  own implicit transaction on a pooled connection, and a transactional
  form (``get_tx``) that runs on the transaction attached to the request
  context.  Both delegate to one private implementation taking a
  ``use_tx`` flag so error mapping is written once.
- The repository never begins, commits or rolls back a caller's
  transaction; it only executes statements on it.
- Soft-deleted rows (``deleted_at IS NOT NULL``) are invisible to every
  operation here; the filtering lives in the SQL text of the registry.
"""
import asyncio
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple, Protocol

from sqlalchemy import TextClause, TextualSelect
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.repositories.context import RequestContext, retrieve
from app.repositories.errors import (
    InvalidIdentifierError,
    NoRowsAffectedError,
    NotCreatedError,
    NotFoundError,
    UnderlyingError,
)
from app.schemas import ArticleResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Entity and wire mapping
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Article:
    """A live row of the articles table."""

    id: uuid.UUID
    name: str

    def to_response(self) -> ArticleResponse:
        return ArticleResponse(id=str(self.id), name=self.name)


class NamedArticle(Protocol):
    """Any request object exposing a ``name``, e.g. ``CreateArticleRequest``."""

    @property
    def name(self) -> str: ...


def parse_uuid(value: str) -> uuid.UUID:
    """Parse *value* as a UUID, raising ``InvalidIdentifierError`` when malformed."""
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidIdentifierError(reason=f"invalid UUID {value!r}: {exc}") from exc


def new_article(article_id: str, request: NamedArticle) -> Article:
    """
    Build an ``Article`` from a wire request and its id string.

    The id is parsed first; ``request.name`` is not read when it fails.
    """
    return Article(id=parse_uuid(article_id), name=request.name)


# ---------------------------------------------------------------------------
# Execution modes
# ---------------------------------------------------------------------------

class _Outcome(NamedTuple):
    rows: list[Row]
    rowcount: int


async def _run(
    conn: AsyncConnection, statement: TextClause | TextualSelect, params: dict[str, Any]
) -> _Outcome:
    result = await conn.execute(statement, params)
    rows = list(result.all()) if result.returns_rows else []
    return _Outcome(rows=rows, rowcount=result.rowcount)


class _PoolExecutor:
    """Runs each statement on a pooled connection in its own transaction."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def run(self, statement: TextClause | TextualSelect, params: dict[str, Any]) -> _Outcome:
        async with self._engine.begin() as conn:
            return await _run(conn, statement, params)


class _TransactionExecutor:
    """Runs each statement on the caller's open transaction."""

    def __init__(self, tx: AsyncConnection) -> None:
        self._tx = tx

    async def run(self, statement: TextClause | TextualSelect, params: dict[str, Any]) -> _Outcome:
        return await _run(self._tx, statement, params)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class ArticleRepository:
    """Get/create/update/delete for articles, direct or inside a caller's transaction."""

    def __init__(self, engine: AsyncEngine, statements: Mapping) -> None:
        self._engine = engine
        self._statements = statements

    def _executor(
        self, ctx: RequestContext, use_tx: bool
    ) -> _PoolExecutor | _TransactionExecutor:
        if use_tx:
            return _TransactionExecutor(retrieve(ctx))
        return _PoolExecutor(self._engine)

    async def _execute(
        self,
        ctx: RequestContext,
        use_tx: bool,
        operation: str,
        params: dict[str, Any],
        error_context: str,
    ) -> _Outcome:
        """
        Run *operation* in the mode selected by *use_tx*.

        Driver failures become ``UnderlyingError``.  Cancellation and an
        expired ``ctx.timeout`` propagate unwrapped.  A timeout in
        transactional mode leaves the caller's connection in an unknown
        state (some drivers keep executing the abandoned statement), so the
        caller must roll that transaction back after a ``TimeoutError``.
        """
        # Resolving the executor raises before any I/O when no transaction is attached.
        executor = self._executor(ctx, use_tx)
        statement = self._statements[operation]
        try:
            if ctx.timeout is None:
                return await executor.run(statement, params)
            return await asyncio.wait_for(executor.run(statement, params), ctx.timeout)
        except SQLAlchemyError as exc:
            logger.debug("%s failed: %s", error_context, exc)
            raise UnderlyingError(error_context, exc) from exc

    # -- get ---------------------------------------------------------------

    async def get(self, ctx: RequestContext, article_id: uuid.UUID) -> Article:
        """Fetch a single live article."""
        return await self._get(ctx, False, article_id)

    async def get_tx(self, ctx: RequestContext, article_id: uuid.UUID) -> Article:
        """Fetch a single live article inside the transaction attached to *ctx*."""
        return await self._get(ctx, True, article_id)

    async def _get(self, ctx: RequestContext, use_tx: bool, article_id: uuid.UUID) -> Article:
        error_context = f"Error executing get article - {article_id}"
        outcome = await self._execute(
            ctx, use_tx, "get-article", {"article_id": article_id}, error_context
        )
        if not outcome.rows:
            logger.debug("%s: not found", error_context)
            raise NotFoundError(error_context)

        row = outcome.rows[0]
        return Article(id=row.article_id, name=row.name)

    # -- create ------------------------------------------------------------

    async def create(self, ctx: RequestContext, article: Article) -> None:
        """Insert a new article."""
        await self._create(ctx, False, article)

    async def create_tx(self, ctx: RequestContext, article: Article) -> None:
        """Insert a new article inside the transaction attached to *ctx*."""
        await self._create(ctx, True, article)

    async def _create(self, ctx: RequestContext, use_tx: bool, article: Article) -> None:
        error_context = f"Error executing create article - {article}"
        outcome = await self._execute(
            ctx,
            use_tx,
            "create-article",
            {"article_id": article.id, "name": article.name},
            error_context,
        )
        # Distinct from a duplicate key, which the driver reports as an error.
        if outcome.rowcount == 0:
            logger.debug("%s: no rows created", error_context)
            raise NotCreatedError(error_context)

    # -- update ------------------------------------------------------------

    async def update(self, ctx: RequestContext, article: Article) -> None:
        """Rename a live article.  The id is never updated."""
        await self._update(ctx, False, article)

    async def update_tx(self, ctx: RequestContext, article: Article) -> None:
        """Rename a live article inside the transaction attached to *ctx*."""
        await self._update(ctx, True, article)

    async def _update(self, ctx: RequestContext, use_tx: bool, article: Article) -> None:
        error_context = f"Error executing update article - {article}"
        outcome = await self._execute(
            ctx,
            use_tx,
            "update-article",
            {"name": article.name, "article_id": article.id},
            error_context,
        )
        if outcome.rowcount == 0:
            logger.debug("%s: no rows affected", error_context)
            raise NoRowsAffectedError(error_context)

    # -- delete ------------------------------------------------------------

    async def delete(self, ctx: RequestContext, article_id: uuid.UUID) -> None:
        """Soft delete a live article.  Deleting twice raises ``NotFoundError``."""
        await self._delete(ctx, False, article_id)

    async def delete_tx(self, ctx: RequestContext, article_id: uuid.UUID) -> None:
        """Soft delete a live article inside the transaction attached to *ctx*."""
        await self._delete(ctx, True, article_id)

    async def _delete(self, ctx: RequestContext, use_tx: bool, article_id: uuid.UUID) -> None:
        error_context = f"Error executing delete article - {article_id}"
        outcome = await self._execute(
            ctx, use_tx, "delete-article", {"article_id": article_id}, error_context
        )
        if outcome.rowcount == 0:
            logger.debug("%s: not found", error_context)
            raise NotFoundError(error_context)
