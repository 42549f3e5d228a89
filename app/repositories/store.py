"""
Store, the collaborator that opens the database for the repository layer.

The store owns what the repositories deliberately do not: preparing the
statement registry at startup and the begin/commit/rollback lifecycle of
transactions that callers thread through ``RequestContext``.
"""
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine

from app.repositories.article_repository import ArticleRepository
from app.repositories.context import RequestContext, attach
from app.repositories.statements import STATEMENTS, StatementRegistry

logger = logging.getLogger(__name__)


class Store:
    def __init__(self, engine: AsyncEngine, statements: StatementRegistry) -> None:
        self.engine = engine
        self.statements = statements
        self.article = ArticleRepository(engine, statements)

    @classmethod
    async def open(cls, engine: AsyncEngine, queries: Mapping[str, str] = STATEMENTS) -> "Store":
        """Prepare *queries* against *engine*; fails fast on any rejected statement."""
        return cls(engine, await StatementRegistry.prepare(engine, queries))

    @asynccontextmanager
    async def begin(self, ctx: RequestContext | None = None) -> AsyncIterator[RequestContext]:
        """
        Open a transaction and yield a context carrying it.

        Commits when the block exits normally; rolls back and re-raises
        on any exception::

            async with store.begin() as tx_ctx:
                await store.article.create_tx(tx_ctx, first)
                await store.article.create_tx(tx_ctx, second)
        """
        async with self.engine.connect() as conn:
            await conn.begin()
            try:
                yield attach(ctx or RequestContext(), conn)
                await conn.commit()
            except Exception:
                logger.warning("Rolling back transaction after error")
                await conn.rollback()
                raise

    async def close(self) -> None:
        await self.engine.dispose()
