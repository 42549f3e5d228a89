from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.repositories import RequestContext, Store

# Module-level engine variable allows tests to build their own engine instead.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)


class Base(DeclarativeBase):
    pass


def request_context() -> RequestContext:
    """Return an empty request context carrying the configured statement timeout."""
    return RequestContext(timeout=settings.STATEMENT_TIMEOUT)


async def open_store() -> Store:
    """
    Prepare every repository statement against the production engine and
    return the resulting ``Store``.  Raises ``StatementPreparationError``
    when any statement is rejected by the database.
    """
    return await Store.open(engine)
