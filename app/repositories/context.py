"""
Request-scoped context carrying an optional in-flight transaction.

The transaction is owned by whoever opened it (see ``Store.begin``);
attaching it here is plain data association and never begins, commits or
rolls back anything.
"""
from dataclasses import dataclass, replace

from sqlalchemy.ext.asyncio import AsyncConnection

from app.repositories.errors import NoAmbientTransactionError


@dataclass(frozen=True)
class RequestContext:
    transaction: AsyncConnection | None = None
    # Seconds allowed for each statement execution; None waits indefinitely.
    # After a TimeoutError on an attached transaction, roll that transaction back.
    timeout: float | None = None


def attach(ctx: RequestContext, tx: AsyncConnection) -> RequestContext:
    """Return a copy of *ctx* carrying *tx*.  *ctx* itself is left unchanged."""
    return replace(ctx, transaction=tx)


def retrieve(ctx: RequestContext) -> AsyncConnection:
    """
    Return the transaction attached to *ctx*.

    Raises ``NoAmbientTransactionError`` when none is attached; calling a
    transactional operation without attaching one first is a programming
    error on the caller's side.
    """
    if ctx.transaction is None:
        raise NoAmbientTransactionError()
    return ctx.transaction
