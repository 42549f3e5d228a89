"""Attaching and retrieving the request's transaction."""
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from app.repositories import NoAmbientTransactionError, RequestContext, attach, retrieve


def test_retrieve_without_transaction_raises():
    with pytest.raises(NoAmbientTransactionError) as exc_info:
        retrieve(RequestContext())
    assert str(exc_info.value) == "no transaction in context"


@pytest.mark.asyncio
async def test_attach_then_retrieve(engine_test: AsyncEngine):
    async with engine_test.connect() as conn:
        ctx = RequestContext(timeout=3.0)
        tx_ctx = attach(ctx, conn)

        assert retrieve(tx_ctx) is conn
        assert tx_ctx.timeout == 3.0
        # The original context is never mutated.
        assert ctx.transaction is None


@pytest.mark.asyncio
async def test_attach_does_not_begin_a_transaction(engine_test: AsyncEngine):
    async with engine_test.connect() as conn:
        attach(RequestContext(), conn)
        assert not conn.in_transaction()
