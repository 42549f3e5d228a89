"""
Statement registry: one prepared SQL statement per repository operation.

Statements are plain SQL text wrapped in SQLAlchemy ``text()`` constructs
whose bind parameters (and result columns, for reads) are typed up front,
so the ``Uuid`` type converts between ``uuid.UUID`` and whatever the
dialect stores.  ``StatementRegistry.prepare`` checks every statement
against a live connection once at startup; a rejected statement aborts
startup instead of surfacing on the first request.
"""
import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from sqlalchemy import String, Uuid, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

from app.repositories.errors import StatementPreparationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Query text
# ---------------------------------------------------------------------------

STATEMENTS: dict[str, str] = {
    # inserts a new row into the articles table
    "create-article": """
        INSERT INTO articles (article_id, name)
        VALUES (:article_id, :name)
    """,
    # soft deletes an article by id
    "delete-article": """
        UPDATE articles
        SET deleted_at = CURRENT_TIMESTAMP
        WHERE article_id = :article_id
          AND deleted_at IS NULL
    """,
    # gets a single live article row by id
    "get-article": """
        SELECT article_id, name
        FROM articles
        WHERE article_id = :article_id
          AND deleted_at IS NULL
    """,
    # updates the name of a single live article row by id
    "update-article": """
        UPDATE articles
        SET name = :name
        WHERE article_id = :article_id
          AND deleted_at IS NULL
    """,
}

# Bind parameter types, keyed by parameter name across all statements.
PARAM_TYPES: dict[str, TypeEngine] = {
    "article_id": Uuid(),
    "name": String(),
}

# Result column types for statements that return rows.
RESULT_TYPES: dict[str, dict[str, TypeEngine]] = {
    "get-article": {"article_id": Uuid(), "name": String()},
}


def _param_names(sql: str) -> list[str]:
    return list(text(sql).compile().params)


def _build(
    sql: str,
    param_types: Mapping[str, TypeEngine],
    result_types: Mapping[str, TypeEngine] | None,
):
    statement = text(sql)
    typed = [
        bindparam(name, type_=param_types[name])
        for name in _param_names(sql)
        if name in param_types
    ]
    if typed:
        statement = statement.bindparams(*typed)
    if result_types:
        return statement.columns(**result_types)
    return statement


class StatementRegistry(Mapping):
    """
    Read-only mapping of operation name to prepared statement.

    Built once by :meth:`prepare` and shared by every caller; nothing
    mutates it afterwards, so concurrent use needs no locking.
    """

    def __init__(self, statements: Mapping[str, TextClause]) -> None:
        self._statements = MappingProxyType(dict(statements))

    def __getitem__(self, operation: str) -> TextClause:
        return self._statements[operation]

    def __iter__(self) -> Iterator[str]:
        return iter(self._statements)

    def __len__(self) -> int:
        return len(self._statements)

    @classmethod
    async def prepare(
        cls,
        bind: AsyncEngine,
        queries: Mapping[str, str] = STATEMENTS,
        param_types: Mapping[str, TypeEngine] = PARAM_TYPES,
        result_types: Mapping[str, Mapping[str, TypeEngine]] = RESULT_TYPES,
    ) -> "StatementRegistry":
        """
        Build and verify every statement in *queries*.

        Each statement is checked with ``EXPLAIN`` and null parameters on a
        single connection that is rolled back afterwards, so nothing is
        written.  The first rejected statement raises
        ``StatementPreparationError``.
        """
        prepared: dict[str, TextClause] = {}
        async with bind.connect() as conn:
            for operation, sql in queries.items():
                statement = _build(sql, param_types, result_types.get(operation))
                try:
                    await conn.execute(
                        text(f"EXPLAIN {sql.strip()}"),
                        dict.fromkeys(_param_names(sql)),
                    )
                except SQLAlchemyError as exc:
                    logger.error("Failed to prepare statement %r: %s", operation, exc)
                    raise StatementPreparationError(operation, exc) from exc
                prepared[operation] = statement
            await conn.rollback()

        logger.info("Prepared %d statement(s): %s", len(prepared), ", ".join(sorted(prepared)))
        return cls(prepared)
