# Repositories package.
#
# Data access for the articles table, split by concern:
#
#   statements          — prepared SQL per operation, verified at startup
#   context             — RequestContext with attach / retrieve for transactions
#   article_repository  — Article entity, wire mapping, CRUD operations
#   store               — opens the registry and owns transaction lifecycle
#   errors              — error taxonomy shared by every repository
#
# Every operation takes a RequestContext as its first argument; the *_tx
# variants run on the transaction attached to it.
from app.repositories.article_repository import (
    Article,
    ArticleRepository,
    NamedArticle,
    new_article,
    parse_uuid,
)
from app.repositories.context import RequestContext, attach, retrieve
from app.repositories.errors import (
    InvalidIdentifierError,
    NoAmbientTransactionError,
    NoRowsAffectedError,
    NotCreatedError,
    NotFoundError,
    RepositoryError,
    StatementPreparationError,
    UnderlyingError,
)
from app.repositories.statements import STATEMENTS, StatementRegistry
from app.repositories.store import Store

__all__ = [
    "Article",
    "ArticleRepository",
    "InvalidIdentifierError",
    "NamedArticle",
    "NoAmbientTransactionError",
    "NoRowsAffectedError",
    "NotCreatedError",
    "NotFoundError",
    "RepositoryError",
    "RequestContext",
    "STATEMENTS",
    "StatementPreparationError",
    "StatementRegistry",
    "Store",
    "UnderlyingError",
    "attach",
    "new_article",
    "parse_uuid",
    "retrieve",
]
