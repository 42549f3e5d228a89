"""
Error taxonomy for the repository layer.

Every error carries an optional *context* prefix naming the failing
operation and its key, rendered as ``"<context>: <reason>"`` so a caller
can log ``str(exc)`` and know exactly what failed.  Callers branch on the
exception class, never on the message.
"""


class RepositoryError(Exception):
    """Base class for every error raised by the repository layer."""

    reason: str = "repository error"

    def __init__(self, context: str | None = None, reason: str | None = None) -> None:
        self.context = context
        if reason is not None:
            self.reason = reason
        # Constructor arguments stay in args so instances survive pickling.
        super().__init__(context, reason)

    def __str__(self) -> str:
        if self.context:
            return f"{self.context}: {self.reason}"
        return self.reason


class InvalidIdentifierError(RepositoryError, ValueError):
    """An identifier string does not parse as a UUID."""

    reason = "invalid UUID"


class NotFoundError(RepositoryError):
    reason = "the record you are attempting to find or update is not found"


class NotCreatedError(RepositoryError):
    reason = "no new rows were created"


class NoRowsAffectedError(RepositoryError):
    reason = "no rows affected"


class NoAmbientTransactionError(RepositoryError):
    """A transactional operation was called with no transaction in its context."""

    reason = "no transaction in context"


class UnderlyingError(RepositoryError):
    """
    Wraps a driver-level failure (connectivity, constraint violation, bad
    SQL).  The original exception is chained as ``__cause__``.
    """

    def __init__(self, context: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(context, reason=str(cause))
        self.args = (context, cause)


class StatementPreparationError(RepositoryError):
    """A statement was rejected by the database while preparing the registry."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Error preparing statement {operation!r}", reason=str(cause))
        self.args = (operation, cause)
