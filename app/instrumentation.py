from sqlalchemy import event


class QueryCounter:
    """Running total of SQL statements sent to the driver by one engine."""

    def __init__(self) -> None:
        self.count: int = 0

    def reset(self) -> None:
        self.count = 0


def install_query_counter(engine) -> QueryCounter:
    """
    Register a ``before_cursor_execute`` event listener on *engine* that
    increments the returned counter for every SQL statement.

    Works for both sync and async engines; for an ``AsyncEngine`` the
    listener is attached to its ``sync_engine``.
    """
    counter = QueryCounter()
    sync_engine = getattr(engine, "sync_engine", engine)

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _count_query(conn, cursor, statement, parameters, context, executemany):
        counter.count += 1

    return counter
