"""Errors raised by the query and statistics services."""


class NewsAdminError(Exception):
    """Base class for service errors surfaced to the views."""


class QueryError(NewsAdminError):
    """The store rejected or failed a query."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AggregateError(QueryError):
    """One of the statistics sub-queries failed, so the whole summary failed."""

    def __init__(self, query: str, message: str):
        super().__init__(f"{query}: {message}")
        self.query = query
