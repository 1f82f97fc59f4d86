"""
Exceptions for literature_scout.

Construction errors are raised before any network I/O, transport errors wrap
everything that can go wrong talking to E-utilities, and extraction errors
are reserved for payloads that cannot be parsed at all.
"""


class LiteratureScoutError(Exception):
    """Base exception for all literature_scout errors."""

    pass


class BlueprintError(LiteratureScoutError):
    """Raised when an article request cannot be turned into a blueprint."""

    pass


class QueryConstructionError(LiteratureScoutError):
    """Base exception for query construction failures."""

    pass


class EmptyTermsError(QueryConstructionError):
    """Raised when neither a specialty nor any topic is available."""

    pass


class QueryValidationError(QueryConstructionError):
    """Raised when a query fails validation and no fallback is wanted."""

    def __init__(self, query: str, reason: str):
        self.query = query
        self.reason = reason
        super().__init__(f"Invalid query ({reason}): {query[:120]}")


class RateLimitTimeoutError(LiteratureScoutError):
    """Raised when a caller waits too long for a rate limiter slot."""

    def __init__(self, waited_seconds: float, queue_length: int):
        self.waited_seconds = waited_seconds
        self.queue_length = queue_length
        super().__init__(
            f"Rate limit timeout: waited {waited_seconds:.1f}s for a slot "
            f"({queue_length} requests still queued)"
        )


class DataSourceError(LiteratureScoutError):
    """Base exception for data source failures."""

    def __init__(self, source: str, message: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"[{source}] {message}")


class RetrievalError(DataSourceError):
    """Raised when an E-utilities call fails; ``source`` names the endpoint."""

    @property
    def endpoint(self) -> str:
        return self.source


class ExtractionError(LiteratureScoutError):
    """Raised when an EFetch payload cannot be parsed as XML."""

    pass
