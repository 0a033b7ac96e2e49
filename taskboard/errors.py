"""Error taxonomy shared by services and routers.

Services raise these; routers translate them into HTTP status codes and the
`{message, data}` envelope. Storage-layer exceptions are wrapped in
`StorageError` before they leave the service layer.
"""


class TaskboardError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskboardError):
    """Missing or invalid caller input."""


class ConflictError(ValidationError):
    """Caller input collides with an existing document (duplicate email)."""


class NotFoundError(TaskboardError):
    """No document with the requested identifier."""


class StorageError(TaskboardError):
    """Storage failure, including aborted atomic units."""


class QueryError(StorageError):
    """A parsed query document that the storage layer cannot execute."""


__all__ = [
    "TaskboardError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "StorageError",
    "QueryError",
]
