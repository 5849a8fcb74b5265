# Rev 0.1.0
"""Error kinds surfaced by the DAO and the service layer."""
from __future__ import annotations


class ProjectsError(Exception):
    """Base for every error the core raises on purpose."""


class InvalidArgumentError(ProjectsError, ValueError):
    """Missing identifier or out-of-range value; the store was not touched."""


class NotFoundError(ProjectsError, LookupError):
    def __init__(self, entity: str, entity_id) -> None:
        super().__init__(f"{entity} with ID={entity_id} does not exist.")
        self.entity = entity
        self.entity_id = entity_id


class DbError(ProjectsError):
    """
    Any sqlite3 failure during a read or write.
    Raised `from` the original exception; mutating calls have already rolled back.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
