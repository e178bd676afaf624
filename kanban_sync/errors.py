"""
Error kinds for the persistence path.

None of these is fatal to an editing session: the in-memory model and the
local cache stay authoritative, persistence is a best-effort overlay.
"""


class KanbanError(Exception):
    """Base class for kanban_sync errors."""
    pass


class StoreUnavailable(KanbanError):
    """The Document Store could not be reached (network / transport failure)."""
    pass


class PersistFailure(KanbanError):
    """A save was rejected or the write itself failed."""
    pass


class MalformedInput(KanbanError):
    """An imported document failed structural validation."""
    pass


class InvalidRequestBody(KanbanError):
    """A save request body is not a structured document."""
    pass
