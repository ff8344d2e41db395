"""Domain errors raised from services and mapped to HTTP responses in main.py."""


class GigItError(Exception):
    """Base class for marketplace domain errors."""

    code = "gigit_error"


class InvalidStatusTransition(GigItError):
    """An application or contract was moved to a status its current one does not allow."""

    code = "invalid_status_transition"

    def __init__(self, entity: str, current: str, requested: str):
        self.entity = entity
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move {entity} from {current} to {requested}")


class StorageNotConfigured(GigItError):
    code = "storage_not_configured"
