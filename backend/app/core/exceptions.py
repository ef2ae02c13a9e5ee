"""
Error taxonomy for the scheduling subsystem.

Endpoints convert these into HTTP responses at the call site; repositories
never return partial results.
"""


class SchedulingError(Exception):
    """Base exception for scheduling errors."""
    pass


class ValidationError(SchedulingError):
    """Raised when caller input is rejected before any store access."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class NotFoundError(SchedulingError):
    """Raised when an entity is absent at read, update or delete."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class PersistenceError(SchedulingError):
    """Raised when the store fails. The cause is chained, never inspected."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} failed")


class ConflictError(SchedulingError):
    """Raised when an update names a version that is no longer current."""

    def __init__(self, entity: str, entity_id, expected_version: int, current_version: int):
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"{entity} {entity_id} is at version {current_version}, "
            f"not {expected_version}"
        )
