"""
Base domain exceptions.
"""


class GlaneurException(Exception):
    """Base exception for all Glaneur domain errors."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class EntityNotFoundError(GlaneurException):
    """Raised when entity is not found in repository."""

    def __init__(self, entity_type: str, entity_id: str):
        message = f"{entity_type} with ID {entity_id} not found"
        super().__init__(message, code="NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(GlaneurException):
    """Raised when caller input fails validation."""

    def __init__(self, field: str, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field
        self.reason = reason


class DuplicateEntityError(GlaneurException):
    """Raised when a unique field collides with an existing row."""

    def __init__(self, entity_type: str, field: str, value: str):
        message = f"{entity_type} with {field}={value} already exists"
        super().__init__(message, code="CONFLICT")
        self.entity_type = entity_type
        self.field = field
        self.value = value
