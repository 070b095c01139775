# clinisync/common/errors.py
"""Error kinds raised by the services and mapped to HTTP codes by the controllers."""

from fastapi import status


class DomainError(ValueError):
    """Base class for structured, user-visible failures."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Referenced entity id does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(DomainError):
    """Authenticated but not allowed to see or change the target."""
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(DomainError):
    """Uniqueness violation."""
    status_code = status.HTTP_409_CONFLICT


class InvalidRoleError(DomainError):
    """Role switch target is not one of the user's roles."""
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationFailedError(DomainError):
    status_code = 422


class FileRejectedError(ValidationFailedError):
    """Upload refused by the file storage (type or size)."""
