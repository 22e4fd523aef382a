from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(ServiceError):
    """Referenced entity does not exist. Raised before any permission check."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ForbiddenError(ServiceError):
    """Caller is authenticated but not allowed to act on the target."""

    def __init__(self, message: str = "You are not allowed to perform this action") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class ProfileMissingError(ForbiddenError):
    """A TEACHER or STUDENT user has no matching profile row.

    Surfaces to the client as a plain 403; the service layer logs it as a
    data-integrity problem.
    """

    def __init__(self, role: str, user_id: int) -> None:
        super().__init__("You are not allowed to perform this action")
        self.role = role
        self.user_id = user_id


class InvalidArgumentError(ServiceError):
    """A cross-entity invariant does not hold for the requested change."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(message, status_code)


class DuplicateError(InvalidArgumentError):
    """Unique key already taken (email, assignment, attendance day)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)
