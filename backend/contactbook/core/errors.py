"""
Error taxonomy shared by the services and the HTTP layer.
Each error carries the user-facing message and the status code the API answers with.
"""

from typing import Dict, Optional

from fastapi import status


class ContactBookError(Exception):
    """Base for errors that are shown to the user."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(ContactBookError):
    """Field-level validation failure. `errors` maps field name to message."""

    status_code = 422

    def __init__(self, errors: Dict[str, str], message: str = "Please fix the highlighted fields") -> None:
        self.errors = dict(errors)
        super().__init__(message)


class Unauthenticated(ContactBookError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class InvalidCredentials(ContactBookError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthFlowError(ContactBookError):
    """Auth backend refused an operation (OTP dispatch, sign-out, ...)."""


class OtpVerificationFailed(AuthFlowError):
    pass


class PersistenceError(ContactBookError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class NotFound(PersistenceError):
    status_code = status.HTTP_404_NOT_FOUND


class UploadRejected(ContactBookError):
    """Client-side upload pre-check failed; nothing was sent to storage."""


class SubmissionPending(ContactBookError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__("A previous request is still in progress. Please wait.")


class BackendError(Exception):
    """Raised by gateways when Supabase (or its stand-in) reports an error."""

    def __init__(self, message: str, detail: object = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)
