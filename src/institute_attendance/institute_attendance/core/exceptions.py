class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when an institute touches data it does not own."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class AttendanceError(DomainError):
    """Raised by the attendance marking flow.

    ``code`` is one of the ``ATTENDANCE_*`` constants below so clients can
    branch without parsing the message.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
SESSION_NOT_ACTIVE = "SESSION_NOT_ACTIVE"
QR_EXPIRED = "QR_EXPIRED"
INVALID_QR = "INVALID_QR"
STUDENT_NOT_ENROLLED = "STUDENT_NOT_ENROLLED"
ALREADY_MARKED = "ALREADY_MARKED"
