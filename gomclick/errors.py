"""Exception hierarchy shared by the lending engine, boards and session gate.

Every error carries a machine readable ``code`` and a user-facing
``message``. Domain code raises these before touching any state, so a caught
error always means the operation was a no-op. The HTTP layer turns them into
status codes; the CLI prints ``message`` and exits non-zero.
"""

from __future__ import annotations


class BookshelfError(Exception):
    code = "error"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationFailed(BookshelfError, ValueError):
    """A required field is missing or malformed."""

    code = "validation_failed"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class BusinessRuleViolation(BookshelfError):
    code = "rule_violation"


class BorrowLimitReached(BusinessRuleViolation):
    code = "borrow_limit_reached"

    def __init__(self, limit: int) -> None:
        super().__init__(f"최대 {limit}권까지 대여할 수 있습니다!")
        self.limit = limit


class ReservationLimitReached(BusinessRuleViolation):
    code = "reservation_limit_reached"

    def __init__(self, limit: int) -> None:
        super().__init__(f"최대 {limit}권까지 예약할 수 있습니다!")
        self.limit = limit


class BookUnavailable(BusinessRuleViolation):
    code = "book_unavailable"


class AlreadyBorrowed(BusinessRuleViolation):
    code = "already_borrowed"


class NotBorrowedByViewer(BusinessRuleViolation):
    code = "not_borrowed"


class ExtensionNotAllowed(BusinessRuleViolation):
    code = "extension_not_allowed"


class NotReservable(BusinessRuleViolation):
    code = "not_reservable"


class InquiryLocked(BusinessRuleViolation):
    code = "inquiry_locked"


class InvalidCredentials(BookshelfError):
    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__("이메일 또는 비밀번호를 확인해 주세요.")


class PermissionDenied(BookshelfError):
    code = "permission_denied"


class NotFound(BookshelfError, LookupError):
    code = "not_found"

    def __init__(self, resource: str, resource_id: str, redirect: str) -> None:
        super().__init__(f"{resource} '{resource_id}' not found")
        self.resource = resource
        self.resource_id = resource_id
        self.redirect = redirect
