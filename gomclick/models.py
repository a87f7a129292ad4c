"""Records that relate users to books, plus the community board entries.

Loans and reservations are keyed by (user, book) so several viewers can hold
different relationships with the same title at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class Role(str, Enum):
    EMPLOYEE = "EMP"
    ADMIN = "ADM"
    SYSTEM_ADMIN = "SYS"


ADMIN_ROLES = (Role.ADMIN, Role.SYSTEM_ADMIN)


class ViewerState(str, Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED_BY_OTHER = "RESERVED_BY_OTHER"
    RESERVED_BY_VIEWER = "RESERVED_BY_VIEWER"
    BORROWED_BY_VIEWER = "BORROWED_BY_VIEWER"
    BORROWED_BY_OTHER = "BORROWED_BY_OTHER"
    NOT_RESERVABLE = "NOT_RESERVABLE"


class ReservationState(str, Enum):
    QUEUED = "QUEUED"
    OFFERED = "OFFERED"
    CONVERTED_TO_LOAN = "CONVERTED_TO_LOAN"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


ACTIVE_RESERVATION_STATES = (ReservationState.QUEUED, ReservationState.OFFERED)


@dataclass
class User:
    id: str
    name: str
    email: str
    role: Role
    department: str = ""
    phone: str = ""
    employee_id: str = ""
    status: str = "active"

    def to_dict(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    @staticmethod
    def from_dict(data: dict) -> "User":
        return User(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            role=Role(data["role"]),
            department=data.get("department", ""),
            phone=data.get("phone", ""),
            employee_id=data.get("employee_id", ""),
            status=data.get("status", "active"),
        )


@dataclass
class Loan:
    """One borrowing of one copy by one user."""
    id: str
    book_id: str
    user_id: str
    borrowed_at: date
    due_at: date
    extensions_used: int = 0
    returned_at: Optional[date] = None
    return_location: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.returned_at is None

    @property
    def has_been_extended(self) -> bool:
        return self.extensions_used > 0

    def rental_status(self, today: date) -> str:
        """Human readable status: rented, overdue or returned."""
        if self.returned_at is not None:
            return "returned"
        return "overdue" if self.due_at < today else "rented"


@dataclass
class Reservation:
    id: str
    book_id: str
    user_id: str
    created_at: datetime
    state: ReservationState = ReservationState.QUEUED
    expires_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_RESERVATION_STATES


@dataclass
class Review:
    id: str
    user_id: str
    user_name: str
    book_id: str
    rating: int
    content: str
    created_at: str
    recommended: bool = False


@dataclass
class MonthlyGoal:
    month: int
    target: int = 0
    current: int = 0


def _empty_months() -> List[MonthlyGoal]:
    return [MonthlyGoal(month=m) for m in range(1, 13)]


@dataclass
class ReadingGoal:
    """A year of reading targets, one entry per month.

    The yearly ``target`` and ``current`` are the sums of the months.
    """
    user_id: str
    year: int
    monthly: List[MonthlyGoal] = field(default_factory=_empty_months)

    @property
    def target(self) -> int:
        return sum(m.target for m in self.monthly)

    @property
    def current(self) -> int:
        return sum(m.current for m in self.monthly)

    def month(self, month: int) -> MonthlyGoal:
        return self.monthly[month - 1]

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "year": self.year,
            "target": self.target,
            "current": self.current,
            "monthly": [asdict(m) for m in self.monthly],
        }


@dataclass
class Announcement:
    id: str
    title: str
    content: str
    category: str
    created_at: str
    created_by: str
    is_pinned: bool = False
    is_popup: bool = False
    popup_end_date: Optional[str] = None
    image_url: Optional[str] = None
    views: int = 0
    updated_at: Optional[str] = None
    updated_by: Optional[str] = None


@dataclass
class InquiryAnswer:
    id: str
    content: str
    created_at: str
    created_by: str
    is_public: bool = True


@dataclass
class Inquiry:
    id: str
    title: str
    content: str
    category: str
    created_at: str
    created_by: str
    is_public: bool = True
    status: str = "pending"  # pending or answered
    updated_at: Optional[str] = None
    answer: Optional[InquiryAnswer] = field(default=None)
