"""Process-local data store.

There is no durable storage: every process starts from the seed data in
``gomclick.fixtures`` and loses its changes on exit. ``initialize_database``
rebuilds the store, which is what the tests use to get a clean slate.
"""

import logging
import threading
from datetime import date
from typing import Dict, List, Optional, Set, Tuple

from gomclick import fixtures
from gomclick.book import Book
from gomclick.models import (
    Announcement,
    Inquiry,
    InquiryAnswer,
    Loan,
    MonthlyGoal,
    ReadingGoal,
    Reservation,
    Review,
    Role,
    User,
)

logger = logging.getLogger(__name__)


class InMemoryStore:
    """All mutable records of one process, guarded by a re-entrant lock."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.books: Dict[str, Book] = {}
        self.users: Dict[str, User] = {}
        self.credentials: Dict[str, Tuple[str, str]] = {}
        self.loans: List[Loan] = []
        self.reservations: List[Reservation] = []
        self.favorites: Dict[str, Set[str]] = {}
        self.reviews: List[Review] = []
        self.reading_goals: Dict[Tuple[str, int], ReadingGoal] = {}
        self.announcements: List[Announcement] = []
        self.inquiries: List[Inquiry] = []
        self._counters: Dict[str, int] = {}

    def next_id(self, prefix: str, width: int = 0) -> str:
        with self.lock:
            self._counters[prefix] = self._counters.get(prefix, 0) + 1
            return prefix + str(self._counters[prefix]).zfill(width)

    def seed(self) -> None:
        """Load every fixture table into the store."""
        with self.lock:
            for data in fixtures.BOOKS:
                book = Book.from_dict(data)
                self.books[book.id] = book

            for data in fixtures.USERS:
                user = User(
                    id=data["id"],
                    name=data["name"],
                    email=data["email"],
                    role=Role(data["role"]),
                    department=data["department"],
                    phone=data["phone"],
                    employee_id=data["employee_id"],
                )
                self.users[user.id] = user
                self.credentials[user.email.lower()] = (data["password"], user.id)

            for data in fixtures.LOANS:
                self.loans.append(Loan(
                    id=data["id"],
                    book_id=data["book_id"],
                    user_id=data["user_id"],
                    borrowed_at=date.fromisoformat(data["borrowed_at"]),
                    due_at=date.fromisoformat(data["due_at"]),
                    extensions_used=data.get("extensions_used", 0),
                    returned_at=_parse_date(data.get("returned_at")),
                    return_location=data.get("return_location"),
                ))

            for user_id, book_ids in fixtures.FAVORITES.items():
                self.favorites[user_id] = set(book_ids)

            self.reviews = [Review(**data) for data in fixtures.REVIEWS]
            for data in fixtures.READING_GOALS:
                goal = ReadingGoal(
                    user_id=data["user_id"],
                    year=data["year"],
                    monthly=[MonthlyGoal(**m) for m in data["monthly"]],
                )
                self.reading_goals[(goal.user_id, goal.year)] = goal

            self.announcements = [Announcement(**data) for data in fixtures.ANNOUNCEMENTS]
            for data in fixtures.INQUIRIES:
                data = dict(data)
                answer = data.pop("answer", None)
                inquiry = Inquiry(**data)
                if answer:
                    inquiry.answer = InquiryAnswer(**answer)
                self.inquiries.append(inquiry)

            # Generated ids continue after the seeded ones
            self._counters = {
                "loan": len(self.loans),
                "r": len(self.reviews),
                "res": 0,
                "ann-": len(self.announcements),
                "inq-": len(self.inquiries),
                "ans-": sum(1 for i in self.inquiries if i.answer),
            }
        logger.info(
            f"Seeded store with {len(self.books)} books, {len(self.users)} users "
            f"and {len(self.loans)} loans"
        )


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


_store: Optional[InMemoryStore] = None


def initialize_database() -> InMemoryStore:
    """Replace the process store with a freshly seeded one."""
    global _store
    store = InMemoryStore()
    store.seed()
    _store = store
    return store


def get_db() -> InMemoryStore:
    """Return the process store, seeding it on first use."""
    if _store is None:
        return initialize_database()
    return _store
