import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from gomclick.book import ALL, Book, status_label
from gomclick.config import settings
from gomclick.database import InMemoryStore, get_db
from gomclick.errors import (
    AlreadyBorrowed,
    BookshelfError,
    BookUnavailable,
    BorrowLimitReached,
    ExtensionNotAllowed,
    NotBorrowedByViewer,
    NotFound,
    NotReservable,
    PermissionDenied,
    ReservationLimitReached,
)
from gomclick.models import (
    Loan,
    ReadingGoal,
    Reservation,
    ReservationState,
    Review,
    User,
    ViewerState,
)
from gomclick.utils.validators import DateValidator, NumberValidator, TextValidator

logger = logging.getLogger(__name__)

RENTAL_STATUSES = {
    "rented": "rented",
    "대여중": "rented",
    "returned": "returned",
    "반납완료": "returned",
    "overdue": "overdue",
    "연체": "overdue",
}


@dataclass
class BookView:
    """A book as one viewer sees it, with the per-viewer flags filled in."""
    book: Book
    state: ViewerState
    reserved: bool
    is_favorite: bool = False
    loan: Optional[Loan] = None
    reservation: Optional[Reservation] = None
    max_extensions: int = 1

    @property
    def status_label(self) -> str:
        return status_label(self.book, self.reserved)

    @property
    def can_extend(self) -> bool:
        if self.loan is None:
            return self.book.is_extendable
        return self.book.is_extendable and self.loan.extensions_used < self.max_extensions

    def to_dict(self) -> Dict[str, Any]:
        data = self.book.to_dict(reserved=self.reserved)
        loan = self.loan
        data.update({
            "borrowedByCurrentUser": loan is not None,
            "borrowDate": loan.borrowed_at.isoformat() if loan else None,
            "returnDueDate": loan.due_at.isoformat() if loan else None,
            "isExtendable": self.can_extend,
            "hasBeenExtended": bool(loan and loan.has_been_extended),
            "isFavorite": self.is_favorite,
            "isReservedByCurrentUser": self.reservation is not None,
            "reservationState": self.reservation.state.value if self.reservation else None,
            "offerExpiresAt": (
                self.reservation.expires_at.isoformat()
                if self.reservation and self.reservation.expires_at else None
            ),
            "state": self.state.value,
            "statusLabel": self.status_label,
        })
        return data


class Library:
    """Lending engine over the in-memory store.

    Every mutating operation takes the store lock, settles expired
    reservation offers, runs all of its checks and only then changes state.
    """

    def __init__(self, store: Optional[InMemoryStore] = None,
                 clock: Optional[Callable[[], datetime]] = None) -> None:
        self.store = store if store is not None else get_db()
        self._clock = clock or datetime.now

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self.now().date()

    # ------------------------- Lookups ------------------------- #
    def list_books(self) -> List[Book]:
        return list(self.store.books.values())

    def get_book(self, book_id: str) -> Book:
        book = self.store.books.get(book_id)
        if book is None:
            raise NotFound("book", book_id, redirect="/books")
        return book

    def get_user(self, user_id: str) -> User:
        user = self.store.users.get(user_id)
        if user is None:
            raise NotFound("user", user_id, redirect="/")
        return user

    def active_loan(self, book_id: str, user_id: Optional[str]) -> Optional[Loan]:
        if user_id is None:
            return None
        for loan in self.store.loans:
            if loan.is_active and loan.book_id == book_id and loan.user_id == user_id:
                return loan
        return None

    def active_loans(self, user_id: str) -> List[Loan]:
        return [loan for loan in self.store.loans if loan.is_active and loan.user_id == user_id]

    def borrowed_count(self, user_id: str) -> int:
        return len(self.active_loans(user_id))

    def reservation_queue(self, book_id: str) -> List[Reservation]:
        """Active reservations for a book, oldest first."""
        return [r for r in self.store.reservations if r.book_id == book_id and r.is_active]

    def active_reservation(self, book_id: str, user_id: Optional[str]) -> Optional[Reservation]:
        if user_id is None:
            return None
        for reservation in self.reservation_queue(book_id):
            if reservation.user_id == user_id:
                return reservation
        return None

    def reservation_count(self, user_id: str) -> int:
        return sum(1 for r in self.store.reservations if r.user_id == user_id and r.is_active)

    def is_reserved(self, book_id: str) -> bool:
        return bool(self.reservation_queue(book_id))

    def is_lendable_to(self, book: Book, user_id: Optional[str]) -> bool:
        """True when a shelf copy is free for this user.

        Copies offered to other users stay on the shelf but are held for them.
        """
        held_for_others = sum(
            1 for r in self.reservation_queue(book.id)
            if r.state == ReservationState.OFFERED and r.user_id != user_id
        )
        return book.status.available - held_for_others > 0

    def favorites(self, user_id: Optional[str]) -> Set[str]:
        if user_id is None:
            return set()
        with self.store.lock:
            return set(self.store.favorites.get(user_id, set()))

    def status_label(self, book_id: str) -> str:
        book = self.get_book(book_id)
        return status_label(book, self.is_reserved(book_id))

    # ------------------------- Per-viewer state ------------------------- #
    def viewer_state(self, book_id: str, user_id: Optional[str] = None) -> ViewerState:
        book = self.get_book(book_id)
        if self.active_loan(book_id, user_id):
            return ViewerState.BORROWED_BY_VIEWER
        if self.is_lendable_to(book, user_id):
            return ViewerState.AVAILABLE
        if self.active_reservation(book_id, user_id):
            return ViewerState.RESERVED_BY_VIEWER
        if not book.is_reservable:
            return ViewerState.NOT_RESERVABLE
        if self.is_reserved(book_id):
            return ViewerState.RESERVED_BY_OTHER
        return ViewerState.BORROWED_BY_OTHER

    def view(self, book_id: str, user_id: Optional[str] = None) -> BookView:
        book = self.get_book(book_id)
        return BookView(
            book=book,
            state=self.viewer_state(book_id, user_id),
            reserved=self.is_reserved(book_id),
            is_favorite=book_id in self.favorites(user_id),
            loan=self.active_loan(book_id, user_id),
            reservation=self.active_reservation(book_id, user_id),
            max_extensions=settings.max_extension_count,
        )

    def views(self, user_id: Optional[str] = None, books: Optional[List[Book]] = None) -> List[BookView]:
        books = self.list_books() if books is None else books
        return [self.view(book.id, user_id) for book in books]

    def reserved_ids(self) -> Set[str]:
        return {r.book_id for r in self.store.reservations if r.is_active}

    # ------------------------- Lending ------------------------- #
    def borrow(self, book_id: str, viewer: User) -> Loan:
        with self.store.lock:
            self.expire_offers()
            book = self.get_book(book_id)
            if self.active_loan(book_id, viewer.id):
                raise _refused(AlreadyBorrowed("이미 대여 중인 도서입니다."))
            if self.borrowed_count(viewer.id) >= settings.max_borrow_limit:
                raise _refused(BorrowLimitReached(settings.max_borrow_limit))
            if not self.is_lendable_to(book, viewer.id):
                raise _refused(BookUnavailable("대여 가능한 재고가 없습니다."))

            today = self.today()
            book.status.take_copy()
            loan = Loan(
                id=self.store.next_id("loan"),
                book_id=book.id,
                user_id=viewer.id,
                borrowed_at=today,
                due_at=today + timedelta(days=settings.borrow_days),
            )
            self.store.loans.append(loan)

            reservation = self.active_reservation(book_id, viewer.id)
            if reservation:
                reservation.state = ReservationState.CONVERTED_TO_LOAN

        logger.info(f"{viewer.id} borrowed {book.id}, due {loan.due_at.isoformat()}")
        return loan

    def return_book(self, book_id: str, viewer: User, return_location: Optional[str],
                    review: Optional[Dict[str, Any]] = None) -> Loan:
        """Close the viewer's loan and put the copy back on the shelf.

        ``review`` is an optional mapping with ``rating``, ``content`` and
        ``recommended`` written from the return dialog.
        """
        with self.store.lock:
            self.expire_offers()
            book = self.get_book(book_id)
            loan = self.active_loan(book_id, viewer.id)
            if loan is None:
                raise _refused(NotBorrowedByViewer("대여 중인 도서가 아닙니다."))
            location = TextValidator.require("return_location", return_location, "반납 위치")
            if review is not None:
                rating = NumberValidator.require_rating(review.get("rating"))
                content = TextValidator.require("content", review.get("content"), "리뷰 내용")

            today = self.today()
            book.status.put_back_copy()
            loan.returned_at = today
            loan.return_location = location
            if review is not None:
                self._attach_review(book, viewer, rating, content, bool(review.get("recommended")))
            self._count_towards_goal(viewer.id, today)
            self._promote_queue(book)

        logger.info(f"{viewer.id} returned {book.id} at {location}")
        return loan

    def extend(self, book_id: str, viewer: User) -> Loan:
        with self.store.lock:
            self.expire_offers()
            book = self.get_book(book_id)
            loan = self.active_loan(book_id, viewer.id)
            if loan is None:
                raise _refused(NotBorrowedByViewer("대여 중인 도서가 아닙니다."))
            if not book.is_extendable:
                raise _refused(ExtensionNotAllowed("연장할 수 없는 도서입니다."))
            if loan.extensions_used >= settings.max_extension_count:
                raise _refused(ExtensionNotAllowed(
                    f"이미 연장한 도서입니다. 연장은 {settings.max_extension_count}회만 가능합니다."
                ))
            loan.due_at = loan.due_at + timedelta(days=settings.extension_days)
            loan.extensions_used += 1

        logger.info(f"{viewer.id} extended {book.id} until {loan.due_at.isoformat()}")
        return loan

    def toggle_reservation(self, book_id: str, viewer: User) -> Reservation:
        """Cancel the viewer's reservation if there is one, otherwise join the queue.

        Returns the reservation that was created or cancelled.
        """
        with self.store.lock:
            self.expire_offers()
            book = self.get_book(book_id)
            existing = self.active_reservation(book_id, viewer.id)
            if existing:
                was_offered = existing.state == ReservationState.OFFERED
                existing.state = ReservationState.CANCELLED
                existing.expires_at = None
                if was_offered:
                    self._promote_queue(book)
                logger.info(f"{viewer.id} cancelled reservation {existing.id} on {book.id}")
                return existing

            if not book.is_reservable:
                raise _refused(NotReservable("예약할 수 없는 도서입니다."))
            if self.active_loan(book_id, viewer.id):
                raise _refused(AlreadyBorrowed("이미 대여 중인 도서입니다."))
            if self.is_lendable_to(book, viewer.id):
                raise _refused(NotReservable("대여 가능한 도서는 예약할 수 없습니다. 바로 대여해 주세요."))
            if self.reservation_count(viewer.id) >= settings.max_reservation_limit:
                raise _refused(ReservationLimitReached(settings.max_reservation_limit))

            reservation = Reservation(
                id=self.store.next_id("res"),
                book_id=book.id,
                user_id=viewer.id,
                created_at=self.now(),
            )
            self.store.reservations.append(reservation)

        logger.info(f"{viewer.id} reserved {book.id} ({reservation.id})")
        return reservation

    def expire_offers(self, now: Optional[datetime] = None) -> List[Reservation]:
        """Expire offers past their deadline and hand the copies to the next in line."""
        now = now or self.now()
        expired = []
        with self.store.lock:
            for reservation in self.store.reservations:
                if (reservation.state == ReservationState.OFFERED
                        and reservation.expires_at is not None
                        and reservation.expires_at <= now):
                    reservation.state = ReservationState.EXPIRED
                    expired.append(reservation)
                    logger.info(f"Offer {reservation.id} on {reservation.book_id} expired")
            for book_id in {r.book_id for r in expired}:
                self._promote_queue(self.get_book(book_id), now)
        return expired

    def _promote_queue(self, book: Book, now: Optional[datetime] = None) -> None:
        # One offer per free shelf copy, in arrival order
        now = now or self.now()
        queue = self.reservation_queue(book.id)
        offered = sum(1 for r in queue if r.state == ReservationState.OFFERED)
        for reservation in queue:
            if offered >= book.status.available:
                break
            if reservation.state == ReservationState.QUEUED:
                reservation.state = ReservationState.OFFERED
                reservation.expires_at = now + timedelta(hours=settings.reservation_offer_hours)
                offered += 1
                logger.info(
                    f"Offered {book.id} to {reservation.user_id} until {reservation.expires_at.isoformat()}"
                )

    # ------------------------- Favorites & reviews ------------------------- #
    def toggle_favorite(self, book_id: str, viewer: User) -> bool:
        """Flip the favorite mark and return the new value."""
        with self.store.lock:
            self.get_book(book_id)
            marks = self.store.favorites.setdefault(viewer.id, set())
            if book_id in marks:
                marks.discard(book_id)
                return False
            marks.add(book_id)
            return True

    def add_review(self, book_id: str, viewer: User, rating: int, content: str,
                   recommended: bool = False) -> Review:
        with self.store.lock:
            book = self.get_book(book_id)
            rating = NumberValidator.require_rating(rating)
            content = TextValidator.require("content", content, "리뷰 내용")
            return self._attach_review(book, viewer, rating, content, recommended)

    def reviews_for(self, book_id: str) -> List[Review]:
        self.get_book(book_id)
        reviews = [r for r in self.store.reviews if r.book_id == book_id]
        return sorted(reviews, key=lambda r: r.created_at, reverse=True)

    def _attach_review(self, book: Book, viewer: User, rating: int, content: str,
                       recommended: bool) -> Review:
        review = Review(
            id=self.store.next_id("r"),
            user_id=viewer.id,
            user_name=viewer.name,
            book_id=book.id,
            rating=rating,
            content=content,
            created_at=self.now().isoformat(timespec="seconds"),
            recommended=recommended,
        )
        self.store.reviews.append(review)
        ratings = [r.rating for r in self.store.reviews if r.book_id == book.id]
        book.rating = round(sum(ratings) / len(ratings), 1)
        if recommended:
            book.recommendations = (book.recommendations or 0) + 1
        logger.info(f"{viewer.id} reviewed {book.id} with {rating} stars")
        return review

    # ------------------------- Reading goals ------------------------- #
    def get_reading_goal(self, user_id: str, year: int) -> Optional[ReadingGoal]:
        return self.store.reading_goals.get((user_id, year))

    def set_reading_goal(self, viewer: User, user_id: str, year: int,
                         monthly_targets: Mapping[Any, Any]) -> ReadingGoal:
        """Set per-month targets, e.g. ``{1: 2, 2: 3}``; months not given keep their value."""
        if viewer.id != user_id:
            raise _refused(PermissionDenied("본인의 독서 목표만 수정할 수 있습니다."))
        targets = NumberValidator.require_monthly_targets(monthly_targets)
        with self.store.lock:
            goal = self.store.reading_goals.get((user_id, year))
            if goal is None:
                goal = ReadingGoal(user_id=user_id, year=year)
                self.store.reading_goals[(user_id, year)] = goal
            for month, target in targets.items():
                goal.month(month).target = target
        logger.info(f"{user_id} set reading goal {year}: {goal.target}")
        return goal

    def delete_reading_goal(self, viewer: User, user_id: str, year: int) -> bool:
        if viewer.id != user_id:
            raise _refused(PermissionDenied("본인의 독서 목표만 삭제할 수 있습니다."))
        with self.store.lock:
            goal = self.store.reading_goals.pop((user_id, year), None)
            if goal is None:
                return False
            for entry in goal.monthly:
                entry.target = entry.current = 0
        logger.info(f"{user_id} deleted reading goal {year}")
        return True

    def _count_towards_goal(self, user_id: str, day: date) -> None:
        goal = self.store.reading_goals.get((user_id, day.year))
        if goal is not None:
            goal.month(day.month).current += 1

    # ------------------------- History & dashboard ------------------------- #
    def rental_history(self, user_id: Optional[str] = None, query: str = "", status: str = ALL,
                       category: str = ALL, date_from=None, date_to=None) -> List[Dict[str, Any]]:
        """Loan records, newest first, filtered the way the rental pages filter them."""
        today = self.today()
        start = DateValidator.parse("date_from", date_from)
        end = DateValidator.parse("date_to", date_to)
        wanted = RENTAL_STATUSES.get(status) if status and status not in (ALL, "all") else None
        needle = (query or "").strip().lower()

        rows = []
        for loan in self.store.loans:
            if user_id is not None and loan.user_id != user_id:
                continue
            book = self.store.books.get(loan.book_id)
            user = self.store.users.get(loan.user_id)
            if book is None:
                continue
            row_status = loan.rental_status(today)
            if wanted and row_status != wanted:
                continue
            if category and category != ALL and book.category != category:
                continue
            if start and loan.borrowed_at < start:
                continue
            if end and loan.borrowed_at > end:
                continue
            if needle:
                haystack = " ".join([book.title, book.author, user.name if user else ""]).lower()
                if needle not in haystack:
                    continue
            rows.append({
                "id": loan.id,
                "book_id": book.id,
                "book_title": book.title,
                "author": book.author,
                "category": book.category,
                "user_id": loan.user_id,
                "user_name": user.name if user else None,
                "department": user.department if user else None,
                "borrow_date": loan.borrowed_at.isoformat(),
                "due_date": loan.due_at.isoformat(),
                "return_date": loan.returned_at.isoformat() if loan.returned_at else None,
                "return_location": loan.return_location,
                "extended": loan.has_been_extended,
                "status": row_status,
            })
        rows.sort(key=lambda row: (row["borrow_date"], row["id"]), reverse=True)
        return rows

    def dashboard(self) -> Dict[str, Any]:
        """Headline numbers for the admin dashboard."""
        today = self.today()
        books = self.list_books()
        total_copies = sum(b.status.total for b in books)
        on_loan = sum(b.status.on_loan for b in books)
        active = [loan for loan in self.store.loans if loan.is_active]

        monthly: Dict[str, Counter] = {}
        for loan in self.store.loans:
            monthly.setdefault(loan.borrowed_at.strftime("%Y-%m"), Counter())["borrowed"] += 1
            if loan.returned_at:
                monthly.setdefault(loan.returned_at.strftime("%Y-%m"), Counter())["returned"] += 1

        return {
            "total_titles": len(books),
            "total_copies": total_copies,
            "copies_on_loan": on_loan,
            "loan_rate": round(on_loan / total_copies * 100, 1) if total_copies else 0.0,
            "registered_users": len(self.store.users),
            "active_borrowers": len({loan.user_id for loan in active}),
            "overdue_loans": sum(1 for loan in active if loan.rental_status(today) == "overdue"),
            "active_reservations": sum(1 for r in self.store.reservations if r.is_active),
            "pending_inquiries": sum(1 for i in self.store.inquiries if i.status == "pending"),
            "categories": dict(Counter(b.category for b in books)),
            "monthly": [
                {"month": month, "borrowed": counts["borrowed"], "returned": counts["returned"]}
                for month, counts in sorted(monthly.items())
            ],
        }


def _refused(error: BookshelfError) -> BookshelfError:
    logger.warning(f"Refused ({error.code}): {error.message}")
    return error
