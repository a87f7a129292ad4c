from datetime import date, datetime

import pytest

from gomclick.errors import (
    AlreadyBorrowed,
    BookUnavailable,
    BorrowLimitReached,
    ExtensionNotAllowed,
    NotBorrowedByViewer,
    NotFound,
    NotReservable,
    PermissionDenied,
    ReservationLimitReached,
    ValidationFailed,
)
from gomclick.models import ReservationState, ViewerState


def assert_invariant(lib):
    for book in lib.list_books():
        assert 0 <= book.status.available <= book.status.total


# ------------------------- borrow ------------------------- #
def test_borrow_takes_a_copy_and_sets_due_date(lib, admin):
    book = lib.get_book("book1")
    assert (book.status.total, book.status.available, book.status.borrowed) == (3, 2, 1)

    loan = lib.borrow("book1", admin)

    assert book.status.available == 1
    assert book.status.borrowed == 2
    assert loan.borrowed_at == date(2024, 4, 10)
    assert loan.due_at == date(2024, 4, 24)
    view = lib.view("book1", admin.id).to_dict()
    assert view["borrowedByCurrentUser"] is True
    assert view["borrowDate"] == "2024-04-10"
    assert view["returnDueDate"] == "2024-04-24"
    assert view["state"] == ViewerState.BORROWED_BY_VIEWER.value


def test_borrow_limit_rejects_third_book_without_mutation(lib, employee):
    assert lib.borrowed_count(employee.id) == 2
    book = lib.get_book("book7")
    before = (book.status.available, book.status.borrowed)

    with pytest.raises(BorrowLimitReached) as excinfo:
        lib.borrow("book7", employee)

    assert "2" in excinfo.value.message
    assert (book.status.available, book.status.borrowed) == before
    assert lib.borrowed_count(employee.id) == 2


def test_borrow_same_book_twice_is_rejected(lib, admin):
    lib.borrow("book7", admin)
    with pytest.raises(AlreadyBorrowed):
        lib.borrow("book7", admin)
    assert lib.get_book("book7").status.available == 1


def test_borrow_without_free_copy(lib, admin):
    with pytest.raises(BookUnavailable):
        lib.borrow("book13", admin)
    assert lib.get_book("book13").status.available == 0


def test_unknown_book_redirects_to_list(lib, admin):
    with pytest.raises(NotFound) as excinfo:
        lib.borrow("nope", admin)
    assert excinfo.value.redirect == "/books"


# ------------------------- return ------------------------- #
def test_return_puts_copy_back_and_clears_viewer_flags(lib, employee):
    book = lib.get_book("book1")
    loan = lib.return_book("book1", employee, "본관 1층 데스크")

    assert book.status.available == 3
    assert book.status.borrowed == 1
    assert loan.returned_at == date(2024, 4, 10)
    assert loan.return_location == "본관 1층 데스크"
    view = lib.view("book1", employee.id).to_dict()
    assert view["borrowedByCurrentUser"] is False
    assert view["borrowDate"] is None
    assert view["returnDueDate"] is None
    goal = lib.get_reading_goal(employee.id, 2024)
    assert goal.current == 9
    assert goal.month(4).current == 2


@pytest.mark.parametrize("location", ["", "   ", None])
def test_return_requires_location(lib, employee, location):
    with pytest.raises(ValidationFailed) as excinfo:
        lib.return_book("book1", employee, location)
    assert excinfo.value.field == "return_location"
    assert lib.get_book("book1").status.available == 2
    assert lib.active_loan("book1", employee.id) is not None


def test_return_with_review_updates_rating_and_recommendations(lib, employee):
    lib.return_book("book1", employee, "로비", review={"rating": 4, "content": "다시 읽고 싶어요", "recommended": True})

    book = lib.get_book("book1")
    reviews = lib.reviews_for("book1")
    assert len(reviews) == 3
    assert reviews[0].content == "다시 읽고 싶어요"
    # mean of the stored reviews: 5, 4 and 4
    assert book.rating == 4.3
    assert book.recommendations == 1


def test_rating_is_the_mean_of_reviews(lib, employee):
    lib.add_review("book1", employee, 3, "보통이에요")
    assert lib.get_book("book1").rating == 4.0
    lib.add_review("book8", employee, 2, "어려워요")
    assert lib.get_book("book8").rating == 2.0


def test_return_with_invalid_review_changes_nothing(lib, employee):
    with pytest.raises(ValidationFailed):
        lib.return_book("book1", employee, "로비", review={"rating": 6, "content": "?"})
    with pytest.raises(ValidationFailed):
        lib.return_book("book1", employee, "로비", review={"rating": 5, "content": "  "})
    assert lib.active_loan("book1", employee.id) is not None
    assert len(lib.reviews_for("book1")) == 2


def test_return_of_book_not_held(lib, admin):
    with pytest.raises(NotBorrowedByViewer):
        lib.return_book("book1", admin, "로비")


# ------------------------- extend ------------------------- #
def test_extend_only_once(lib, admin):
    lib.borrow("book1", admin)
    loan = lib.extend("book1", admin)
    assert loan.due_at == date(2024, 5, 1)
    assert lib.view("book1", admin.id).to_dict()["hasBeenExtended"] is True
    assert lib.view("book1", admin.id).to_dict()["isExtendable"] is False

    with pytest.raises(ExtensionNotAllowed):
        lib.extend("book1", admin)
    assert loan.due_at == date(2024, 5, 1)
    assert loan.extensions_used == 1


def test_extend_respects_book_flag(lib, admin):
    lib.borrow("book6", admin)
    with pytest.raises(ExtensionNotAllowed):
        lib.extend("book6", admin)


def test_seeded_extended_loan_cannot_extend_again(lib, employee):
    loan = lib.active_loan("book2", employee.id)
    with pytest.raises(ExtensionNotAllowed):
        lib.extend("book2", employee)
    assert loan.due_at == date(2024, 4, 10)


# ------------------------- reservations ------------------------- #
def test_non_reservable_book_cannot_be_reserved(lib, admin):
    assert lib.viewer_state("book3", admin.id) == ViewerState.NOT_RESERVABLE
    with pytest.raises(NotReservable):
        lib.toggle_reservation("book3", admin)
    assert lib.reservation_queue("book3") == []
    assert lib.viewer_state("book3", admin.id) == ViewerState.NOT_RESERVABLE


def test_available_book_cannot_be_reserved(lib, admin):
    with pytest.raises(NotReservable):
        lib.toggle_reservation("book7", admin)


def test_reserve_and_cancel(lib, admin, employee):
    reservation = lib.toggle_reservation("book13", admin)
    assert reservation.state == ReservationState.QUEUED
    assert lib.viewer_state("book13", admin.id) == ViewerState.RESERVED_BY_VIEWER
    assert lib.viewer_state("book13", employee.id) == ViewerState.RESERVED_BY_OTHER
    assert lib.status_label("book13") == "예약중"

    cancelled = lib.toggle_reservation("book13", admin)
    assert cancelled is reservation
    assert cancelled.state == ReservationState.CANCELLED
    assert lib.status_label("book13") == "대여중"
    assert lib.viewer_state("book13", employee.id) == ViewerState.BORROWED_BY_OTHER


def test_reservation_limit(lib, admin):
    assert lib.reservation_count(admin.id) == 0
    lib.toggle_reservation("book13", admin)
    assert lib.reservation_count(admin.id) == 1

    with pytest.raises(ReservationLimitReached) as excinfo:
        lib.toggle_reservation("book4", admin)
    assert "1권" in excinfo.value.message
    assert lib.reservation_queue("book4") == []

    # cancelling frees the slot
    lib.toggle_reservation("book13", admin)
    assert lib.reservation_count(admin.id) == 0
    reservation = lib.toggle_reservation("book4", admin)
    assert reservation.state == ReservationState.QUEUED
    assert lib.reservation_count(admin.id) == 1


def test_returned_copy_is_offered_to_head_of_queue(lib, store, employee, admin):
    other = store.users["u3"]
    first = lib.toggle_reservation("book2", admin)
    second = lib.toggle_reservation("book2", other)

    lib.return_book("book2", employee, "로비")

    assert first.state == ReservationState.OFFERED
    assert first.expires_at == datetime(2024, 4, 12, 9, 0, 0)
    assert second.state == ReservationState.QUEUED
    assert lib.viewer_state("book2", admin.id) == ViewerState.AVAILABLE
    assert lib.viewer_state("book2", other.id) == ViewerState.RESERVED_BY_VIEWER
    with pytest.raises(BookUnavailable):
        lib.borrow("book2", other)

    lib.borrow("book2", admin)
    assert first.state == ReservationState.CONVERTED_TO_LOAN
    assert lib.get_book("book2").status.available == 0
    assert_invariant(lib)


def test_expired_offer_moves_to_next_in_line(lib, store, clock, employee, admin):
    other = store.users["u3"]
    first = lib.toggle_reservation("book2", admin)
    second = lib.toggle_reservation("book2", other)
    lib.return_book("book2", employee, "로비")

    clock.advance(hours=49)
    expired = lib.expire_offers()

    assert expired == [first]
    assert first.state == ReservationState.EXPIRED
    assert second.state == ReservationState.OFFERED
    assert lib.viewer_state("book2", admin.id) == ViewerState.RESERVED_BY_OTHER
    lib.borrow("book2", other)
    assert second.state == ReservationState.CONVERTED_TO_LOAN


def test_cancelling_an_offer_passes_it_on(lib, store, employee, admin):
    other = store.users["u3"]
    first = lib.toggle_reservation("book2", admin)
    second = lib.toggle_reservation("book2", other)
    lib.return_book("book2", employee, "로비")

    lib.toggle_reservation("book2", admin)

    assert first.state == ReservationState.CANCELLED
    assert second.state == ReservationState.OFFERED


# ------------------------- favorites, reviews, goals ------------------------- #
def test_toggle_favorite(lib, employee):
    assert "book1" in lib.favorites(employee.id)
    assert lib.toggle_favorite("book1", employee) is False
    assert "book1" not in lib.favorites(employee.id)
    assert lib.toggle_favorite("book1", employee) is True
    assert lib.view("book1", employee.id).is_favorite


def test_favorites_are_read_under_the_store_lock(lib, store, monkeypatch):
    class CountingLock:
        def __init__(self, inner):
            self.inner = inner
            self.entered = 0

        def __enter__(self):
            self.entered += 1
            return self.inner.__enter__()

        def __exit__(self, *exc):
            return self.inner.__exit__(*exc)

    lock = CountingLock(store.lock)
    monkeypatch.setattr(store, "lock", lock)

    favorites = lib.favorites("u1")
    assert lock.entered == 1
    favorites.add("book16")
    assert "book16" not in lib.favorites("u1")


def test_add_review_validates(lib, employee):
    with pytest.raises(ValidationFailed):
        lib.add_review("book9", employee, 0, "별로")
    with pytest.raises(ValidationFailed):
        lib.add_review("book9", employee, 5, "")
    review = lib.add_review("book9", employee, 5, "<b>명작</b>")
    assert review.content == "명작"
    assert review.user_name == "홍길동"


def test_reading_goal_owner_only(lib, employee, admin):
    with pytest.raises(PermissionDenied):
        lib.set_reading_goal(admin, employee.id, 2024, {1: 3})
    with pytest.raises(PermissionDenied):
        lib.delete_reading_goal(admin, employee.id, 2024)
    assert lib.get_reading_goal(employee.id, 2024).target == 24


def test_reading_goal_names_every_invalid_month(lib, employee):
    with pytest.raises(ValidationFailed) as excinfo:
        lib.set_reading_goal(employee, employee.id, 2024, {3: -1, 5: "abc", 13: 1, 6: 4})
    assert excinfo.value.field == "monthly"
    assert "3월, 5월, 13월" in excinfo.value.message
    # nothing is applied when one month is bad
    assert lib.get_reading_goal(employee.id, 2024).month(6).target == 2


def test_reading_goal_monthly_targets_sum_to_the_year(lib, employee):
    goal = lib.set_reading_goal(employee, employee.id, 2024, {1: 5, "2": "3"})
    assert goal.month(1).target == 5
    assert goal.month(2).target == 3
    assert goal.month(3).target == 2
    assert (goal.target, goal.current) == (28, 8)

    fresh = lib.set_reading_goal(employee, employee.id, 2025, {12: 1})
    assert len(fresh.monthly) == 12
    assert (fresh.target, fresh.current) == (1, 0)


def test_reading_goal_delete_resets(lib, employee):
    goal = lib.get_reading_goal(employee.id, 2024)
    assert lib.delete_reading_goal(employee, employee.id, 2024) is True
    assert lib.get_reading_goal(employee.id, 2024) is None
    assert (goal.target, goal.current) == (0, 0)
    assert lib.delete_reading_goal(employee, employee.id, 2024) is False

    # a return without a goal for the year is not counted anywhere
    lib.return_book("book1", employee, "로비")
    assert lib.get_reading_goal(employee.id, 2024) is None


# ------------------------- history & dashboard ------------------------- #
def test_rental_history_newest_first(lib, employee):
    rows = lib.rental_history(employee.id)
    assert [r["id"] for r in rows] == ["loan1", "loan2", "loan4"]
    assert [r["status"] for r in rows] == ["rented", "rented", "returned"]

    returned = lib.rental_history(employee.id, status="반납완료")
    assert [r["book_id"] for r in returned] == ["book9"]
    assert [r["id"] for r in lib.rental_history(query="데미안")] == ["loan4"]
    assert [r["id"] for r in lib.rental_history(query="김철수")] == ["loan3"]
    ranged = lib.rental_history(date_from="2024-03-01", date_to="2024-03-31")
    assert {r["id"] for r in ranged} == {"loan2", "loan3"}


def test_rental_history_marks_overdue(lib, clock, employee):
    clock.advance(days=10)
    rows = lib.rental_history(employee.id, status="overdue")
    assert {r["id"] for r in rows} == {"loan1", "loan2"}


def test_dashboard_numbers(lib):
    stats = lib.dashboard()
    assert stats["total_titles"] == 16
    assert stats["total_copies"] == 39
    assert stats["copies_on_loan"] == 20
    assert stats["loan_rate"] == 51.3
    assert stats["registered_users"] == 5
    assert stats["active_borrowers"] == 2
    assert stats["overdue_loans"] == 1
    assert stats["pending_inquiries"] == 2
    assert stats["categories"]["기타"] == 3
    assert stats["monthly"] == [
        {"month": "2024-01", "borrowed": 1, "returned": 1},
        {"month": "2024-02", "borrowed": 1, "returned": 1},
        {"month": "2024-03", "borrowed": 2, "returned": 0},
        {"month": "2024-04", "borrowed": 1, "returned": 0},
    ]
