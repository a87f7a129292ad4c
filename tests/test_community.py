from datetime import date, datetime

import pytest

from gomclick.community import AnnouncementBoard, InquiryBoard, to_dict
from gomclick.errors import InquiryLocked, NotFound, PermissionDenied, ValidationFailed

NOW = datetime(2025, 4, 12, 10, 0, 0)


@pytest.fixture
def announcements(store):
    return AnnouncementBoard(store, clock=lambda: NOW)


@pytest.fixture
def inquiries(store):
    return InquiryBoard(store, clock=lambda: NOW)


# ------------------------- announcements ------------------------- #
def test_announcements_pinned_first_then_newest(announcements):
    assert [a.id for a in announcements.list()] == ["ann-002", "ann-001", "ann-003", "ann-004", "ann-005"]


def test_announcement_search_and_category(announcements):
    assert [a.id for a in announcements.list(category="일반공지")] == ["ann-001", "ann-005"]
    assert [a.id for a in announcements.list(query="점검")] == ["ann-003"]
    assert [a.id for a in announcements.list(category="전체")] == [a.id for a in announcements.list()]


def test_reading_an_announcement_counts_a_view(announcements):
    assert announcements.get("ann-001").views == 235
    assert announcements.get("ann-001", count_view=False).views == 235


def test_missing_announcement_redirects(announcements):
    with pytest.raises(NotFound) as excinfo:
        announcements.get("ann-999")
    assert excinfo.value.redirect == "/announcements"


def test_only_admins_write_announcements(announcements, employee, admin):
    with pytest.raises(PermissionDenied):
        announcements.create(employee, "제목", "내용", "일반공지")
    with pytest.raises(PermissionDenied):
        announcements.delete(employee, "ann-001")

    created = announcements.create(admin, "5월 휴관 안내", "5월 5일은 휴관합니다.", "일반공지")
    assert created.id == "ann-006"
    assert created.created_at == "2025-04-12T10:00:00"
    assert created.created_by == "a1"
    assert to_dict(created)["views"] == 0


@pytest.mark.parametrize(
    "title,content,category,field",
    [
        ("", "내용", "일반공지", "title"),
        ("가" * 51, "내용", "일반공지", "title"),
        ("제목", "가" * 1001, "일반공지", "content"),
        ("제목", "내용", "잡담", "category"),
    ],
)
def test_announcement_validation(announcements, admin, title, content, category, field):
    with pytest.raises(ValidationFailed) as excinfo:
        announcements.create(admin, title, content, category)
    assert excinfo.value.field == field
    assert len(announcements.list()) == 5


def test_popup_requires_end_date(announcements, admin):
    with pytest.raises(ValidationFailed) as excinfo:
        announcements.create(admin, "팝업", "내용", "이벤트", is_popup=True)
    assert excinfo.value.field == "popup_end_date"
    popup = announcements.create(admin, "팝업", "내용", "이벤트", is_popup=True, popup_end_date="2025-04-20")
    assert popup.popup_end_date == "2025-04-20"


def test_update_and_delete_announcement(announcements, admin):
    updated = announcements.update(admin, "ann-004", title="봄맞이 이벤트 연장", is_pinned=True)
    assert updated.title == "봄맞이 이벤트 연장"
    assert updated.category == "이벤트"
    assert updated.updated_by == "a1"
    assert announcements.list()[0].id == "ann-004"

    announcements.delete(admin, "ann-004")
    with pytest.raises(NotFound):
        announcements.get("ann-004")


def test_active_popups(announcements):
    assert [a.id for a in announcements.active_popups(date(2025, 4, 12))] == ["ann-001", "ann-003"]
    assert [a.id for a in announcements.active_popups(date(2025, 4, 16))] == ["ann-001"]
    assert announcements.active_popups(date(2025, 6, 1)) == []


# ------------------------- inquiries ------------------------- #
def test_employee_sees_own_and_answered_public_inquiries(inquiries, employee):
    assert [i.id for i in inquiries.list(employee)] == ["inq-005", "inq-003", "inq-001"]


def test_admin_sees_pending_first(inquiries, store, admin):
    store.inquiries[0].status = "pending"  # inq-001, the oldest
    listed = [i.id for i in inquiries.list(admin)]
    assert listed[:3] == ["inq-005", "inq-004", "inq-001"]
    assert len(listed) == 5


def test_hidden_inquiry_looks_missing(inquiries, store):
    other = store.users["u3"]
    with pytest.raises(NotFound) as excinfo:
        inquiries.get(other, "inq-002")
    assert excinfo.value.redirect == "/inquiries"
    assert inquiries.get(store.users["u2"], "inq-002").id == "inq-002"


def test_create_inquiry(inquiries, employee):
    inquiry = inquiries.create(employee, "신간 요청", "<p>도메인 주도 설계</p>", "도서신청", is_public=False)
    assert inquiry.id == "inq-006"
    assert inquiry.status == "pending"
    assert inquiry.content == "도메인 주도 설계"
    with pytest.raises(ValidationFailed):
        inquiries.create(employee, "제목", "내용", "잡담")


def test_only_author_edits_pending_inquiry(inquiries, employee, admin):
    edited = inquiries.update(employee, "inq-005", title="로그인 오류 (해결 요청)")
    assert edited.title == "로그인 오류 (해결 요청)"
    assert edited.updated_at == "2025-04-12T10:00:00"

    with pytest.raises(PermissionDenied):
        inquiries.update(admin, "inq-005", title="관리자 수정")
    with pytest.raises(InquiryLocked):
        inquiries.update(employee, "inq-001", title="이미 답변됨")
    with pytest.raises(InquiryLocked):
        inquiries.delete(employee, "inq-001")


def test_delete_inquiry(inquiries, employee):
    inquiries.delete(employee, "inq-005")
    with pytest.raises(NotFound):
        inquiries.get(employee, "inq-005")


def test_answer_once(inquiries, employee, admin):
    with pytest.raises(PermissionDenied):
        inquiries.answer(employee, "inq-004", "셀프 답변")

    answered = inquiries.answer(admin, "inq-004", "인사부로 방문해 주세요.")
    assert answered.status == "answered"
    assert answered.answer.id == "ans-004"
    assert answered.answer.created_by == "a1"

    with pytest.raises(InquiryLocked):
        inquiries.answer(admin, "inq-004", "두 번째 답변")
