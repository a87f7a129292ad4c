"""Announcement and inquiry boards.

Announcements are written by admins and read by everyone. Inquiries are
written by employees; the author and admins see them, and answered public
ones are visible to all employees.
"""

import logging
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from gomclick.auth import has_role, require_role
from gomclick.database import InMemoryStore, get_db
from gomclick.errors import InquiryLocked, NotFound, PermissionDenied, ValidationFailed
from gomclick.fixtures import ANNOUNCEMENT_CATEGORIES, INQUIRY_CATEGORIES
from gomclick.models import ADMIN_ROLES, Announcement, Inquiry, InquiryAnswer, User
from gomclick.utils.validators import DateValidator, TextValidator

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50
CONTENT_MAX_LENGTH = 1000

PENDING = "pending"
ANSWERED = "answered"


def _passes(value: Optional[str]) -> bool:
    return not value or value in ("all", "전체")


def _require_category(category: Optional[str], allowed: List[str]) -> str:
    if category not in allowed:
        raise ValidationFailed("category", "카테고리를 선택해 주세요.")
    return category


def to_dict(record) -> Dict[str, Any]:
    return asdict(record)


class AnnouncementBoard:

    def __init__(self, store: Optional[InMemoryStore] = None,
                 clock: Optional[Callable[[], datetime]] = None) -> None:
        self.store = store if store is not None else get_db()
        self._clock = clock or datetime.now

    def _stamp(self) -> str:
        return self._clock().isoformat(timespec="seconds")

    def list(self, query: str = "", category: str = "all") -> List[Announcement]:
        """Pinned posts first, then newest first."""
        needle = (query or "").strip().lower()
        found = [
            a for a in self.store.announcements
            if (_passes(category) or a.category == category)
            and (not needle or needle in a.title.lower() or needle in a.content.lower())
        ]
        found.sort(key=lambda a: a.created_at, reverse=True)
        found.sort(key=lambda a: not a.is_pinned)
        return found

    def _find(self, announcement_id: str) -> Announcement:
        for announcement in self.store.announcements:
            if announcement.id == announcement_id:
                return announcement
        raise NotFound("announcement", announcement_id, redirect="/announcements")

    def get(self, announcement_id: str, count_view: bool = True) -> Announcement:
        with self.store.lock:
            announcement = self._find(announcement_id)
            if count_view:
                announcement.views += 1
            return announcement

    def _validated(self, title, content, category, is_popup, popup_end_date) -> Dict[str, Any]:
        fields = {
            "title": TextValidator.require("title", title, "제목", TITLE_MAX_LENGTH),
            "content": TextValidator.require("content", content, "내용", CONTENT_MAX_LENGTH),
            "category": _require_category(category, ANNOUNCEMENT_CATEGORIES),
            "is_popup": bool(is_popup),
            "popup_end_date": None,
        }
        end = DateValidator.parse("popup_end_date", popup_end_date)
        if fields["is_popup"]:
            if end is None:
                raise ValidationFailed("popup_end_date", "팝업 종료일을 선택해 주세요.")
            fields["popup_end_date"] = end.isoformat()
        return fields

    def create(self, viewer: User, title: str, content: str, category: str,
               is_pinned: bool = False, is_popup: bool = False,
               popup_end_date=None, image_url: Optional[str] = None) -> Announcement:
        require_role(viewer, ADMIN_ROLES)
        fields = self._validated(title, content, category, is_popup, popup_end_date)
        with self.store.lock:
            announcement = Announcement(
                id=self.store.next_id("ann-", width=3),
                created_at=self._stamp(),
                created_by=viewer.id,
                is_pinned=bool(is_pinned),
                image_url=image_url or None,
                **fields,
            )
            self.store.announcements.append(announcement)
        logger.info(f"{viewer.id} posted announcement {announcement.id}")
        return announcement

    def update(self, viewer: User, announcement_id: str, **changes: Any) -> Announcement:
        require_role(viewer, ADMIN_ROLES)
        with self.store.lock:
            announcement = self._find(announcement_id)
            merged = {
                key: changes.get(key, getattr(announcement, key))
                for key in ("title", "content", "category", "is_popup", "popup_end_date")
            }
            fields = self._validated(**merged)
            for key, value in fields.items():
                setattr(announcement, key, value)
            if "is_pinned" in changes:
                announcement.is_pinned = bool(changes["is_pinned"])
            if "image_url" in changes:
                announcement.image_url = changes["image_url"] or None
            announcement.updated_at = self._stamp()
            announcement.updated_by = viewer.id
        logger.info(f"{viewer.id} updated announcement {announcement_id}")
        return announcement

    def delete(self, viewer: User, announcement_id: str) -> None:
        require_role(viewer, ADMIN_ROLES)
        with self.store.lock:
            announcement = self._find(announcement_id)
            self.store.announcements.remove(announcement)
        logger.info(f"{viewer.id} deleted announcement {announcement_id}")

    def active_popups(self, today: Optional[date] = None) -> List[Announcement]:
        today = today or self._clock().date()
        return [
            a for a in self.list()
            if a.is_popup and a.popup_end_date and date.fromisoformat(a.popup_end_date) >= today
        ]


class InquiryBoard:

    def __init__(self, store: Optional[InMemoryStore] = None,
                 clock: Optional[Callable[[], datetime]] = None) -> None:
        self.store = store if store is not None else get_db()
        self._clock = clock or datetime.now

    def _stamp(self) -> str:
        return self._clock().isoformat(timespec="seconds")

    @staticmethod
    def can_see(viewer: User, inquiry: Inquiry) -> bool:
        if has_role(viewer, ADMIN_ROLES) or inquiry.created_by == viewer.id:
            return True
        return inquiry.is_public and inquiry.status == ANSWERED

    def list(self, viewer: User, query: str = "", category: str = "all",
             status: str = "all") -> List[Inquiry]:
        needle = (query or "").strip().lower()
        found = [
            i for i in self.store.inquiries
            if self.can_see(viewer, i)
            and (_passes(category) or i.category == category)
            and (_passes(status) or i.status == status)
            and (not needle or needle in i.title.lower() or needle in i.content.lower())
        ]
        found.sort(key=lambda i: i.created_at, reverse=True)
        if has_role(viewer, ADMIN_ROLES):
            found.sort(key=lambda i: i.status != PENDING)
        return found

    def _find(self, inquiry_id: str) -> Inquiry:
        for inquiry in self.store.inquiries:
            if inquiry.id == inquiry_id:
                return inquiry
        raise NotFound("inquiry", inquiry_id, redirect="/inquiries")

    def get(self, viewer: User, inquiry_id: str) -> Inquiry:
        inquiry = self._find(inquiry_id)
        if not self.can_see(viewer, inquiry):
            # hidden inquiries look the same as missing ones
            raise NotFound("inquiry", inquiry_id, redirect="/inquiries")
        return inquiry

    def create(self, viewer: User, title: str, content: str, category: str,
               is_public: bool = True) -> Inquiry:
        title = TextValidator.require("title", title, "제목")
        content = TextValidator.require("content", content, "내용")
        category = _require_category(category, INQUIRY_CATEGORIES)
        with self.store.lock:
            inquiry = Inquiry(
                id=self.store.next_id("inq-", width=3),
                title=title,
                content=content,
                category=category,
                created_at=self._stamp(),
                created_by=viewer.id,
                is_public=bool(is_public),
            )
            self.store.inquiries.append(inquiry)
        logger.info(f"{viewer.id} opened inquiry {inquiry.id}")
        return inquiry

    def _editable(self, viewer: User, inquiry_id: str) -> Inquiry:
        inquiry = self.get(viewer, inquiry_id)
        if inquiry.created_by != viewer.id:
            raise PermissionDenied("작성자만 수정하거나 삭제할 수 있습니다.")
        if inquiry.status != PENDING:
            raise InquiryLocked("답변이 완료된 문의는 수정하거나 삭제할 수 없습니다.")
        return inquiry

    def update(self, viewer: User, inquiry_id: str, title: Optional[str] = None,
               content: Optional[str] = None, category: Optional[str] = None,
               is_public: Optional[bool] = None) -> Inquiry:
        with self.store.lock:
            inquiry = self._editable(viewer, inquiry_id)
            new_title = TextValidator.require("title", inquiry.title if title is None else title, "제목")
            new_content = TextValidator.require(
                "content", inquiry.content if content is None else content, "내용"
            )
            new_category = _require_category(inquiry.category if category is None else category,
                                             INQUIRY_CATEGORIES)
            inquiry.title, inquiry.content, inquiry.category = new_title, new_content, new_category
            if is_public is not None:
                inquiry.is_public = bool(is_public)
            inquiry.updated_at = self._stamp()
        logger.info(f"{viewer.id} edited inquiry {inquiry_id}")
        return inquiry

    def delete(self, viewer: User, inquiry_id: str) -> None:
        with self.store.lock:
            inquiry = self._editable(viewer, inquiry_id)
            self.store.inquiries.remove(inquiry)
        logger.info(f"{viewer.id} deleted inquiry {inquiry_id}")

    def answer(self, viewer: User, inquiry_id: str, content: str, is_public: bool = True) -> Inquiry:
        require_role(viewer, ADMIN_ROLES)
        content = TextValidator.require("content", content, "답변 내용")
        with self.store.lock:
            inquiry = self._find(inquiry_id)
            if inquiry.answer is not None:
                raise InquiryLocked("이미 답변이 등록된 문의입니다.")
            inquiry.answer = InquiryAnswer(
                id=self.store.next_id("ans-", width=3),
                content=content,
                created_at=self._stamp(),
                created_by=viewer.id,
                is_public=bool(is_public),
            )
            inquiry.status = ANSWERED
        logger.info(f"{viewer.id} answered inquiry {inquiry_id}")
        return inquiry
