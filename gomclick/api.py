import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field

from gomclick.auth import SessionManager, require_role
from gomclick.catalog import Pager, page_info, parse_catalog_params, query_catalog
from gomclick.community import AnnouncementBoard, InquiryBoard, to_dict
from gomclick.config import settings
from gomclick.database import get_db
from gomclick.errors import (
    BookshelfError,
    BusinessRuleViolation,
    InvalidCredentials,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from gomclick.library import Library
from gomclick.models import ADMIN_ROLES, ReadingGoal, User

logger = logging.getLogger(__name__)

sessions = SessionManager()


async def simulate_latency():
    """Hold every response for the configured artificial delay."""
    if settings.simulated_delay_ms > 0:
        await asyncio.sleep(settings.simulated_delay_ms / 1000)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.log_level)
    store = get_db()
    logger.info(f"{settings.app_name} API ready with {len(store.books)} books")
    try:
        yield
    finally:
        sessions.clear()


app = FastAPI(
    title=f"{settings.app_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    dependencies=[Depends(simulate_latency)],
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error mapping ---
def status_for(exc: BookshelfError) -> int:
    if isinstance(exc, ValidationFailed):
        return 422
    if isinstance(exc, BusinessRuleViolation):
        return 409
    if isinstance(exc, InvalidCredentials):
        return 401
    if isinstance(exc, PermissionDenied):
        return 403
    if isinstance(exc, NotFound):
        return 404
    return 400


@app.exception_handler(BookshelfError)
async def bookshelf_error_handler(request: Request, exc: BookshelfError):
    body: Dict[str, Any] = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, NotFound):
        body["redirect"] = exc.redirect
    if isinstance(exc, ValidationFailed):
        body["field"] = exc.field
    return JSONResponse(status_code=status_for(exc), content=body)


# --- Security ---
session_header = APIKeyHeader(name="X-Session-Token", auto_error=False)


def get_optional_user(token: Optional[str] = Security(session_header)) -> Optional[User]:
    return sessions.current_user(token)


def get_current_user(token: Optional[str] = Security(session_header)) -> User:
    """Dependency that resolves the session token to a signed-in user."""
    user = sessions.current_user(token)
    if user is None:
        raise HTTPException(status_code=401, detail="로그인이 필요합니다.")
    return user


def get_admin_user(user: User = Depends(get_current_user)) -> User:
    return require_role(user, ADMIN_ROLES)


def get_library() -> Library:
    return Library(get_db())


def get_announcements() -> AnnouncementBoard:
    return AnnouncementBoard(get_db())


def get_inquiries() -> InquiryBoard:
    return InquiryBoard(get_db())


# --- Models ---
class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    user: Dict[str, Any]


class PageResponse(BaseModel):
    items: List[Dict[str, Any]]
    count: int
    page: int
    page_size: int
    total_pages: int


class ReviewPayload(BaseModel):
    rating: int
    content: str
    recommended: bool = False


class ReturnRequest(BaseModel):
    return_location: str = Field("", description="Where the copy was dropped off")
    review: Optional[ReviewPayload] = None


class ReadingGoalRequest(BaseModel):
    year: int
    # month (1-12) -> target; values are checked per month by the library
    monthly: Dict[int, Any]


class AnnouncementPayload(BaseModel):
    title: str
    content: str
    category: str
    is_pinned: bool = False
    is_popup: bool = False
    popup_end_date: Optional[str] = None
    image_url: Optional[str] = None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    is_pinned: Optional[bool] = None
    is_popup: Optional[bool] = None
    popup_end_date: Optional[str] = None
    image_url: Optional[str] = None


class InquiryPayload(BaseModel):
    title: str
    content: str
    category: str
    is_public: bool = True


class InquiryUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    is_public: Optional[bool] = None


class AnswerPayload(BaseModel):
    content: str
    is_public: bool = True


def _profile(library: Library, user: User) -> Dict[str, Any]:
    data = user.to_dict()
    data["borrowed_count"] = library.borrowed_count(user.id)
    data["borrow_limit"] = settings.max_borrow_limit
    reserved = library.reservation_count(user.id)
    data["reserved_count"] = reserved
    data["reservations_left"] = max(settings.max_reservation_limit - reserved, 0)
    return data


def _paged(items: List[Any], pager: Pager) -> PageResponse:
    page_items, info = pager.slice(items)
    return PageResponse(items=page_items, **info)


# --- Health ---
@app.get("/health")
async def health():
    store = get_db()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_books": len(store.books),
        "environment": settings.environment,
        "version": settings.app_version,
    }


# --- Session ---
@app.post("/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest, library: Library = Depends(get_library)):
    token, user = sessions.login(payload.email, payload.password)
    return LoginResponse(token=token, user=_profile(library, user))


@app.post("/auth/logout")
def logout(token: Optional[str] = Security(session_header)):
    return {"logged_out": sessions.logout(token)}


@app.get("/auth/me")
def me(user: User = Depends(get_current_user), library: Library = Depends(get_library)):
    return _profile(library, user)


# --- Catalog ---
@app.get("/books", response_model=PageResponse)
def list_books(request: Request, user: Optional[User] = Depends(get_optional_user),
               library: Library = Depends(get_library)):
    """Catalog search with the same query parameters as the book list page."""
    try:
        filters, page, per_page, column_sort = parse_catalog_params(request.query_params)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    user_id = user.id if user else None
    if filters.favorite and user is None:
        raise HTTPException(status_code=401, detail="로그인이 필요합니다.")

    items, total = query_catalog(
        library.list_books(), filters, page=page, page_size=per_page,
        favorites=library.favorites(user_id), reserved_ids=library.reserved_ids(),
        column_sort=column_sort,
    )
    return PageResponse(
        items=[v.to_dict() for v in library.views(user_id, items)],
        **page_info(total, page, per_page),
    )


@app.get("/books/{book_id}")
def get_book(book_id: str, user: Optional[User] = Depends(get_optional_user),
             library: Library = Depends(get_library)):
    data = library.view(book_id, user.id if user else None).to_dict()
    data["reviews"] = [to_dict(r) for r in library.reviews_for(book_id)]
    return data


@app.get("/books/{book_id}/reviews")
def list_reviews(book_id: str, library: Library = Depends(get_library)):
    return [to_dict(r) for r in library.reviews_for(book_id)]


@app.post("/books/{book_id}/reviews", status_code=201)
def add_review(book_id: str, payload: ReviewPayload, user: User = Depends(get_current_user),
               library: Library = Depends(get_library)):
    review = library.add_review(book_id, user, payload.rating, payload.content, payload.recommended)
    return to_dict(review)


# --- Lending ---
@app.post("/books/{book_id}/borrow")
def borrow(book_id: str, user: User = Depends(get_current_user), library: Library = Depends(get_library)):
    library.borrow(book_id, user)
    return library.view(book_id, user.id).to_dict()


@app.post("/books/{book_id}/return")
def return_book(book_id: str, payload: ReturnRequest, user: User = Depends(get_current_user),
                library: Library = Depends(get_library)):
    review = payload.review.model_dump() if payload.review else None
    library.return_book(book_id, user, payload.return_location, review=review)
    return library.view(book_id, user.id).to_dict()


@app.post("/books/{book_id}/extend")
def extend(book_id: str, user: User = Depends(get_current_user), library: Library = Depends(get_library)):
    library.extend(book_id, user)
    return library.view(book_id, user.id).to_dict()


@app.post("/books/{book_id}/reservation")
def toggle_reservation(book_id: str, user: User = Depends(get_current_user),
                       library: Library = Depends(get_library)):
    library.toggle_reservation(book_id, user)
    return library.view(book_id, user.id).to_dict()


@app.post("/books/{book_id}/favorite")
def toggle_favorite(book_id: str, user: User = Depends(get_current_user),
                    library: Library = Depends(get_library)):
    library.toggle_favorite(book_id, user)
    return library.view(book_id, user.id).to_dict()


# --- Rentals & reading goals ---
@app.get("/rentals", response_model=PageResponse)
def my_rentals(
    query: str = Query("", description="Title, author or borrower"),
    status: str = Query("전체"),
    category: str = Query("전체"),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, alias="perPage"),
    user: User = Depends(get_current_user),
    library: Library = Depends(get_library),
):
    rows = library.rental_history(user.id, query, status, category, date_from, date_to)
    return _paged(rows, Pager.for_rentals(per_page, page))


@app.get("/me/reading-goal")
def get_reading_goal(year: Optional[int] = None, user: User = Depends(get_current_user),
                     library: Library = Depends(get_library)):
    year = year or library.today().year
    goal = library.get_reading_goal(user.id, year)
    if goal is None:
        goal = ReadingGoal(user_id=user.id, year=year)
    return goal.to_dict()


@app.put("/me/reading-goal")
def set_reading_goal(payload: ReadingGoalRequest, user: User = Depends(get_current_user),
                     library: Library = Depends(get_library)):
    return library.set_reading_goal(user, user.id, payload.year, payload.monthly).to_dict()


@app.delete("/me/reading-goal")
def delete_reading_goal(year: int, user: User = Depends(get_current_user),
                        library: Library = Depends(get_library)):
    return {"deleted": library.delete_reading_goal(user, user.id, year)}


# --- Admin ---
@app.get("/admin/dashboard")
def dashboard(admin: User = Depends(get_admin_user), library: Library = Depends(get_library)):
    return library.dashboard()


@app.get("/admin/rentals", response_model=PageResponse)
def all_rentals(
    query: str = Query(""),
    status: str = Query("전체"),
    category: str = Query("전체"),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, alias="perPage"),
    admin: User = Depends(get_admin_user),
    library: Library = Depends(get_library),
):
    rows = library.rental_history(None, query, status, category, date_from, date_to)
    return _paged(rows, Pager.for_rentals(per_page, page))


# --- Announcements ---
@app.get("/announcements", response_model=PageResponse)
def list_announcements(
    query: str = Query(""),
    category: str = Query("all"),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, alias="perPage"),
    board: AnnouncementBoard = Depends(get_announcements),
):
    items = [to_dict(a) for a in board.list(query, category)]
    return _paged(items, Pager.for_boards(per_page, page))


@app.get("/announcements/popups")
def active_popups(board: AnnouncementBoard = Depends(get_announcements)):
    return [to_dict(a) for a in board.active_popups()]


@app.get("/announcements/{announcement_id}")
def get_announcement(announcement_id: str, board: AnnouncementBoard = Depends(get_announcements)):
    return to_dict(board.get(announcement_id))


@app.post("/announcements", status_code=201)
def create_announcement(payload: AnnouncementPayload, admin: User = Depends(get_admin_user),
                        board: AnnouncementBoard = Depends(get_announcements)):
    return to_dict(board.create(admin, **payload.model_dump()))


@app.put("/announcements/{announcement_id}")
def update_announcement(announcement_id: str, payload: AnnouncementUpdate,
                        admin: User = Depends(get_admin_user),
                        board: AnnouncementBoard = Depends(get_announcements)):
    changes = payload.model_dump(exclude_unset=True)
    return to_dict(board.update(admin, announcement_id, **changes))


@app.delete("/announcements/{announcement_id}", status_code=204)
def delete_announcement(announcement_id: str, admin: User = Depends(get_admin_user),
                        board: AnnouncementBoard = Depends(get_announcements)):
    board.delete(admin, announcement_id)


# --- Inquiries ---
@app.get("/inquiries", response_model=PageResponse)
def list_inquiries(
    query: str = Query(""),
    category: str = Query("all"),
    status: str = Query("all"),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, alias="perPage"),
    user: User = Depends(get_current_user),
    board: InquiryBoard = Depends(get_inquiries),
):
    items = [to_dict(i) for i in board.list(user, query, category, status)]
    return _paged(items, Pager.for_boards(per_page, page))


@app.get("/inquiries/{inquiry_id}")
def get_inquiry(inquiry_id: str, user: User = Depends(get_current_user),
                board: InquiryBoard = Depends(get_inquiries)):
    return to_dict(board.get(user, inquiry_id))


@app.post("/inquiries", status_code=201)
def create_inquiry(payload: InquiryPayload, user: User = Depends(get_current_user),
                   board: InquiryBoard = Depends(get_inquiries)):
    return to_dict(board.create(user, **payload.model_dump()))


@app.put("/inquiries/{inquiry_id}")
def update_inquiry(inquiry_id: str, payload: InquiryUpdate, user: User = Depends(get_current_user),
                   board: InquiryBoard = Depends(get_inquiries)):
    return to_dict(board.update(user, inquiry_id, **payload.model_dump(exclude_unset=True)))


@app.delete("/inquiries/{inquiry_id}", status_code=204)
def delete_inquiry(inquiry_id: str, user: User = Depends(get_current_user),
                   board: InquiryBoard = Depends(get_inquiries)):
    board.delete(user, inquiry_id)


@app.post("/inquiries/{inquiry_id}/answer")
def answer_inquiry(inquiry_id: str, payload: AnswerPayload = Body(...),
                   admin: User = Depends(get_admin_user),
                   board: InquiryBoard = Depends(get_inquiries)):
    return to_dict(board.answer(admin, inquiry_id, payload.content, payload.is_public))
