import logging
import subprocess
import sys
from typing import Optional

import typer

from gomclick.auth import authenticate, forget_login, has_role, remember_login, restore
from gomclick.book import ALL
from gomclick.catalog import CatalogFilter, Pager, page_info, query_catalog
from gomclick.community import AnnouncementBoard
from gomclick.config import settings
from gomclick.database import get_db
from gomclick.errors import BookshelfError
from gomclick.library import Library
from gomclick.models import ADMIN_ROLES, User
from gomclick.utils.session_store import SAVED_EMAIL_KEY, SessionStore
from gomclick.utils.ui_helpers import (
    print_announcements,
    print_book_detail,
    print_book_list,
    print_dashboard,
    print_rentals,
    set_output_mode,
)

APP_NAME = "곰클릭+책방 CLI"
STATE_NOTE = (
    "Loans and reservations are kept in memory for this command only; "
    "the next command starts again from the seed data."
)

logger = logging.getLogger(__name__)

app = typer.Typer(help=APP_NAME)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (output mode)."""
    logging.basicConfig(level=settings.log_level)
    if output:
        set_output_mode(output)


def _library() -> Library:
    # Book state lives for this process only
    return Library(get_db())


def _fail(message: str) -> None:
    print(message)
    raise typer.Exit(code=1)


def _signed_in() -> User:
    user = restore(SessionStore())
    if user is None:
        _fail("로그인이 필요합니다. 'gomclick login <email>'을 먼저 실행해 주세요.")
    return user


@app.command("login")
def cli_login(
    email: Optional[str] = typer.Argument(None, help="Company email; defaults to the remembered one"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
    remember_email: bool = typer.Option(False, "--remember-email", help="Pre-fill this email next time"),
    auto_login: bool = typer.Option(False, "--auto-login", help="Stay signed in"),
):
    """Sign in and keep the session for later commands."""
    store = SessionStore()
    email = email or store.get(SAVED_EMAIL_KEY)
    if not email:
        _fail("이메일을 입력해 주세요.")
    try:
        user = authenticate(email, password)
    except BookshelfError as e:
        _fail(e.message)
    remember_login(store, user, email, remember_email=remember_email, auto_login=auto_login)
    print(f"로그인 성공: {user.name}님 환영합니다.")


@app.command("logout")
def cli_logout():
    """Forget the signed-in user."""
    forget_login(SessionStore())
    print("로그아웃되었습니다.")


@app.command("whoami")
def cli_whoami():
    user = _signed_in()
    library = _library()
    print(f"{user.name} ({user.email}) {user.department} [{user.role.value}]")
    print(f"대여 중: {library.borrowed_count(user.id)}/{settings.max_borrow_limit}권")
    reserved = library.reservation_count(user.id)
    print(f"예약 가능: {max(settings.max_reservation_limit - reserved, 0)}/{settings.max_reservation_limit}권")


@app.command("list")
def cli_list(
    query: str = typer.Option("", "--query", "-q", help="Title, author or publisher"),
    category: str = typer.Option(ALL, "--category", "-c"),
    status: str = typer.Option(ALL, "--status", "-s", help="대여가능 | 대여중 | 예약중 | 전체"),
    sort: str = typer.Option("추천순", "--sort"),
    favorite: bool = typer.Option(False, "--favorite", help="Only my favorites"),
    badge: Optional[str] = typer.Option(None, "--badge", help="new | recommended | best | popular"),
    page: int = typer.Option(1, "--page"),
    per_page: int = typer.Option(settings.default_page_size, "--per-page"),
):
    """Search the catalog."""
    user = restore(SessionStore())
    if favorite and user is None:
        _fail("로그인이 필요합니다.")
    user_id = user.id if user else None
    library = _library()
    pager = Pager.for_catalog(per_page, page)
    filters = CatalogFilter(category=category, status=status, query=query, sort=sort,
                            favorite=favorite, badge=badge)
    try:
        items, total = query_catalog(
            library.list_books(), filters, page=pager.page, page_size=pager.page_size,
            favorites=library.favorites(user_id), reserved_ids=library.reserved_ids(),
        )
    except ValueError as e:
        _fail(str(e))
    print_book_list(library.views(user_id, items), page_info(total, pager.page, pager.page_size))


@app.command("show")
def cli_show(book_id: str):
    """Show one book with its reviews."""
    user = restore(SessionStore())
    library = _library()
    try:
        view = library.view(book_id, user.id if user else None)
        reviews = library.reviews_for(book_id)
    except BookshelfError as e:
        _fail(e.message)
    print_book_detail(view, reviews)


@app.command("borrow", help=f"Borrow a book. {STATE_NOTE}")
def cli_borrow(book_id: str):
    user = _signed_in()
    try:
        loan = _library().borrow(book_id, user)
    except BookshelfError as e:
        _fail(e.message)
    print(f"대여 완료: 반납예정일 {loan.due_at.isoformat()}")


@app.command("return", help=f"Return a book, optionally with a review. {STATE_NOTE}")
def cli_return(
    book_id: str,
    location: str = typer.Option(..., "--location", "-l", help="Where the book was dropped off"),
    rating: Optional[int] = typer.Option(None, "--rating", help="Review stars (1-5)"),
    review: Optional[str] = typer.Option(None, "--review", help="Review text"),
    recommend: bool = typer.Option(False, "--recommend"),
):
    user = _signed_in()
    payload = None
    if rating is not None or review:
        payload = {"rating": rating, "content": review, "recommended": recommend}
    try:
        _library().return_book(book_id, user, location, review=payload)
    except BookshelfError as e:
        _fail(e.message)
    print("반납 완료")


@app.command("extend", help=f"Extend a loan once by a week. {STATE_NOTE}")
def cli_extend(book_id: str):
    user = _signed_in()
    try:
        loan = _library().extend(book_id, user)
    except BookshelfError as e:
        _fail(e.message)
    print(f"연장 완료: 반납예정일 {loan.due_at.isoformat()}")


@app.command("reserve", help=f"Reserve a book, or cancel an existing reservation. {STATE_NOTE}")
def cli_reserve(book_id: str):
    user = _signed_in()
    try:
        reservation = _library().toggle_reservation(book_id, user)
    except BookshelfError as e:
        _fail(e.message)
    if reservation.is_active:
        print(f"예약 완료 ({reservation.id})")
    else:
        print("예약이 취소되었습니다.")


@app.command("favorite")
def cli_favorite(book_id: str):
    user = _signed_in()
    try:
        marked = _library().toggle_favorite(book_id, user)
    except BookshelfError as e:
        _fail(e.message)
    print("즐겨찾기에 추가되었습니다." if marked else "즐겨찾기에서 삭제되었습니다.")


@app.command("rentals")
def cli_rentals(
    status: str = typer.Option(ALL, "--status", "-s", help="rented | returned | overdue | 전체"),
    query: str = typer.Option("", "--query", "-q"),
    all_users: bool = typer.Option(False, "--all", help="Every borrower (admins only)"),
    page: int = typer.Option(1, "--page"),
    per_page: Optional[int] = typer.Option(None, "--per-page"),
):
    """My rental history, or everyone's for admins."""
    user = _signed_in()
    if all_users and not has_role(user, ADMIN_ROLES):
        _fail("이 기능을 사용할 권한이 없습니다.")
    rows = _library().rental_history(None if all_users else user.id, query=query, status=status)
    page_rows, info = Pager.for_rentals(per_page, page).slice(rows)
    print_rentals(page_rows, info)


@app.command("dashboard")
def cli_dashboard():
    """Admin dashboard numbers."""
    user = _signed_in()
    if not has_role(user, ADMIN_ROLES):
        _fail("이 기능을 사용할 권한이 없습니다.")
    print_dashboard(_library().dashboard())


@app.command("announcements")
def cli_announcements(
    query: str = typer.Option("", "--query", "-q"),
    category: str = typer.Option("all", "--category", "-c"),
    page: int = typer.Option(1, "--page"),
    per_page: Optional[int] = typer.Option(None, "--per-page"),
):
    board = AnnouncementBoard(get_db())
    items, info = Pager.for_boards(per_page, page).slice(board.list(query, category))
    print_announcements(items, info)


@app.command("serve")
def cli_serve(reload: bool = typer.Option(False, "--reload", help="Restart on code changes")):
    """Start the HTTP API with uvicorn."""
    host = settings.api_host
    port = int(settings.api_port)
    print(f"Starting API on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "gomclick.api:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        args.append("--reload")
    subprocess.run(args)


if __name__ == "__main__":
    app()
