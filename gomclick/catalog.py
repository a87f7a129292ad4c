"""Search, filter, sort and paginate over the book collection.

Everything here is a pure function of its inputs; the per-viewer pieces
(favorites, which titles have an active reservation) are passed in.
"""

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from gomclick.book import ALL, BADGES, Book
from gomclick.config import settings

STATUS_ALIASES = {
    "대여가능": "available",
    "available": "available",
    "대여중": "borrowed",
    "borrowed": "borrowed",
    "예약중": "reserved",
    "reserved": "reserved",
    ALL: None,
    "all": None,
    "": None,
}

SORT_POPULAR = "인기도순"
SORT_NEWEST = "최신등록순"
SORT_RATING = "평점순"
SORT_NAME = "이름순"
SORT_RECOMMENDED = "추천순"
SORT_BEST = "베스트도서순"

SORT_OPTIONS = (SORT_POPULAR, SORT_NEWEST, SORT_RATING, SORT_NAME, SORT_RECOMMENDED, SORT_BEST)
SORT_ALIASES = {"제목순": SORT_NAME, "최신순": SORT_NEWEST}
DEFAULT_SORT = SORT_RECOMMENDED

COLUMNS = ("status", "title", "author", "category", "location", "recommendations", "borrowed", "rating")
STATUS_RANK = {"available": 0, "reserved": 1, "borrowed": 2}


@dataclass(frozen=True)
class CatalogFilter:
    category: str = ALL
    status: str = ALL
    query: str = ""
    sort: str = DEFAULT_SORT
    favorite: bool = False
    badge: Optional[str] = None


def normalize_sort(sort: Optional[str]) -> str:
    sort = SORT_ALIASES.get(sort or "", sort)
    return sort if sort in SORT_OPTIONS else DEFAULT_SORT


def _status_key(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if value not in STATUS_ALIASES:
        raise ValueError(f"Unknown status filter: {value}")
    return STATUS_ALIASES[value]


def matches(book: Book, filters: CatalogFilter, reserved: bool = False, favorite: bool = False) -> bool:
    """True when the book passes every filter clause."""
    if filters.category and filters.category != ALL and book.category != filters.category:
        return False

    status = _status_key(filters.status)
    if status == "available" and book.status.available <= 0:
        return False
    if status == "borrowed" and book.status.available != 0:
        return False
    if status == "reserved" and not (book.status.available == 0 and reserved):
        return False

    needle = (filters.query or "").strip().lower()
    if needle and not any(needle in field.lower() for field in (book.title, book.author, book.publisher)):
        return False

    if filters.favorite and not favorite:
        return False
    if filters.badge and not book.has_badge(filters.badge):
        return False
    return True


def apply_filters(books: Iterable[Book], filters: CatalogFilter,
                  reserved_ids: Iterable[str] = (), favorites: Iterable[str] = ()) -> List[Book]:
    reserved_ids = set(reserved_ids)
    favorites = set(favorites)
    return [
        book for book in books
        if matches(book, filters, reserved=book.id in reserved_ids, favorite=book.id in favorites)
    ]


def sort_books(books: Iterable[Book], sort: Optional[str] = DEFAULT_SORT) -> List[Book]:
    """Order by one of the catalog sort options. Python's sort is stable, so ties keep input order."""
    sort = normalize_sort(sort)
    books = list(books)
    if sort == SORT_POPULAR:
        return sorted(books, key=lambda b: b.status.borrowed or 0, reverse=True)
    if sort == SORT_NEWEST:
        return sorted(books, key=lambda b: b.registered_date or "", reverse=True)
    if sort == SORT_RATING:
        return sorted(books, key=lambda b: b.rating or 0, reverse=True)
    if sort == SORT_NAME:
        return sorted(books, key=lambda b: b.title)
    if sort == SORT_BEST:
        return sorted(books, key=lambda b: not b.has_badge("best"))
    # recommended badge first, then by recommendation count
    return sorted(books, key=lambda b: (not b.has_badge("recommended"), -(b.recommendations or 0)))


def status_rank(book: Book, reserved: bool = False) -> int:
    if book.status.available > 0:
        return STATUS_RANK["available"]
    return STATUS_RANK["reserved"] if reserved else STATUS_RANK["borrowed"]


@dataclass(frozen=True)
class ColumnSort:
    """Table-view sort state; clicking a column starts descending, clicking again flips."""
    column: Optional[str] = None
    direction: str = "desc"

    def toggle(self, column: str) -> "ColumnSort":
        if column not in COLUMNS:
            raise ValueError(f"Unknown column: {column}")
        if column == self.column:
            return replace(self, direction="asc" if self.direction == "desc" else "desc")
        return ColumnSort(column=column, direction="desc")


def sort_by_column(books: Iterable[Book], column: str, direction: str = "desc",
                   reserved_ids: Iterable[str] = ()) -> List[Book]:
    if column not in COLUMNS:
        raise ValueError(f"Unknown column: {column}")
    reserved_ids = set(reserved_ids)

    def key(book: Book) -> Any:
        if column == "status":
            return status_rank(book, book.id in reserved_ids)
        if column == "borrowed":
            return book.status.borrowed or 0
        if column in ("recommendations", "rating"):
            return getattr(book, column) or 0
        return getattr(book, column) or ""

    return sorted(books, key=key, reverse=direction == "desc")


def total_pages(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / page_size)) if page_size > 0 else 1


def page_info(total: int, page: int, page_size: int) -> Dict[str, int]:
    return {
        "count": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages(total, page_size),
    }


def paginate(items: Sequence[Any], page: int, page_size: int) -> Tuple[List[Any], Dict[str, int]]:
    """Return a slice of items for the given page and page_size, along with pagination info."""
    total = len(items)
    page = max(page, 1)
    page_size = max(page_size, 1)
    start = (page - 1) * page_size
    end = start + page_size
    return list(items[start:end]), page_info(total, page, page_size)


class Pager:
    """Current page and page size for one list screen."""

    def __init__(self, allowed_sizes: Sequence[int], page_size: Optional[int] = None, page: int = 1) -> None:
        self.allowed_sizes = tuple(allowed_sizes)
        self.page_size = page_size if page_size in self.allowed_sizes else self.allowed_sizes[0]
        self.page = max(page, 1)

    @classmethod
    def for_catalog(cls, page_size: Optional[int] = None, page: int = 1) -> "Pager":
        return cls(settings.catalog_page_sizes, page_size or settings.default_page_size, page)

    @classmethod
    def for_rentals(cls, page_size: Optional[int] = None, page: int = 1) -> "Pager":
        return cls(settings.rental_page_sizes, page_size, page)

    @classmethod
    def for_boards(cls, page_size: Optional[int] = None, page: int = 1) -> "Pager":
        return cls(settings.board_page_sizes, page_size, page)

    def set_page_size(self, page_size: int) -> None:
        if page_size not in self.allowed_sizes:
            raise ValueError(f"Page size must be one of {self.allowed_sizes}")
        self.page_size = page_size
        self.page = 1

    def go_to(self, page: int, total: int) -> None:
        self.page = min(max(page, 1), total_pages(total, self.page_size))

    def slice(self, items: Sequence[Any]) -> Tuple[List[Any], Dict[str, int]]:
        return paginate(items, self.page, self.page_size)


def query_catalog(collection: Iterable[Book], filters: CatalogFilter, page: int = 1,
                  page_size: int = 12, favorites: Iterable[str] = (),
                  reserved_ids: Iterable[str] = (), column_sort: Optional[ColumnSort] = None,
                  ) -> Tuple[List[Book], int]:
    """Filter, sort and slice the collection; returns (page_items, total_count)."""
    reserved_ids = set(reserved_ids)
    found = apply_filters(collection, filters, reserved_ids=reserved_ids, favorites=favorites)
    if column_sort is not None and column_sort.column:
        ordered = sort_by_column(found, column_sort.column, column_sort.direction, reserved_ids)
    else:
        ordered = sort_books(found, filters.sort)
    items, info = paginate(ordered, page, page_size)
    return items, info["count"]


def _truthy(value: Any) -> bool:
    return str(value).lower() in ("true", "1", "yes", "on")


def parse_catalog_params(params: Mapping[str, Any]) -> Tuple[CatalogFilter, int, int, Optional[ColumnSort]]:
    """Read catalog query parameters (query, category, status, sort, favorite,
    page, perPage, filter, column, direction).

    ``filter`` is the older link format: ``category=<value>`` or a badge name.
    """
    category = params.get("category") or ALL
    badge = None
    legacy = params.get("filter") or ""
    if legacy.startswith("category="):
        category = legacy.split("=", 1)[1] or ALL
    elif legacy in BADGES:
        badge = legacy

    status = params.get("status") or ALL
    _status_key(status)

    filters = CatalogFilter(
        category=category,
        status=status,
        query=params.get("query") or "",
        sort=normalize_sort(params.get("sort")),
        favorite=_truthy(params.get("favorite", False)),
        badge=badge,
    )

    try:
        page = int(params.get("page") or 1)
    except (TypeError, ValueError):
        page = 1
    try:
        per_page = int(params.get("perPage") or settings.default_page_size)
    except (TypeError, ValueError):
        per_page = settings.default_page_size
    if per_page not in settings.catalog_page_sizes:
        per_page = settings.default_page_size

    column_sort = None
    column = params.get("column")
    if column:
        if column not in COLUMNS:
            raise ValueError(f"Unknown column: {column}")
        direction = params.get("direction") or "desc"
        column_sort = ColumnSort(column=column, direction="asc" if direction == "asc" else "desc")

    return filters, max(page, 1), per_page, column_sort
