from __future__ import annotations

ALL = "전체"

CATEGORIES = ["기타", "자기개발", "인문/역사", "경제/경영", "문학", "취미/생활", "사회"]

BADGES = ("recommended", "best", "popular", "new")

LABEL_AVAILABLE = "대여가능"
LABEL_RESERVED = "예약중"
LABEL_BORROWED = "대여중"


class BookStatus:
    """Aggregate copy counts for one title.

    ``borrowed`` counts how many times the title has been lent out and only
    ever grows; the number of copies currently out is ``total - available``.
    """

    def __init__(self, total: int, available: int, borrowed: int = 0) -> None:
        if total < 0:
            raise ValueError("total must be >= 0")
        if not 0 <= available <= total:
            raise ValueError(f"available must be within 0..{total}, got {available}")
        self.total = total
        self.available = available
        self.borrowed = max(borrowed, 0)

    @property
    def on_loan(self) -> int:
        return self.total - self.available

    def take_copy(self) -> None:
        if self.available <= 0:
            raise ValueError("no copy left on the shelf")
        self.available -= 1
        self.borrowed += 1

    def put_back_copy(self) -> None:
        if self.available >= self.total:
            raise ValueError("every copy is already on the shelf")
        self.available += 1

    def to_dict(self, reserved: bool = False) -> dict:
        return {
            "total": self.total,
            "available": self.available,
            "borrowed": self.borrowed,
            "reserved": reserved,
        }


class Book:
    """One catalog title with its aggregate lending state."""

    def __init__(self, id: str, title: str, author: str, publisher: str, isbn: str,
                 category: str, status: BookStatus,
                 publish_date: str | None = None, location: str = "", description: str | None = None,
                 cover_image: str | None = None, source: str = "purchase",
                 registered_date: str | None = None, badges: list | None = None,
                 rating: float | None = None, recommendations: int | None = None,
                 is_extendable: bool = True, is_reservable: bool = True) -> None:
        self.id = id
        self.title = title.strip()
        self.author = author.strip()
        self.publisher = publisher.strip()
        self.isbn = isbn.strip()
        self.category = category
        self.status = status
        self.publish_date = publish_date
        self.location = location
        self.description = description
        self.cover_image = cover_image
        self.source = source
        self.registered_date = registered_date
        self.badges = [b for b in (badges or []) if b in BADGES]
        self.rating = rating
        self.recommendations = recommendations
        self.is_extendable = is_extendable
        self.is_reservable = is_reservable

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.id})"

    def has_badge(self, badge: str) -> bool:
        return badge in self.badges

    def to_dict(self, reserved: bool = False) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "publisher": self.publisher,
            "publishDate": self.publish_date,
            "isbn": self.isbn,
            "category": self.category,
            "location": self.location,
            "description": self.description,
            "coverImage": self.cover_image,
            "source": self.source,
            "registeredDate": self.registered_date,
            "status": self.status.to_dict(reserved=reserved),
            "badges": list(self.badges),
            "rating": self.rating,
            "recommendations": self.recommendations,
            "isExtendable": self.is_extendable,
            "isReservable": self.is_reservable,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        status = data.get("status") or {}
        return Book(
            id=data["id"],
            title=data["title"],
            author=data["author"],
            publisher=data.get("publisher", ""),
            isbn=data.get("isbn", ""),
            category=data.get("category", "기타"),
            status=BookStatus(
                total=int(status.get("total", 0)),
                available=int(status.get("available", 0)),
                borrowed=int(status.get("borrowed") or 0),
            ),
            publish_date=data.get("publishDate"),
            location=data.get("location", ""),
            description=data.get("description"),
            cover_image=data.get("coverImage"),
            source=data.get("source", "purchase"),
            registered_date=data.get("registeredDate"),
            badges=data.get("badges"),
            rating=data.get("rating"),
            recommendations=data.get("recommendations"),
            is_extendable=data.get("isExtendable", True),
            # Only an explicit False disables reservations
            is_reservable=data.get("isReservable") is not False,
        )


def status_label(book: Book, reserved: bool) -> str:
    """Badge text for the card: available, reserved or on loan."""
    if book.status.available > 0:
        return LABEL_AVAILABLE
    if reserved:
        return LABEL_RESERVED
    return LABEL_BORROWED
