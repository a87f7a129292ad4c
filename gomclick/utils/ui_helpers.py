import os
import json
from dataclasses import asdict
from typing import Any, Dict, List

from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "GOMCLICK_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, default=str))


def print_book_list(views: List[Any], info: Dict[str, int]) -> None:
    """Print one catalog page.
    - plain: 'id [label] title - author' lines and a page footer
    - json: the per-viewer book dicts plus paging info
    - rich: table
    """
    mode = get_output_mode()

    if mode == "json":
        _print_json({"items": [v.to_dict() for v in views], **info})
        return

    if not views:
        print("검색 결과가 없습니다.")
        return

    if mode == "rich":
        table = Table(title="📚 도서 목록", show_lines=False, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("상태")
        table.add_column("제목", style="white")
        table.add_column("저자", style="white")
        table.add_column("카테고리")
        table.add_column("재고", justify="right")
        table.add_column("평점", justify="right")
        for v in views:
            book = v.book
            table.add_row(
                book.id,
                v.status_label,
                book.title,
                book.author,
                book.category,
                f"{book.status.available}/{book.status.total}",
                f"{book.rating:.1f}" if book.rating is not None else "-",
            )
        _console.print(table)
    else:
        for v in views:
            marker = " ♥" if v.is_favorite else ""
            print(f"{v.book.id} [{v.status_label}] {v.book.title} - {v.book.author}{marker}")
    print(f"{info['page']}/{info['total_pages']} 페이지 (총 {info['count']}권)")


def print_book_detail(view: Any, reviews: List[Any]) -> None:
    mode = get_output_mode()
    data = view.to_dict()

    if mode == "json":
        data["reviews"] = [asdict(r) for r in reviews]
        _print_json(data)
        return

    lines = [
        f"제목: {data['title']}",
        f"저자: {data['author']}",
        f"출판사: {data['publisher']}",
        f"카테고리: {data['category']}",
        f"위치: {data['location']}",
        f"상태: {data['statusLabel']} ({data['status']['available']}/{data['status']['total']})",
    ]
    if data["borrowedByCurrentUser"]:
        lines.append(f"대여일: {data['borrowDate']}  반납예정일: {data['returnDueDate']}")
        lines.append(f"연장 가능: {'예' if data['isExtendable'] else '아니오'}")
    if data["isReservedByCurrentUser"]:
        lines.append(f"예약 상태: {data['reservationState']}")

    if mode == "rich":
        _console.print(Panel.fit("\n".join(lines), title=f"📖 {data['id']}", border_style="blue"))
    else:
        for line in lines:
            print(line)
    for review in reviews:
        print(f"  ★{review.rating} {review.user_name}: {review.content}")


def print_rentals(rows: List[Dict[str, Any]], info: Dict[str, int]) -> None:
    mode = get_output_mode()

    if mode == "json":
        _print_json({"items": rows, **info})
        return

    if not rows:
        print("대여 기록이 없습니다.")
        return

    if mode == "rich":
        table = Table(title="📋 대여 기록", header_style="bold cyan")
        for column in ("도서", "대여자", "대여일", "반납예정일", "반납일", "상태"):
            table.add_column(column)
        for row in rows:
            table.add_row(row["book_title"], row["user_name"] or "-", row["borrow_date"],
                          row["due_date"], row["return_date"] or "-", row["status"])
        _console.print(table)
    else:
        for row in rows:
            print(f"{row['borrow_date']} {row['book_title']} ({row['status']}, 반납예정 {row['due_date']})")
    print(f"{info['page']}/{info['total_pages']} 페이지 (총 {info['count']}건)")


def print_dashboard(stats: Dict[str, Any]) -> None:
    mode = get_output_mode()

    if mode == "json":
        _print_json(stats)
        return

    summary = [
        ("보유 도서", f"{stats['total_titles']}종 / {stats['total_copies']}권"),
        ("대여 중", f"{stats['copies_on_loan']}권 ({stats['loan_rate']}%)"),
        ("등록 사용자", str(stats["registered_users"])),
        ("연체", str(stats["overdue_loans"])),
        ("예약 대기", str(stats["active_reservations"])),
        ("미답변 문의", str(stats["pending_inquiries"])),
    ]
    if mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {value}" for label, value in summary)
        _console.print(Panel.fit(content, title="📊 관리자 대시보드", border_style="blue"))
    else:
        for label, value in summary:
            print(f"{label}: {value}")


def print_announcements(items: List[Any], info: Dict[str, int]) -> None:
    mode = get_output_mode()

    if mode == "json":
        _print_json({"items": [asdict(a) for a in items], **info})
        return

    if not items:
        print("공지사항이 없습니다.")
        return
    for a in items:
        pin = "[고정] " if a.is_pinned else ""
        print(f"{a.id} {pin}[{a.category}] {a.title} ({a.created_at[:10]}, 조회 {a.views})")
    print(f"{info['page']}/{info['total_pages']} 페이지 (총 {info['count']}건)")
