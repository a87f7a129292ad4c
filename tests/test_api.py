from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from gomclick import api


@pytest.fixture
def client(store):
    api.sessions.clear()
    with TestClient(api.app) as test_client:
        yield test_client
    api.sessions.clear()


def login(client, email, password):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"X-Session-Token": response.json()["token"]}


@pytest.fixture
def employee_headers(client):
    return login(client, "user@dhflour.co.kr", "password123")


@pytest.fixture
def admin_headers(client):
    return login(client, "admin@dhflour.co.kr", "admin123")


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["total_books"] == 16


# ------------------------- session ------------------------- #
def test_login_rejects_bad_password(client):
    response = client.post("/auth/login", json={"email": "user@dhflour.co.kr", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["code"] == "invalid_credentials"


def test_me_requires_session(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"X-Session-Token": "forged"}).status_code == 401


def test_login_me_logout(client, employee_headers):
    me = client.get("/auth/me", headers=employee_headers).json()
    assert me["id"] == "u1"
    assert me["borrowed_count"] == 2
    assert (me["reserved_count"], me["reservations_left"]) == (0, 1)
    assert "password" not in me

    assert client.post("/auth/logout", headers=employee_headers).json() == {"logged_out": True}
    assert client.get("/auth/me", headers=employee_headers).status_code == 401


# ------------------------- catalog ------------------------- #
def test_catalog_first_page(client):
    body = client.get("/books").json()
    assert body["count"] == 16
    assert body["page_size"] == 12
    assert body["total_pages"] == 2
    assert len(body["items"]) == 12
    assert body["items"][0]["id"] == "book1"
    assert body["items"][0]["statusLabel"] == "대여가능"


def test_catalog_filters(client):
    body = client.get("/books", params={"status": "대여가능", "perPage": 24}).json()
    assert body["count"] == 11
    assert body["page_size"] == 24
    legacy = client.get("/books", params={"filter": "category=문학"}).json()
    assert [b["id"] for b in legacy["items"]] == ["book9", "book10"]


def test_catalog_rejects_unknown_status(client):
    assert client.get("/books", params={"status": "분실"}).status_code == 422


def test_favorite_filter_needs_login(client, employee_headers):
    assert client.get("/books", params={"favorite": "true"}).status_code == 401
    body = client.get("/books", params={"favorite": "true"}, headers=employee_headers).json()
    assert body["count"] == 3
    assert all(item["isFavorite"] for item in body["items"])


def test_book_detail(client, employee_headers):
    body = client.get("/books/book1", headers=employee_headers).json()
    assert body["borrowedByCurrentUser"] is True
    assert body["isFavorite"] is True
    assert len(body["reviews"]) == 2


def test_missing_book_redirects(client):
    response = client.get("/books/nope")
    assert response.status_code == 404
    assert response.json()["redirect"] == "/books"


# ------------------------- lending ------------------------- #
def test_borrow(client, admin_headers):
    response = client.post("/books/book7/borrow", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["borrowedByCurrentUser"] is True
    assert body["status"]["available"] == 1
    assert body["returnDueDate"] == (date.today() + timedelta(days=14)).isoformat()


def test_borrow_requires_session(client):
    assert client.post("/books/book7/borrow").status_code == 401


def test_borrow_limit_is_a_conflict(client, employee_headers):
    response = client.post("/books/book7/borrow", headers=employee_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "borrow_limit_reached"


def test_return_requires_location(client, employee_headers):
    response = client.post("/books/book1/return", headers=employee_headers, json={"return_location": " "})
    assert response.status_code == 422
    assert response.json()["field"] == "return_location"


def test_return_with_review(client, employee_headers):
    response = client.post(
        "/books/book1/return",
        headers=employee_headers,
        json={"return_location": "본관 1층", "review": {"rating": 4, "content": "좋아요", "recommended": True}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["borrowedByCurrentUser"] is False
    assert body["status"]["available"] == 3
    assert body["recommendations"] == 1
    assert len(client.get("/books/book1/reviews").json()) == 3


def test_extend_twice(client, admin_headers):
    client.post("/books/book1/borrow", headers=admin_headers)
    assert client.post("/books/book1/extend", headers=admin_headers).json()["hasBeenExtended"] is True
    assert client.post("/books/book1/extend", headers=admin_headers).status_code == 409


def test_reservation_toggle(client, admin_headers):
    body = client.post("/books/book13/reservation", headers=admin_headers).json()
    assert body["isReservedByCurrentUser"] is True
    assert body["statusLabel"] == "예약중"
    body = client.post("/books/book13/reservation", headers=admin_headers).json()
    assert body["isReservedByCurrentUser"] is False
    assert client.post("/books/book3/reservation", headers=admin_headers).status_code == 409


def test_reservation_limit_is_a_conflict(client, admin_headers):
    assert client.post("/books/book13/reservation", headers=admin_headers).status_code == 200
    response = client.post("/books/book4/reservation", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "reservation_limit_reached"
    me = client.get("/auth/me", headers=admin_headers).json()
    assert (me["reserved_count"], me["reservations_left"]) == (1, 0)


def test_favorite_toggle(client, employee_headers):
    assert client.post("/books/book1/favorite", headers=employee_headers).json()["isFavorite"] is False


def test_review_validation(client, employee_headers):
    response = client.post("/books/book9/reviews", headers=employee_headers, json={"rating": 9, "content": "x"})
    assert response.status_code == 422
    assert response.json()["field"] == "rating"


# ------------------------- rentals, goals, admin ------------------------- #
def test_my_rentals(client, employee_headers):
    body = client.get("/rentals", headers=employee_headers).json()
    assert body["count"] == 3
    assert body["page_size"] == 5
    assert [r["id"] for r in body["items"]] == ["loan1", "loan2", "loan4"]


def test_reading_goal(client, employee_headers):
    goal = client.get("/me/reading-goal", params={"year": 2024}, headers=employee_headers).json()
    assert (goal["target"], goal["current"]) == (24, 8)
    assert goal["monthly"][3] == {"month": 4, "target": 2, "current": 1}

    response = client.put("/me/reading-goal", headers=employee_headers,
                          json={"year": 2024, "monthly": {"1": -1, "2": 3}})
    assert response.status_code == 422
    assert response.json()["field"] == "monthly"
    assert "1월" in response.json()["detail"]

    updated = client.put("/me/reading-goal", headers=employee_headers, json={"year": 2024, "monthly": {"1": 5}})
    assert updated.status_code == 200
    assert updated.json()["target"] == 27
    assert updated.json()["monthly"][0]["target"] == 5

    assert client.delete("/me/reading-goal", params={"year": 2024}, headers=employee_headers).json() == {"deleted": True}
    empty = client.get("/me/reading-goal", params={"year": 2024}, headers=employee_headers).json()
    assert (empty["target"], empty["current"]) == (0, 0)
    assert len(empty["monthly"]) == 12


def test_admin_routes_check_role(client, employee_headers, admin_headers):
    assert client.get("/admin/dashboard", headers=employee_headers).status_code == 403
    assert client.get("/admin/rentals", headers=employee_headers).status_code == 403
    stats = client.get("/admin/dashboard", headers=admin_headers).json()
    assert stats["total_titles"] == 16
    assert stats["total_copies"] == 39
    assert client.get("/admin/rentals", headers=admin_headers).json()["count"] == 5


# ------------------------- boards ------------------------- #
def test_announcements(client, employee_headers, admin_headers):
    body = client.get("/announcements").json()
    assert body["count"] == 5
    assert body["items"][0]["id"] == "ann-002"
    assert client.get("/announcements/ann-999").status_code == 404

    payload = {"title": "휴관 안내", "content": "5월 5일 휴관", "category": "일반공지"}
    assert client.post("/announcements", headers=employee_headers, json=payload).status_code == 403
    created = client.post("/announcements", headers=admin_headers, json=payload)
    assert created.status_code == 201
    assert created.json()["id"] == "ann-006"

    updated = client.put("/announcements/ann-006", headers=admin_headers, json={"is_pinned": True})
    assert updated.json()["is_pinned"] is True
    assert client.delete("/announcements/ann-006", headers=admin_headers).status_code == 204
    assert client.get("/announcements/ann-006").status_code == 404


def test_inquiries(client, employee_headers, admin_headers):
    assert client.get("/inquiries").status_code == 401
    assert client.get("/inquiries", headers=employee_headers).json()["count"] == 3
    assert client.get("/inquiries/inq-002", headers=employee_headers).status_code == 404

    created = client.post(
        "/inquiries", headers=employee_headers,
        json={"title": "신간 요청", "content": "도메인 주도 설계", "category": "도서신청"},
    )
    assert created.status_code == 201
    assert created.json()["id"] == "inq-006"

    assert client.put("/inquiries/inq-001", headers=employee_headers, json={"title": "수정"}).status_code == 409
    answered = client.post("/inquiries/inq-006/answer", headers=admin_headers, json={"content": "구매 예정입니다."})
    assert answered.json()["status"] == "answered"
    assert client.delete("/inquiries/inq-006", headers=employee_headers).status_code == 409
