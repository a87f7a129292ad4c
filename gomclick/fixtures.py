"""Seed data loaded into the in-memory store at start-up.

Nothing here is ever written back; every process starts from this state.
"""

BOOKS = [
    {
        "id": "book1", "title": "클린 코드: 애자일 소프트웨어 장인 정신", "author": "로버트 C. 마틴",
        "publisher": "인사이트", "publishDate": "2013-12-24", "isbn": "9788966260959",
        "coverImage": "https://picsum.photos/seed/book1/300/400", "category": "기타",
        "location": "본관 3층 개발서적", "source": "purchase", "badges": ["recommended"],
        "status": {"available": 2, "total": 3, "borrowed": 1}, "rating": 4.8,
        "registeredDate": "2023-05-15", "isExtendable": True,
        "description": "프로그래머라면 꼭 읽어야 할 클린 코드에 대한 책입니다. 더 나은 코드를 작성하는 방법과 프로그래밍 원칙을 설명합니다.",
    },
    {
        "id": "book2", "title": "함께 자라기: 애자일로 가는 길", "author": "김창준",
        "publisher": "인사이트", "publishDate": "2019-03-20", "isbn": "9788966262335",
        "coverImage": "https://picsum.photos/seed/book2/300/400", "category": "자기개발",
        "location": "본관 3층 개발서적", "source": "purchase", "badges": ["best"],
        "status": {"available": 0, "total": 2, "borrowed": 2}, "rating": 4.9,
        "registeredDate": "2023-06-10", "isExtendable": True,
        "description": "애자일 방법론과 팀 문화에 대한 국내 저자의 인사이트가 담긴 책입니다.",
    },
    {
        "id": "book3", "title": "리팩터링: 코드 품질을 개선하는 기술", "author": "마틴 파울러",
        "publisher": "한빛미디어", "publishDate": "2020-06-15", "isbn": "9791162242742",
        "coverImage": "https://picsum.photos/seed/book3/300/400", "category": "기타",
        "location": "본관 3층 개발서적", "source": "purchase", "badges": [],
        "status": {"available": 0, "total": 1, "borrowed": 1}, "rating": 4.7,
        "registeredDate": "2023-07-22", "isExtendable": False, "isReservable": False,
        "description": "코드 리팩터링에 대한 기술과 원칙을 설명하는 개발자를 위한 필독서입니다.",
    },
    {
        "id": "book4", "title": "1만 시간의 재발견", "author": "안데르스 에릭슨, 로버트 풀",
        "publisher": "비즈니스북스", "publishDate": "2019-08-10", "isbn": "8963352138",
        "coverImage": "https://picsum.photos/seed/book4/300/400", "category": "자기개발",
        "location": "별관 2층 자기계발", "source": "donation", "badges": ["new"],
        "status": {"available": 0, "total": 3, "borrowed": 3}, "rating": 4.2,
        "registeredDate": "2024-01-05", "isExtendable": True,
        "description": "진정한 전문성을 기르는 효과적인 학습법에 대한 책입니다.",
    },
    {
        "id": "book5", "title": "사피엔스: 유인원에서 사이보그까지", "author": "유발 하라리",
        "publisher": "김영사", "publishDate": "2015-11-24", "isbn": "9788934972464",
        "coverImage": "https://picsum.photos/seed/book5/300/400", "category": "인문/역사",
        "location": "본관 2층 인문학", "source": "purchase", "badges": ["best"],
        "status": {"available": 0, "total": 5, "borrowed": 5}, "rating": 4.8,
        "registeredDate": "2023-03-17", "isExtendable": True, "isReservable": False,
        "description": "인간의 역사와 미래에 대한 통찰을 담은 세계적인 베스트셀러입니다.",
    },
    {
        "id": "book6", "title": "그릿: 열정, 끈기, 인내의 힘", "author": "앤절라 더크워스",
        "publisher": "비즈니스북스", "publishDate": "2017-02-15", "isbn": "9788965705918",
        "coverImage": "https://picsum.photos/seed/book6/300/400", "category": "자기개발",
        "location": "별관 2층 자기계발", "source": "purchase", "badges": ["recommended"],
        "status": {"available": 1, "total": 2, "borrowed": 1}, "rating": 4.5,
        "registeredDate": "2023-09-05", "isExtendable": False,
        "description": "성공의 핵심 요소인 그릿(끈기)에 대해 설명하는 책입니다.",
    },
    {
        "id": "book7", "title": "어떻게 일할 것인가", "author": "고영성, 김앤드류",
        "publisher": "스노우폭스북스", "publishDate": "2020-05-12", "isbn": "9791187512035",
        "coverImage": "https://picsum.photos/seed/book7/300/400", "category": "경제/경영",
        "location": "별관 1층 경영서적", "source": "purchase", "badges": ["new", "recommended"],
        "status": {"available": 2, "total": 3, "borrowed": 1}, "rating": 4.3,
        "registeredDate": "2024-02-20", "isExtendable": True,
        "description": "일에서 성과를 내는 방법과 성장하는 방법에 대한 실용적인 조언이 담긴 책입니다.",
    },
    {
        "id": "book8", "title": "소프트웨어 아키텍처의 기초", "author": "마크 리처즈, 닐 포드",
        "publisher": "한빛미디어", "publishDate": "2021-01-30", "isbn": "9791162245484",
        "coverImage": "https://picsum.photos/seed/book8/300/400", "category": "기타",
        "location": "본관 3층 개발서적", "source": "purchase", "badges": ["new"],
        "status": {"available": 1, "total": 1, "borrowed": 0}, "rating": 4.6,
        "registeredDate": "2024-03-15", "isExtendable": True,
        "description": "소프트웨어 아키텍처의 기본 개념과 패턴을 설명하는 책입니다.",
    },
    {
        "id": "book9", "title": "데미안", "author": "헤르만 헤세",
        "publisher": "민음사", "publishDate": "2009-01-20", "isbn": "9788937460449",
        "coverImage": "https://picsum.photos/seed/book9/300/400", "category": "문학",
        "location": "본관 1층 문학", "source": "purchase", "badges": [],
        "status": {"available": 3, "total": 5, "borrowed": 2}, "rating": 4.7,
        "registeredDate": "2022-11-10", "isExtendable": False,
        "description": "자아의 발견과 성장에 관한 헤르만 헤세의 대표작입니다.",
    },
    {
        "id": "book10", "title": "노인과 바다", "author": "어니스트 헤밍웨이",
        "publisher": "민음사", "publishDate": "2012-05-15", "isbn": "9788937462078",
        "coverImage": "https://picsum.photos/seed/book10/300/400", "category": "문학",
        "location": "본관 1층 문학", "source": "purchase", "badges": ["best"],
        "status": {"available": 1, "total": 2, "borrowed": 1}, "rating": 4.5,
        "registeredDate": "2023-02-28", "isExtendable": True,
        "description": "노인 어부와 거대한 물고기의 이야기를 담은 헤밍웨이의 걸작입니다.",
    },
    {
        "id": "book11", "title": "경제학 콘서트", "author": "팀 하포드",
        "publisher": "웅진지식하우스", "publishDate": "2010-08-20", "isbn": "9788901097138",
        "coverImage": "https://picsum.photos/seed/book11/300/400", "category": "경제/경영",
        "location": "별관 1층 경영서적", "source": "purchase", "badges": ["recommended"],
        "status": {"available": 2, "total": 2, "borrowed": 0}, "rating": 4.3,
        "registeredDate": "2023-04-15", "isExtendable": True,
        "description": "일상 속 경제 원리를 쉽게 풀어낸 경제학 입문서입니다.",
    },
    {
        "id": "book12", "title": "정원 가꾸기의 즐거움", "author": "카렌 하퍼",
        "publisher": "그린북", "publishDate": "2022-04-10", "isbn": "9791163241508",
        "coverImage": "https://picsum.photos/seed/book12/300/400", "category": "취미/생활",
        "location": "별관 3층 취미", "source": "donation", "badges": ["new"],
        "status": {"available": 1, "total": 1, "borrowed": 0}, "rating": 4.2,
        "registeredDate": "2024-04-01", "isExtendable": False,
        "description": "집에서 할 수 있는 다양한 정원 가꾸기 방법을 소개합니다.",
    },
    {
        "id": "book13", "title": "현대 사회와 윤리", "author": "마이클 샌델",
        "publisher": "와이즈베리", "publishDate": "2020-09-30", "isbn": "978891163711223",
        "coverImage": "https://picsum.photos/seed/book13/300/400", "category": "사회",
        "location": "본관 2층 사회과학", "source": "purchase", "badges": [],
        "status": {"available": 0, "total": 3, "borrowed": 3}, "rating": 4.6,
        "registeredDate": "2023-08-22", "isExtendable": True,
        "description": "현대 사회의 다양한 윤리적 딜레마를 철학적 관점에서 분석합니다.",
    },
    {
        "id": "book14", "title": "미니멀 라이프", "author": "조슈아 베커",
        "publisher": "이덴슬리벨", "publishDate": "2019-11-15", "isbn": "9791188862382",
        "coverImage": "https://picsum.photos/seed/book14/300/400", "category": "취미/생활",
        "location": "별관 3층 라이프스타일", "source": "purchase", "badges": ["recommended"],
        "status": {"available": 2, "total": 2, "borrowed": 0}, "rating": 4.1,
        "registeredDate": "2023-10-15", "isExtendable": True,
        "description": "적게 소유하고 최대한 깊이 있게 삶을 사는 방법에 대해 안내합니다.",
    },
    {
        "id": "book15", "title": "한국사의 재조명", "author": "이이화",
        "publisher": "역사비평사", "publishDate": "2018-03-10", "isbn": "9788976967725",
        "coverImage": "https://picsum.photos/seed/book15/300/400", "category": "인문/역사",
        "location": "본관 2층 역사", "source": "purchase", "badges": [],
        "status": {"available": 1, "total": 1, "borrowed": 0}, "rating": 4.4,
        "registeredDate": "2023-05-30", "isExtendable": False,
        "description": "한국사의 주요 사건들을 새로운 시각에서 조명한 역사서입니다.",
    },
    {
        "id": "book16", "title": "세계 문화의 이해", "author": "김영철",
        "publisher": "학지사", "publishDate": "2021-09-20", "isbn": "9788999867458",
        "coverImage": "https://picsum.photos/seed/book16/300/400", "category": "인문/역사",
        "location": "본관 2층 인문학", "source": "purchase", "badges": ["new"],
        "status": {"available": 3, "total": 3, "borrowed": 0}, "rating": 4.0,
        "registeredDate": "2024-03-01", "isExtendable": True,
        "description": "세계 각국의 문화와 역사에 대한 개괄적인 소개를 담고 있습니다.",
    },
]

# Credential table. Passwords never leave auth.authenticate().
USERS = [
    {
        "id": "u1", "name": "홍길동", "email": "user@dhflour.co.kr", "password": "password123",
        "phone": "010-1234-5678", "department": "IT 개발팀", "role": "EMP", "employee_id": "E1001",
    },
    {
        "id": "u2", "name": "김철수", "email": "chulsoo@dhflour.co.kr", "password": "password123",
        "phone": "010-2222-3333", "department": "영업팀", "role": "EMP", "employee_id": "E1002",
    },
    {
        "id": "u3", "name": "이영희", "email": "younghee@dhflour.co.kr", "password": "password123",
        "phone": "010-4444-5555", "department": "재무팀", "role": "EMP", "employee_id": "E1003",
    },
    {
        "id": "a1", "name": "관리자", "email": "admin@dhflour.co.kr", "password": "admin123",
        "phone": "010-9876-5432", "department": "인사부", "role": "ADM", "employee_id": "A0001",
    },
    {
        "id": "s1", "name": "시스템 관리자", "email": "sysadmin@dhflour.co.kr", "password": "sysadmin123",
        "phone": "010-0000-0000", "department": "정보보안팀", "role": "SYS", "employee_id": "S0001",
    },
]

# Loans held by known users. Copies on loan beyond these belong to
# borrowers outside the credential table.
LOANS = [
    {"id": "loan1", "book_id": "book1", "user_id": "u1", "borrowed_at": "2024-04-01",
     "due_at": "2024-04-15", "extensions_used": 0},
    {"id": "loan2", "book_id": "book2", "user_id": "u1", "borrowed_at": "2024-03-20",
     "due_at": "2024-04-10", "extensions_used": 1},
    {"id": "loan3", "book_id": "book4", "user_id": "u2", "borrowed_at": "2024-03-15",
     "due_at": "2024-03-29", "extensions_used": 0},
    {"id": "loan4", "book_id": "book9", "user_id": "u1", "borrowed_at": "2024-02-01",
     "due_at": "2024-02-15", "extensions_used": 0, "returned_at": "2024-02-12",
     "return_location": "회사 로비"},
    {"id": "loan5", "book_id": "book10", "user_id": "u3", "borrowed_at": "2024-01-10",
     "due_at": "2024-01-24", "extensions_used": 1, "returned_at": "2024-01-30",
     "return_location": "본관 1층"},
]

FAVORITES = {"u1": ["book1", "book5", "book6"]}

REVIEWS = [
    {"id": "r1", "user_id": "u1", "user_name": "홍길동", "book_id": "book1", "rating": 5,
     "content": "정말 유익한 내용입니다. 코드 작성 능력이 향상된 것 같아요.",
     "created_at": "2024-03-15T14:30:00Z"},
    {"id": "r2", "user_id": "u2", "user_name": "김철수", "book_id": "book1", "rating": 4,
     "content": "좋은 책이지만 번역이 조금 아쉬웠습니다.", "created_at": "2024-02-20T11:45:00Z"},
    {"id": "r3", "user_id": "u3", "user_name": "이영희", "book_id": "book2", "rating": 5,
     "content": "애자일에 대한 좋은 인사이트를 얻었습니다. 강력 추천합니다!",
     "created_at": "2024-04-05T16:20:00Z", "recommended": True},
]

# Monthly targets and reads; the yearly goal is their sum (24 / 8).
READING_GOALS = [
    {
        "user_id": "u1", "year": 2024,
        "monthly": [
            {"month": 1, "target": 2, "current": 2}, {"month": 2, "target": 2, "current": 3},
            {"month": 3, "target": 2, "current": 2}, {"month": 4, "target": 2, "current": 1},
            {"month": 5, "target": 2, "current": 0}, {"month": 6, "target": 2, "current": 0},
            {"month": 7, "target": 2, "current": 0}, {"month": 8, "target": 2, "current": 0},
            {"month": 9, "target": 2, "current": 0}, {"month": 10, "target": 2, "current": 0},
            {"month": 11, "target": 2, "current": 0}, {"month": 12, "target": 2, "current": 0},
        ],
    },
]

ANNOUNCEMENT_CATEGORIES = ["신간도서", "일반공지", "장애복구", "이벤트"]

INQUIRY_CATEGORIES = ["도서신청", "일반", "기부", "시스템", "훼손", "기타"]

ANNOUNCEMENTS = [
    {
        "id": "ann-001", "title": "곰클릭+책방 서비스 오픈 안내",
        "content": "안녕하세요, 곰클릭+책방 서비스가 정식 오픈되었습니다. 많은 이용 부탁드립니다.",
        "category": "일반공지", "is_pinned": True, "is_popup": True, "popup_end_date": "2025-05-10",
        "image_url": "https://images.unsplash.com/photo-1507842217343-583bb7270b66", "views": 234,
        "created_at": "2025-04-01T10:00:00", "created_by": "a1",
        "updated_at": "2025-04-01T11:30:00", "updated_by": "a1",
    },
    {
        "id": "ann-002", "title": "4월 신간도서 입고 안내",
        "content": "4월 신간도서가 입고되었습니다. 인기 작가의 신간부터 화제의 베스트셀러까지 다양한 도서를 만나보세요.",
        "category": "신간도서", "is_pinned": True, "is_popup": False,
        "image_url": "https://images.unsplash.com/photo-1544716278-ca5e3f4abd8c", "views": 187,
        "created_at": "2025-04-03T09:15:00", "created_by": "a1",
    },
    {
        "id": "ann-003", "title": "시스템 점검 안내 (4/15)",
        "content": "안녕하세요. 4월 15일 오전 2시부터 4시까지 시스템 정기 점검이 진행될 예정입니다. 해당 시간에는 서비스 이용이 제한됩니다.",
        "category": "장애복구", "is_pinned": False, "is_popup": True, "popup_end_date": "2025-04-15",
        "views": 56, "created_at": "2025-04-08T14:30:00", "created_by": "s1",
    },
    {
        "id": "ann-004", "title": "봄맞이 독서 이벤트 안내",
        "content": "봄맞이 독서 이벤트를 진행합니다. 이벤트 기간 동안 대여하신 도서에 대한 리뷰를 작성하시면 추첨을 통해 소정의 상품을 드립니다.",
        "category": "이벤트", "is_pinned": False, "is_popup": False,
        "image_url": "https://images.unsplash.com/photo-1589998059171-988d887df646", "views": 129,
        "created_at": "2025-04-05T11:20:00", "created_by": "a1",
    },
    {
        "id": "ann-005", "title": "도서관 이용 규칙 안내",
        "content": "도서관 이용 규칙을 안내드립니다. 모든 회원님들의 원활한 도서관 이용을 위해 규칙을 준수해 주시기 바랍니다.",
        "category": "일반공지", "is_pinned": False, "is_popup": False, "views": 89,
        "created_at": "2025-03-28T16:45:00", "created_by": "a1",
    },
]

INQUIRIES = [
    {
        "id": "inq-001", "title": "IT 관련 도서 추가 요청",
        "content": "최근 출간된 인공지능 관련 도서를 추가해주실 수 있을까요? 특히 \"모던 머신러닝의 이해\" 라는 책을 구비해주시면 좋겠습니다.",
        "category": "도서신청", "is_public": True, "status": "answered",
        "created_at": "2025-04-05T09:22:00", "created_by": "u1",
        "answer": {"id": "ans-001", "content": "안녕하세요. 요청하신 도서는 다음 주 입고 예정입니다. 입고되면 알림 드리겠습니다.",
                   "is_public": True, "created_at": "2025-04-06T11:32:00", "created_by": "a1"},
    },
    {
        "id": "inq-002", "title": "책 훼손 신고",
        "content": "대여한 \"디자인 씽킹\" 도서의 35페이지가 찢어져 있습니다. 반납 시 문제가 될까요?",
        "category": "훼손", "is_public": False, "status": "answered",
        "created_at": "2025-04-07T14:15:00", "created_by": "u2",
        "answer": {"id": "ans-002", "content": "안녕하세요. 사전에 신고해주셔서 감사합니다. 해당 사항은 기록해두었으니 반납 시 별도 비용이 발생하지 않습니다.",
                   "is_public": False, "created_at": "2025-04-07T16:05:00", "created_by": "a1"},
    },
    {
        "id": "inq-003", "title": "도서 연장 문의",
        "content": "연장 버튼이 비활성화되어있는데, 한 번 더 연장할 수 있는 방법이 있을까요?",
        "category": "일반", "is_public": True, "status": "answered",
        "created_at": "2025-04-08T10:30:00", "created_by": "u3",
        "answer": {"id": "ans-003", "content": "안녕하세요. 도서 연장은 1회만 가능합니다. 추가 연장은 불가능하오니 반납일을 준수해 주시기 바랍니다.",
                   "is_public": True, "created_at": "2025-04-08T13:25:00", "created_by": "a1"},
    },
    {
        "id": "inq-004", "title": "기부 도서 관련 문의",
        "content": "개인 소장 도서를 기부하고 싶은데 어떤 절차를 거쳐야 하나요?",
        "category": "기부", "is_public": True, "status": "pending",
        "created_at": "2025-04-10T09:17:00", "created_by": "u2",
    },
    {
        "id": "inq-005", "title": "로그인 오류 문의",
        "content": "오늘부터 로그인이 안 되는 상황이 발생하고 있습니다. 어떻게 해결할 수 있을까요?",
        "category": "시스템", "is_public": True, "status": "pending",
        "created_at": "2025-04-10T11:44:00", "created_by": "u1",
    },
]
