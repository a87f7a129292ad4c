"""gomclick bookshelf - corporate book lending service

This package contains the core application modules including:
- Lending state machine (library.py)
- Catalog search, filter, sort and pagination (catalog.py)
- Session and role gate (auth.py)
- Announcements and inquiries (community.py)
- HTTP API (api.py) and CLI (main.py)
- In-memory store and seed data (database.py, fixtures.py)
"""

__version__ = "1.0.0"
