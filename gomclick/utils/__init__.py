"""gomclick - helper package

- Input validation (validators.py)
- CLI output formatting (ui_helpers.py)
- Local session storage (session_store.py)
"""
