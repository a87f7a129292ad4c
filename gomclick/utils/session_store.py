"""
Local session storage for the gomclick CLI.
Keeps the signed-in user record and login preferences between invocations.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from gomclick.config import settings

logger = logging.getLogger(__name__)

USER_KEY = "gomclick_user"
SAVED_EMAIL_KEY = "gomclick_saved_email"
AUTO_LOGIN_KEY = "gomclick_auto_login"
SAVED_PASSWORD_KEY = "gomclick_saved_password"

KNOWN_KEYS = (USER_KEY, SAVED_EMAIL_KEY, AUTO_LOGIN_KEY, SAVED_PASSWORD_KEY)


class SessionStore:
    """A flat key/value JSON file, one per session directory."""

    def __init__(self, store_dir: Optional[Path] = None):
        self.store_dir = Path(store_dir) if store_dir else settings.session_dir
        self.store_file = self.store_dir / "session.json"
        self.data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load stored values, discarding a file that cannot be parsed."""
        if not self.store_file.exists():
            self.data = {}
            return
        try:
            with open(self.store_file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Discarding unreadable session store {self.store_file}: {e}")
            self.data = {}
            return
        self.data = loaded if isinstance(loaded, dict) else {}

    def save(self) -> None:
        self.store_dir.mkdir(parents=True, exist_ok=True)
        with open(self.store_file, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2, ensure_ascii=False)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if key == SAVED_PASSWORD_KEY:
            raise ValueError("Passwords are never written to the session store")
        self.data[key] = value
        self.save()

    def remove(self, *keys: str) -> None:
        changed = False
        for key in keys:
            if key in self.data:
                del self.data[key]
                changed = True
        if changed:
            self.save()

    def clear(self) -> None:
        self.data = {}
        if self.store_file.exists():
            self.store_file.unlink()
