import logging
import secrets
import threading
from typing import Dict, Iterable, Optional, Tuple, Union

from gomclick.database import InMemoryStore, get_db
from gomclick.errors import InvalidCredentials, PermissionDenied
from gomclick.models import Role, User
from gomclick.utils.session_store import (
    AUTO_LOGIN_KEY,
    SAVED_EMAIL_KEY,
    SAVED_PASSWORD_KEY,
    USER_KEY,
    SessionStore,
)

logger = logging.getLogger(__name__)

RoleSpec = Union[Role, str, Iterable[Union[Role, str]]]


def authenticate(email: str, password: str, store: Optional[InMemoryStore] = None) -> User:
    """Check the credential table and return the user record without its password."""
    store = store if store is not None else get_db()
    entry = store.credentials.get((email or "").strip().lower())
    if entry is None or not secrets.compare_digest(entry[0].encode(), (password or "").encode()):
        logger.warning(f"Failed login for {email!r}")
        raise InvalidCredentials()
    return store.users[entry[1]]


def _roles(roles: RoleSpec) -> set:
    if isinstance(roles, (Role, str)):
        roles = [roles]
    return {Role(r) for r in roles}


def has_role(user: Optional[User], roles: RoleSpec) -> bool:
    """True iff there is a user and their role is one of ``roles``."""
    if user is None:
        return False
    return user.role in _roles(roles)


def require_role(user: Optional[User], roles: RoleSpec) -> User:
    if not has_role(user, roles):
        raise PermissionDenied("이 기능을 사용할 권한이 없습니다.")
    return user


class SessionManager:
    """Opaque bearer tokens for the HTTP API, held in memory."""

    def __init__(self, store: Optional[InMemoryStore] = None) -> None:
        self.store = store
        self._sessions: Dict[str, str] = {}
        self._lock = threading.Lock()

    def login(self, email: str, password: str) -> Tuple[str, User]:
        user = authenticate(email, password, self.store)
        token = secrets.token_hex(16)
        with self._lock:
            self._sessions[token] = user.id
        logger.info(f"{user.id} logged in")
        return token, user

    def logout(self, token: Optional[str]) -> bool:
        with self._lock:
            user_id = self._sessions.pop(token or "", None)
        if user_id:
            logger.info(f"{user_id} logged out")
        return user_id is not None

    def current_user(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        with self._lock:
            user_id = self._sessions.get(token)
        if user_id is None:
            return None
        store = self.store if self.store is not None else get_db()
        return store.users.get(user_id)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


def remember_login(session_store: SessionStore, user: User, email: str,
                   remember_email: bool = False, auto_login: bool = False) -> None:
    """Persist the signed-in user and the login form preferences."""
    session_store.set(USER_KEY, user.to_dict())
    if remember_email:
        session_store.set(SAVED_EMAIL_KEY, email)
    else:
        session_store.remove(SAVED_EMAIL_KEY)
    session_store.set(AUTO_LOGIN_KEY, bool(auto_login))


def restore(session_store: SessionStore) -> Optional[User]:
    """Rebuild the signed-in user from the stored record, dropping it if malformed."""
    record = session_store.get(USER_KEY)
    if record is None:
        return None
    try:
        return User.from_dict(record)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Discarding stored session record: {e}")
        session_store.remove(USER_KEY)
        return None


def forget_login(session_store: SessionStore) -> None:
    # The saved email survives logout
    session_store.remove(USER_KEY, AUTO_LOGIN_KEY, SAVED_PASSWORD_KEY)
    logger.info("Session cleared")
