# AutoPark/api/session_manager.py

from typing import Dict, Optional
from .Models.User import User

# In-memory token store: token -> User
_SESSIONS: Dict[str, User] = {}


def add_session(token: str, user: User) -> None:
    """
    Store a user for a given session token.
    """
    _SESSIONS[token] = user


def get_session(token: str) -> Optional[User]:
    return _SESSIONS.get(token)


def update_session_user(user: User) -> None:
    """Replace the cached User for every token that belongs to `user`."""
    for token, cached in list(_SESSIONS.items()):
        if cached.id == user.id:
            _SESSIONS[token] = user


def remove_session(token: str) -> Optional[User]:
    """
    Remove a session and return the User that was stored, if any.
    """
    return _SESSIONS.pop(token, None)


def clear() -> None:
    _SESSIONS.clear()
