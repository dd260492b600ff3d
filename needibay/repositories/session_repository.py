# ==============================================================================
# SESSION REPOSITORY - token and user of the logged-in account
# ==============================================================================
# The only local state of the application, kept in the signed Flask session
# cookie under the keys 'token' and 'user'. Read before every API call, no
# staleness handling.
# ==============================================================================

from typing import Optional

from flask import session

from needibay.models.entities import User

TOKEN_KEY = 'token'
USER_KEY = 'user'


class SessionRepository:
    """Key-value access to the session token and user."""

    def get_token(self) -> Optional[str]:
        return session.get(TOKEN_KEY)

    def get_user(self) -> Optional[User]:
        data = session.get(USER_KEY)
        if not data:
            return None
        return User.from_dict(data)

    def save(self, user: User, token: str) -> None:
        session.permanent = True
        session[TOKEN_KEY] = token
        session[USER_KEY] = user.to_dict()

    def clear(self) -> None:
        session.pop(TOKEN_KEY, None)
        session.pop(USER_KEY, None)
