# ==============================================================================
# AUTH SERVICE
# ==============================================================================
# Login, logout and the current user. The session store is the single source
# of the logged-in state; nothing else is cached.
# ==============================================================================

import logging
from typing import Any, Dict, Optional

from needibay.models.entities import Role, User
from needibay.models.schemas import LoginForm, validate_form
from needibay.repositories.api_client import ApiError, NetworkError
from needibay.repositories.auth_repository import AuthRepository
from needibay.repositories.session_repository import SessionRepository
from needibay.services.results import failure, invalid, success

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication for the three roles.

    Each role lands on its own dashboard (Flask endpoint names).
    """

    DASHBOARDS = {
        Role.ADMIN: 'admin_dashboard',
        Role.DISTRIBUTOR: 'distributor_dashboard',
        Role.SALESPERSON: 'salesperson_dashboard',
    }

    def __init__(self, auth_repo: AuthRepository, session_repo: SessionRepository):
        self.auth_repo = auth_repo
        self.session_repo = session_repo

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in against /auth/login and keep token + user in the session.

        Returns:
            {'ok': True, 'user': User, 'dashboard': endpoint} or {'ok': False, 'error': ...}
        """
        form, errors = validate_form(LoginForm, {'email': email, 'password': password})
        if errors:
            return invalid(errors)

        try:
            resp = self.auth_repo.login(form.email, form.password)
        except NetworkError:
            logger.warning("Login failed for %s: server unreachable", form.email)
            return failure('Please check your internet connection.')
        except ApiError as e:
            logger.info("Login rejected for %s (status %s)", form.email, e.status_code)
            return failure('Please check your credentials.')

        data = resp.data if isinstance(resp.data, dict) else {}
        token = data.get('token')
        if resp.status_code != 200 or not token or not data.get('user'):
            return failure('Please check your credentials.')

        user = User.from_dict(data['user'])
        dashboard = self.dashboard_for(user)
        if dashboard is None:
            logger.warning("Login for %s returned unknown role %r", user.email, user.role)
            return failure('Unknown role')

        self.session_repo.save(user, token)
        logger.info("User %s logged in as %s", user.email, user.role)
        return success(f"Welcome, {user.name or user.email}.", user=user, dashboard=dashboard)

    def logout(self) -> None:
        user = self.session_repo.get_user()
        self.session_repo.clear()
        if user:
            logger.info("User %s logged out", user.email)

    def current_user(self) -> Optional[User]:
        return self.session_repo.get_user()

    def is_authenticated(self) -> bool:
        return bool(self.session_repo.get_token()) and self.current_user() is not None

    def dashboard_for(self, user: Optional[User]) -> Optional[str]:
        if user is None or user.role_enum is None:
            return None
        return self.DASHBOARDS[user.role_enum]
