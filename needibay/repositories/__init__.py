# ==============================================================================
# REPOSITORY LAYER - remote REST resources and the session store
# ==============================================================================
# ├── api_client.py             → requests wrapper, ApiError / NetworkError
# ├── base.py                   → ApiRepository (client + session token)
# ├── session_repository.py     → token/user in the Flask session
# ├── auth_repository.py        → /auth/login
# ├── admin_repository.py       → /admin/*
# ├── distributor_repository.py → /distributor/*
# └── salesperson_repository.py → /salesperson/*
# ==============================================================================

from .api_client import ApiClient, ApiError, ApiResponse, AuthenticationRequired, NetworkError, image_part
from .base import ApiRepository
from .session_repository import SessionRepository
from .auth_repository import AuthRepository
from .admin_repository import AdminRepository
from .distributor_repository import DistributorRepository
from .salesperson_repository import SalespersonRepository

__all__ = [
    'ApiClient',
    'ApiError',
    'ApiResponse',
    'AuthenticationRequired',
    'NetworkError',
    'image_part',
    'ApiRepository',
    'SessionRepository',
    'AuthRepository',
    'AdminRepository',
    'DistributorRepository',
    'SalespersonRepository',
]
