# ==============================================================================
# BASE REPOSITORY - common access to the remote API
# ==============================================================================

from abc import ABC
from typing import Any, Callable, List, Optional

from needibay.repositories.api_client import ApiClient, ApiResponse


class ApiRepository(ABC):
    """
    Base class for every remote resource.
    Holds the API client and reads the session token before each call.

    Subclasses only name endpoints; status checks and messages belong to
    the services.
    """

    def __init__(self, client: ApiClient, token_provider: Callable[[], Optional[str]]):
        """
        Args:
            client: shared ApiClient
            token_provider: returns the current bearer token (None when logged out)
        """
        self.client = client
        self._token_provider = token_provider

    @property
    def token(self) -> Optional[str]:
        return self._token_provider()

    def _get(self, path: str) -> ApiResponse:
        return self.client.get(path, token=self.token)

    def _post(self, path: str, **kwargs) -> ApiResponse:
        return self.client.post(path, token=self.token, **kwargs)

    def _put(self, path: str, **kwargs) -> ApiResponse:
        return self.client.put(path, token=self.token, **kwargs)

    def _delete(self, path: str) -> ApiResponse:
        return self.client.delete(path, token=self.token)

    @staticmethod
    def _as_list(data: Any, key: Optional[str] = None) -> List[dict]:
        """Collection body as a list (optionally nested under ``key``)."""
        if key and isinstance(data, dict):
            data = data.get(key)
        return list(data) if isinstance(data, list) else []
