# ==============================================================================
# REST API CLIENT
# ==============================================================================
# Thin wrapper over requests for the remote server. Every screen goes through
# here: JSON or multipart body in, (status, decoded JSON) out.
#
# ERRORS:
#   ApiError               -> the server answered with a non-2xx status
#   NetworkError           -> no answer at all (connection refused, timeout)
#   AuthenticationRequired -> no token in the session for an authenticated call
#
# No retries, no de-duplication: one call per user action.
# ==============================================================================

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from needibay.request_logger import log_api_call


class ApiError(Exception):
    """The server rejected a request."""

    def __init__(self, message: str, status_code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.data = data

    @property
    def server_message(self) -> Optional[str]:
        """The ``message`` field of the error body, when the server sent one."""
        if isinstance(self.data, dict):
            message = self.data.get('message')
            if message:
                return str(message)
        return None


class NetworkError(ApiError):
    """The server could not be reached."""


class AuthenticationRequired(Exception):
    """An authenticated call was attempted without a session token.

    Not an ApiError: services let it through so the route can send the
    user back to the login page.
    """


@dataclass
class ApiResponse:
    status_code: int
    data: Any = None


class ApiClient:
    """
    Client for the Needibay REST API.

    Usage:
        client = ApiClient('https://api.example.com')
        resp = client.request('GET', '/admin/get-orders', token=token)
        orders = resp.data
    """

    def __init__(self, base_url: str, timeout: float = 15, session: Optional[requests.Session] = None):
        """
        Args:
            base_url: server root, e.g. https://api.example.com/api
            timeout: seconds before a call is abandoned
            session: requests session to reuse (a new one by default)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> ApiResponse:
        """
        Send one request.

        Args:
            method: HTTP verb
            path: endpoint path, e.g. /admin/create-distributor
            token: bearer token (required when auth is True)
            json: JSON body
            data: form fields for multipart/form-data bodies
            files: file parts for multipart/form-data bodies
            auth: False only for /auth/login

        Returns:
            ApiResponse with status code and decoded JSON (None when empty)

        Raises:
            AuthenticationRequired, NetworkError, ApiError
        """
        headers = {'Accept': 'application/json'}
        if auth:
            if not token:
                raise AuthenticationRequired('No authorization token found')
            headers['Authorization'] = f"Bearer {token}"

        url = self.url(path)
        start = time.perf_counter()
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=json,
                data=data,
                files=files,
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            log_api_call(method, url, None, (time.perf_counter() - start) * 1000)
            raise NetworkError('Please check your internet connection.') from exc
        except requests.RequestException as exc:
            log_api_call(method, url, None, (time.perf_counter() - start) * 1000)
            raise ApiError(str(exc)) from exc

        log_api_call(method, url, response.status_code, (time.perf_counter() - start) * 1000)

        body = self._decode(response)
        if not response.ok:
            message = body.get('message') if isinstance(body, dict) else None
            raise ApiError(
                message or f"Request failed with status {response.status_code}",
                status_code=response.status_code,
                data=body,
            )
        return ApiResponse(status_code=response.status_code, data=body)

    @staticmethod
    def _decode(response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # Shorthands ---------------------------------------------------------------

    def get(self, path: str, token: Optional[str] = None) -> ApiResponse:
        return self.request('GET', path, token=token)

    def post(self, path: str, token: Optional[str] = None, **kwargs) -> ApiResponse:
        return self.request('POST', path, token=token, **kwargs)

    def put(self, path: str, token: Optional[str] = None, **kwargs) -> ApiResponse:
        return self.request('PUT', path, token=token, **kwargs)

    def delete(self, path: str, token: Optional[str] = None) -> ApiResponse:
        return self.request('DELETE', path, token=token)


IMAGE_CONTENT_TYPES = {
    'png': 'image/png',
    'gif': 'image/gif',
    'webp': 'image/webp',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
}


def image_part(filename: str, stream: Any) -> tuple:
    """
    Multipart file tuple for an uploaded image.
    The content type follows the extension, image/jpeg when unknown.
    """
    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    return filename, stream, IMAGE_CONTENT_TYPES.get(ext, 'image/jpeg')
