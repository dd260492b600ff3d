import os
import sys

import pytest

# ensure project root is on sys.path when running from tests/ folder
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault('NEEDIBAY_CONFIG', 'needibay.config.TestConfig')

from needibay.app_container import AppContainer, get_container
from needibay.main import app as flask_app
from needibay.repositories.api_client import ApiClient, ApiResponse, AuthenticationRequired

CSRF = 'test-csrf-token'


class FakeApiClient(ApiClient):
    """
    ApiClient that never touches the network.

    responses maps (METHOD, path) to an ApiResponse, an exception to raise
    or a callable(call) returning either. Unmatched calls answer 200 [].
    """

    def __init__(self):
        super().__init__('http://api.test')
        self.responses = {}
        self.calls = []

    def on(self, method, path, status=200, data=None, raises=None):
        self.responses[(method, path)] = raises if raises is not None else ApiResponse(status, data)
        return self

    def request(self, method, path, token=None, json=None, data=None, files=None, auth=True):
        if auth and not token:
            raise AuthenticationRequired('No authorization token found')
        call = {
            'method': method, 'path': path, 'token': token,
            'json': json, 'data': data, 'files': files,
        }
        self.calls.append(call)
        result = self.responses.get((method, path), ApiResponse(200, []))
        if callable(result) and not isinstance(result, ApiResponse):
            result = result(call)
        if isinstance(result, Exception):
            raise result
        return result

    def last(self, method=None, path=None):
        for call in reversed(self.calls):
            if (method is None or call['method'] == method) and (path is None or call['path'] == path):
                return call
        return None


@pytest.fixture
def fake_api():
    return FakeApiClient()


@pytest.fixture
def app(fake_api):
    AppContainer.reset_instance()
    get_container(api_client=fake_api)
    flask_app.config.update(TESTING=True)
    yield flask_app
    AppContainer.reset_instance()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def request_ctx(app):
    with app.test_request_context('/'):
        yield


def token_provider():
    return 'tok'


def login_as(client, role, user_id=7, email='user@example.com'):
    """Put a logged-in user straight into the session; returns the CSRF token."""
    with client.session_transaction() as sess:
        sess['token'] = 'tok'
        sess['user'] = {'id': user_id, 'email': email, 'role': role, 'name': 'Test User'}
        sess['csrf_token'] = CSRF
    return CSRF
