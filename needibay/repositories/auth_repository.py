from needibay.repositories.api_client import ApiClient, ApiResponse


class AuthRepository:
    """/auth endpoints (no bearer token)."""

    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, email: str, password: str) -> ApiResponse:
        return self.client.post('/auth/login', json={'email': email, 'password': password}, auth=False)
