# ==============================================================================
# DEPENDENCY CONTAINER - repositories and services
# ==============================================================================
# Single place where the API client, repositories and services are built.
# Routes ask the container for a service; tests replace the API client:
#
#     AppContainer.reset_instance()
#     get_container(api_client=FakeApiClient())
# ==============================================================================

from typing import Optional

from needibay.repositories import (
    AdminRepository,
    ApiClient,
    AuthRepository,
    DistributorRepository,
    SalespersonRepository,
    SessionRepository,
)
from needibay.services import (
    AdminService,
    AuthService,
    CartService,
    DistributorService,
    OrderReportService,
    SalespersonService,
)


class AppContainer:
    """
    Application dependency container (singleton).

    Usage:
        container = AppContainer(api_url='https://api.example.com/api')
        orders = container.admin_service.list_orders()
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, api_url: str = None, api_timeout: float = 15, api_client: ApiClient = None):
        """
        Args:
            api_url: base URL of the REST API
            api_timeout: request timeout in seconds
            api_client: ready client to use instead of building one
        """
        if self._initialized:
            return

        self._api_url = api_url or 'http://localhost:3000/api'
        self._api_timeout = api_timeout
        self._api_client: Optional[ApiClient] = api_client

        # Repositories (lazy)
        self._session_repo: Optional[SessionRepository] = None
        self._auth_repo: Optional[AuthRepository] = None
        self._admin_repo: Optional[AdminRepository] = None
        self._distributor_repo: Optional[DistributorRepository] = None
        self._salesperson_repo: Optional[SalespersonRepository] = None

        # Services (lazy)
        self._auth_service: Optional[AuthService] = None
        self._admin_service: Optional[AdminService] = None
        self._distributor_service: Optional[DistributorService] = None
        self._cart_service: Optional[CartService] = None
        self._salesperson_service: Optional[SalespersonService] = None
        self._order_report_service: Optional[OrderReportService] = None

        self._initialized = True

    # =========================================================================
    # API CLIENT / REPOSITORIES
    # =========================================================================

    @property
    def api_client(self) -> ApiClient:
        if self._api_client is None:
            self._api_client = ApiClient(self._api_url, timeout=self._api_timeout)
        return self._api_client

    @property
    def session_repo(self) -> SessionRepository:
        if self._session_repo is None:
            self._session_repo = SessionRepository()
        return self._session_repo

    @property
    def auth_repo(self) -> AuthRepository:
        if self._auth_repo is None:
            self._auth_repo = AuthRepository(self.api_client)
        return self._auth_repo

    @property
    def admin_repo(self) -> AdminRepository:
        if self._admin_repo is None:
            self._admin_repo = AdminRepository(self.api_client, self.session_repo.get_token)
        return self._admin_repo

    @property
    def distributor_repo(self) -> DistributorRepository:
        if self._distributor_repo is None:
            self._distributor_repo = DistributorRepository(self.api_client, self.session_repo.get_token)
        return self._distributor_repo

    @property
    def salesperson_repo(self) -> SalespersonRepository:
        if self._salesperson_repo is None:
            self._salesperson_repo = SalespersonRepository(self.api_client, self.session_repo.get_token)
        return self._salesperson_repo

    # =========================================================================
    # SERVICES
    # =========================================================================

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            self._auth_service = AuthService(self.auth_repo, self.session_repo)
        return self._auth_service

    @property
    def admin_service(self) -> AdminService:
        if self._admin_service is None:
            self._admin_service = AdminService(self.admin_repo)
        return self._admin_service

    @property
    def distributor_service(self) -> DistributorService:
        if self._distributor_service is None:
            self._distributor_service = DistributorService(self.distributor_repo)
        return self._distributor_service

    @property
    def cart_service(self) -> CartService:
        if self._cart_service is None:
            self._cart_service = CartService()
        return self._cart_service

    @property
    def salesperson_service(self) -> SalespersonService:
        if self._salesperson_service is None:
            self._salesperson_service = SalespersonService(self.salesperson_repo, self.cart_service)
        return self._salesperson_service

    @property
    def order_report_service(self) -> OrderReportService:
        if self._order_report_service is None:
            self._order_report_service = OrderReportService()
        return self._order_report_service

    # =========================================================================
    # UTILITIES
    # =========================================================================

    def reset(self) -> None:
        """Drop every built instance (the API client included)."""
        self._api_client = None

        self._session_repo = None
        self._auth_repo = None
        self._admin_repo = None
        self._distributor_repo = None
        self._salesperson_repo = None

        self._auth_service = None
        self._admin_service = None
        self._distributor_service = None
        self._cart_service = None
        self._salesperson_service = None
        self._order_report_service = None

    @classmethod
    def get_instance(cls, **kwargs) -> 'AppContainer':
        if cls._instance is None:
            return cls(**kwargs)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Remove the singleton (tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(**kwargs) -> AppContainer:
    """Global container; keyword arguments only count on the first call."""
    return AppContainer.get_instance(**kwargs)
