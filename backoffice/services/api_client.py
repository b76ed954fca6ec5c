"""Backend REST client shared by every service."""
import logging
import requests
from typing import Dict, Any, Optional

from backoffice.exceptions import ApiError, TransportError, UnauthorizedError

logger = logging.getLogger(__name__)


class ApiSession:
    """
    Connection context for one authenticated user.

    Built once per request from the Flask session and handed to the
    client explicitly; nothing reads the token from ambient storage.
    """

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def __repr__(self):
        return f"<ApiSession(base_url={self.base_url}, authenticated={self.is_authenticated})>"


class BackendClient:
    """
    Thin JSON client for the back-office REST API.

    Every endpoint answers with the envelope ``{success, data, message}``.
    Network failures and bodies that are not such an envelope become a
    TransportError; ``success: false`` becomes an ApiError carrying the
    server message verbatim.
    """

    def __init__(self, api_session: ApiSession, http: Optional[requests.Session] = None):
        self.api_session = api_session
        self.http = http or requests.Session()

    def send(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Perform one HTTP call and return the decoded envelope.

        Does not look at the success flag; see call().

        Raises:
            TransportError: network failure or malformed response
            UnauthorizedError: the backend refused the token (HTTP 401)
        """
        url = f"{self.api_session.base_url}{endpoint}"
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ''}

        logger.info(f"[API] {method} {endpoint}")

        try:
            response = self.http.request(
                method,
                url,
                params=params or None,
                json=payload,
                headers=self.api_session.headers,
                timeout=self.api_session.timeout
            )
        except requests.RequestException as e:
            logger.error(f"[API] {method} {endpoint} failed: {e}")
            raise TransportError()

        try:
            envelope = response.json()
        except ValueError:
            envelope = None

        if response.status_code == 401:
            # Proxies may answer 401 with an HTML page; it is still a refused token
            message = envelope.get('message') if isinstance(envelope, dict) else None
            logger.warning(f"[API] {method} {endpoint} refused the token")
            raise UnauthorizedError(message or 'Session expirée, veuillez vous reconnecter')

        if envelope is None:
            logger.error(f"[API] {method} {endpoint} returned non-JSON body (HTTP {response.status_code})")
            raise TransportError()

        if not isinstance(envelope, dict) or 'success' not in envelope:
            logger.error(f"[API] {method} {endpoint} returned an unexpected body (HTTP {response.status_code})")
            raise TransportError()

        return envelope

    def call(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Like send(), but a ``success: false`` envelope raises.

        Raises:
            ApiError: the backend rejected the request
        """
        envelope = self.send(method, endpoint, params=params, payload=payload)
        if not envelope.get('success'):
            message = envelope.get('message') or 'Requête refusée par le serveur'
            logger.warning(f"[API] {method} {endpoint} rejected: {message}")
            raise ApiError(message)
        return envelope

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.call('GET', endpoint, params=params)

    def post(self, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.call('POST', endpoint, payload=payload)

    def patch(self, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.call('PATCH', endpoint, payload=payload)

    def delete(self, endpoint: str) -> Dict[str, Any]:
        return self.call('DELETE', endpoint)
