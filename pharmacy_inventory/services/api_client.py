"""
Backend API client

Thin JSON-over-HTTPS client for the pharmacy backend. Every call carries the
bearer token of the BackendSession the client was built with; the client never
reads the Flask session on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import requests
from flask import current_app, g, session as flask_session

from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.utils.logging_sanitizer import sanitize_dict

logger = get_logger("pharmacy_inventory.services.api_client")

SESSION_TOKEN_KEY = "api_token"
SESSION_USER_KEY = "api_user"

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT_SECONDS = 15.0


class ApiError(Exception):
    """Base class for every failure talking to the backend."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message

    def user_message(self, fallback: str) -> str:
        """Backend-provided text when there is one, the fallback otherwise."""
        return self.message or fallback


class NetworkError(ApiError):
    """The request never produced an HTTP response (timeout, refused, DNS...)."""

    def user_message(self, fallback: str) -> str:
        return fallback


class BackendError(ApiError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.message or 'no message'}"


class UnauthorizedError(BackendError):
    """401/403. Missing or rejected bearer token."""

    def user_message(self, fallback: str) -> str:
        return fallback


def extract_error_message(response) -> Optional[str]:
    """
    Pull the user-facing message out of an error response.

    The backend answers either `{"message": "..."}`, a JSON string, or a raw
    text body.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, Mapping):
        message = body.get("message")
        if message:
            return str(message)
    elif isinstance(body, str) and body.strip():
        return body.strip()

    text = (getattr(response, "text", "") or "").strip()
    if text and not text.startswith("{"):
        return text
    return None


@dataclass(frozen=True)
class BackendSession:
    """Explicit auth context threaded into ApiClient."""

    token: Optional[str] = None
    user_login: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def from_store(cls, store: Mapping[str, Any]) -> "BackendSession":
        user = store.get(SESSION_USER_KEY) or {}
        return cls(token=store.get(SESSION_TOKEN_KEY), user_login=user.get("login"))


class ApiClient:
    """JSON helpers over one HTTP transport (a requests.Session or a stand-in)."""

    def __init__(self, base_url: str, session: BackendSession, http=None,
                 timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    def request(self, method: str, path: str, *, params: Optional[Mapping[str, Any]] = None,
                json: Any = None, raw: bool = False) -> Any:
        """
        Send one request and return the decoded body.

        Args:
            method: HTTP verb
            path: Path below the API root, e.g. '/itens'
            params: Query-string parameters
            json: JSON body
            raw: Return the raw bytes instead of decoding JSON

        Returns:
            Parsed JSON, the text body when it is not JSON, bytes when raw=True,
            or None for an empty body.

        Raises:
            NetworkError: Transport failure
            UnauthorizedError: 401/403
            BackendError: Any other non-2xx answer
        """
        url = f"{self.base_url}{path}"
        if json is not None:
            logger.debug(f"{method} {path} payload={sanitize_dict(json) if isinstance(json, dict) else json}")
        else:
            logger.debug(f"{method} {path} params={dict(params or {})}")

        try:
            response = self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"Timeout calling {method} {path}: {e}")
            raise NetworkError(f"Timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Network error calling {method} {path}: {e}")
            raise NetworkError(str(e)) from e

        status = response.status_code
        if status in (401, 403):
            logger.warning(f"{method} {path} rejected with {status} for {self.session.user_login}")
            raise UnauthorizedError(status, extract_error_message(response))
        if status < 200 or status >= 300:
            message = extract_error_message(response)
            logger.info(f"{method} {path} failed with {status}: {message}")
            raise BackendError(status, message)

        if raw:
            return response.content
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def get_bytes(self, path: str, params: Optional[Mapping[str, Any]] = None) -> bytes:
        return self.request("GET", path, params=params, raw=True)

    def post(self, path: str, payload: Any = None) -> Any:
        return self.request("POST", path, json=payload)

    def put(self, path: str, payload: Any = None) -> Any:
        return self.request("PUT", path, json=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


class BackendApi:
    """
    Flask extension handing out ApiClient instances bound to the current
    request's BackendSession.

    `http_factory` builds the transport; tests replace it with a fake.
    """

    def __init__(self, app=None):
        self.http_factory: Callable[[], Any] = requests.Session
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        app.config.setdefault("API_BASE_URL", DEFAULT_BASE_URL)
        app.config.setdefault("API_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        app.extensions["backend_api"] = self

        @app.teardown_appcontext
        def close_backend_http(exception=None):
            http = g.pop("_backend_http", None)
            close = getattr(http, "close", None)
            if callable(close):
                close()

    def _http(self):
        if "_backend_http" not in g:
            g._backend_http = self.http_factory()
        return g._backend_http

    def client(self, backend_session: Optional[BackendSession] = None) -> ApiClient:
        if backend_session is None:
            backend_session = BackendSession.from_store(flask_session)
        return ApiClient(
            current_app.config["API_BASE_URL"],
            backend_session,
            http=self._http(),
            timeout=float(current_app.config["API_TIMEOUT_SECONDS"]),
        )
