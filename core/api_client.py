"""HTTP access to the pharmacy REST backend."""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from core.constants import API_BASE_URL, API_TIMEOUT_SECONDS
from core.session import SessionContext

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request the backend rejected or that never reached it."""

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


class AuthenticationError(ApiError):
    """HTTP 401: token missing, invalid or expired."""


def _error_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    if isinstance(body, str):
        return body
    return None


class ApiClient:
    """Thin wrapper over ``requests.Session`` bound to one SessionContext.

    Adds the bearer token to every request and turns non-2xx responses into
    :class:`ApiError`. A 401 ends the session before raising.
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
        self.http.headers.update({"Content-Type": "application/json"})

    def _headers(self) -> dict:
        if self.session.token:
            return {"Authorization": f"Bearer {self.session.token}"}
        return {}

    def request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("%s %s", method, url)
        try:
            response = self.http.request(
                method, url, json=json, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("Request %s %s failed: %s", method, url, e)
            raise ApiError("Could not reach the server") from e

        if response.status_code == 401:
            logger.warning("Session rejected by the server (%s %s)", method, url)
            self.session.clear()
            raise AuthenticationError(
                _error_message(response) or "Session expired, please log in again",
                status=401,
            )
        if not response.ok:
            message = _error_message(response) or f"Request failed ({response.status_code})"
            details = None
            try:
                body = response.json()
                if isinstance(body, dict):
                    details = body.get("details")
            except ValueError:
                pass
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            raise ApiError(message, status=response.status_code, details=details)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
