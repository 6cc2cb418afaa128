"""
Client for the hosted Supabase-style backend: GoTrue auth and PostgREST tables.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from rfi_tracker.backend.base import BackendError, Filters, Row, TABLES
from rfi_tracker.core.config import Settings


logger = logging.getLogger(__name__)


def _eq_params(filters: Optional[Filters]) -> Dict[str, str]:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return str(body)


class SupabaseClient:
    """Holds the session token the way the browser client caches it."""

    def __init__(self, url: str, anon_key: str, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        if not url or not anon_key:
            raise ValueError("supabase_url and supabase_anon_key are required")
        self.base_url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.http = session or requests.Session()
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseClient":
        return cls(settings.supabase_url, settings.supabase_anon_key, timeout=settings.request_timeout)

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.access_token or self.anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _send(self, method: str, path: str, *, params=None, json=None,
              headers: Optional[Dict[str, str]] = None) -> Any:
        url = self.base_url + path
        try:
            response = self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Backend request %s %s failed: %s", method, path, exc)
            raise BackendError(f"Error calling backend at {self.base_url}: {exc}") from exc

        if not response.ok:
            message = _error_message(response)
            logger.error("Backend %s %s returned %s: %s", method, path, response.status_code, message)
            raise BackendError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request, refreshing an expired session once on a 401."""
        try:
            return self._send(method, path, **kwargs)
        except BackendError as exc:
            if exc.status_code != 401 or not self.refresh_token or path.startswith("/auth/v1/token"):
                raise
            if not self._refresh_session():
                raise
        return self._send(method, path, **kwargs)

    # Auth

    def _start_session(self, payload: Any) -> Row:
        if not isinstance(payload, dict):
            raise BackendError("Unexpected auth response")
        if payload.get("access_token"):
            self.access_token = payload["access_token"]
            self.refresh_token = payload.get("refresh_token")
        user = payload.get("user") if "user" in payload else payload
        if not isinstance(user, dict) or not user.get("id"):
            raise BackendError("Auth response did not include a user")
        return user

    def sign_up(self, email: str, password: str) -> Row:
        payload = self._request("POST", "/auth/v1/signup", json={"email": email, "password": password})
        return self._start_session(payload)

    def sign_in(self, email: str, password: str) -> Row:
        payload = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return self._start_session(payload)

    def _refresh_session(self) -> bool:
        try:
            payload = self._send(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": self.refresh_token},
            )
            self._start_session(payload)
        except BackendError as exc:
            logger.warning("Session refresh failed: %s", exc.message)
            self.access_token = None
            self.refresh_token = None
            return False
        logger.info("Refreshed backend session")
        return True

    def sign_out(self) -> None:
        """End the session; an already invalid session counts as signed out."""
        if self.access_token is None:
            return
        try:
            self._send("POST", "/auth/v1/logout")
        except BackendError as exc:
            if exc.status_code not in (401, 403, 404):
                raise
            logger.info("Session already invalid on sign out: %s", exc.message)
        finally:
            self.access_token = None
            self.refresh_token = None

    def get_user(self) -> Optional[Row]:
        if self.access_token is None:
            return None
        try:
            return self._request("GET", "/auth/v1/user")
        except BackendError as exc:
            if exc.status_code in (401, 403):
                self.access_token = None
                self.refresh_token = None
                return None
            raise

    # Tables

    def _filtered(self, filters: Filters) -> Dict[str, str]:
        if not filters:
            raise BackendError("Refusing to change rows without a filter")
        return _eq_params(filters)

    def _table_path(self, table: str) -> str:
        if table not in TABLES:
            raise BackendError(f"Unknown table: {table}")
        return f"/rest/v1/{table}"

    def select(self, table: str, filters: Optional[Filters] = None) -> List[Row]:
        params = {"select": "*", **_eq_params(filters)}
        return self._request("GET", self._table_path(table), params=params) or []

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        return self._request(
            "POST",
            self._table_path(table),
            json=list(rows),
            headers={"Prefer": "return=representation"},
        ) or []

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        return self._request(
            "PATCH",
            self._table_path(table),
            params=self._filtered(filters),
            json=patch,
            headers={"Prefer": "return=representation"},
        ) or []

    def delete(self, table: str, filters: Filters) -> None:
        self._request("DELETE", self._table_path(table), params=self._filtered(filters))

    def close(self) -> None:
        self.http.close()
