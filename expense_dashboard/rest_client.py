"""HTTP client for the hosted store's data and auth APIs.

The store exposes PostgREST-style table endpoints under ``/rest/v1`` and a
token/auth service under ``/auth/v1``. Every call returns a
:class:`StoreResult` carrying either data or a :class:`StoreError`; network
failures and non-2xx responses never raise out of this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import requests

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"
AUTH_PATH = "/auth/v1"

# (column, operator, value), e.g. ("date", "gte", "2024-01-01")
Filter = Tuple[str, str, Any]
# (column, ascending)
Order = Tuple[str, bool]


@dataclass(frozen=True)
class StoreError:
    message: str
    status: Optional[int] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class StoreResult:
    data: Any = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""

    @classmethod
    def success(cls, data: Any = None) -> "StoreResult":
        return cls(data=data)

    @classmethod
    def failure(cls, message: str, status: Optional[int] = None, code: Optional[str] = None) -> "StoreResult":
        return cls(error=StoreError(message=message, status=status, code=code))

    def map(self, func: Callable[[Any], Any]) -> "StoreResult":
        """Transform the payload of a successful result; errors pass through."""
        if self.error is not None:
            return self
        return StoreResult(data=func(self.data))


def _encode_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_filters(filters: Iterable[Filter]) -> List[Tuple[str, str]]:
    """Translate filter triples into repeated query parameters.

    Example:
        >>> build_filters([("user_id", "eq", "u1"), ("date", "gte", "2024-01-01")])
        [('user_id', 'eq.u1'), ('date', 'gte.2024-01-01')]
    """
    return [(column, f"{op}.{_encode_value(value)}") for column, op, value in filters]


def build_order(order: Sequence[Order]) -> str:
    return ",".join(f"{column}.{'asc' if ascending else 'desc'}" for column, ascending in order)


def _error_from_response(response: requests.Response) -> StoreError:
    message = ""
    code = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                message = str(body[key])
                break
        raw_code = body.get("code") or body.get("error_code")
        code = str(raw_code) if raw_code is not None else None
    if not message:
        message = response.reason or f"HTTP {response.status_code}"
    return StoreError(message=message, status=response.status_code, code=code)


class StoreClient:
    """Thin request client for one hosted store project."""

    def __init__(
        self,
        url: str,
        key: str,
        *,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url.rstrip("/")
        self.key = key
        self.timeout = timeout
        self.http = session or requests.Session()
        self.access_token: Optional[str] = None

    def _headers(self, *, prefer: Optional[str] = None, token: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {token or self.access_token or self.key}",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _table_url(self, table: str) -> str:
        return f"{self.url}{REST_PATH}/{table}"

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str],
        params: Optional[List[Tuple[str, str]]] = None,
        payload: Any = None,
    ) -> StoreResult:
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self.http.request(
                method,
                url,
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return StoreResult.failure(str(exc) or exc.__class__.__name__)

        if response.status_code >= 400:
            error = _error_from_response(response)
            logger.warning("%s %s returned %s: %s", method, url, error.status, error.message)
            return StoreResult(error=error)

        if response.status_code == 204 or not response.content:
            return StoreResult.success(None)
        try:
            return StoreResult.success(response.json())
        except ValueError:
            return StoreResult.failure("Invalid JSON in store response", status=response.status_code)

    # Data API

    def select(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Iterable[Filter] = (),
        order: Sequence[Order] = (),
        limit: Optional[int] = None,
    ) -> StoreResult:
        params = [("select", columns)] + build_filters(filters)
        if order:
            params.append(("order", build_order(order)))
        if limit is not None:
            params.append(("limit", str(limit)))
        result = self._send("GET", self._table_url(table), headers=self._headers(), params=params)
        return result.map(lambda rows: rows or [])

    def select_maybe_single(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Iterable[Filter] = (),
    ) -> StoreResult:
        """Select at most one row; more than one match is an error."""
        result = self.select(table, columns, filters=filters, limit=2)
        if not result.ok:
            return result
        rows = result.data
        if len(rows) > 1:
            return StoreResult.failure("Expected at most one row", code="PGRST116")
        return StoreResult.success(rows[0] if rows else None)

    def insert(
        self,
        table: str,
        rows: Any,
        *,
        on_conflict: Optional[Sequence[str]] = None,
    ) -> StoreResult:
        """Insert one row or a list of rows.

        With ``on_conflict`` the insert becomes an atomic upsert: a row that
        collides on those columns is updated in place.
        """
        params: List[Tuple[str, str]] = []
        prefer = "return=minimal"
        if on_conflict:
            params.append(("on_conflict", ",".join(on_conflict)))
            prefer = "resolution=merge-duplicates,return=minimal"
        return self._send(
            "POST",
            self._table_url(table),
            headers=self._headers(prefer=prefer),
            params=params or None,
            payload=rows,
        )

    def update(self, table: str, values: Dict[str, Any], *, filters: Iterable[Filter]) -> StoreResult:
        params = build_filters(filters)
        if not params:
            raise ValueError("update requires at least one filter")
        return self._send(
            "PATCH",
            self._table_url(table),
            headers=self._headers(prefer="return=minimal"),
            params=params,
            payload=values,
        )

    def delete(self, table: str, *, filters: Iterable[Filter]) -> StoreResult:
        params = build_filters(filters)
        if not params:
            raise ValueError("delete requires at least one filter")
        return self._send(
            "DELETE",
            self._table_url(table),
            headers=self._headers(prefer="return=minimal"),
            params=params,
        )

    # Auth API

    def auth_post(
        self,
        path: str,
        payload: Any = None,
        *,
        params: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
    ) -> StoreResult:
        return self._send(
            "POST",
            f"{self.url}{AUTH_PATH}/{path.lstrip('/')}",
            headers=self._headers(token=token),
            params=list(params.items()) if params else None,
            payload=payload,
        )
