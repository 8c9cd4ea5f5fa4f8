# backend/utils/backend_client.py
"""
Async client for the hosted backend (auth, tables, RPC and storage).

The hosted service exposes GoTrue under /auth/v1, PostgREST under /rest/v1 and
object storage under /storage/v1. A BackendClient speaks for the caller (anon key
plus the caller's access token, so row-level security applies); an AdminClient
uses the service-role key and may manage accounts.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

logger = logging.getLogger(__name__)

# PostgreSQL error raised when a row is still referenced by another table
FOREIGN_KEY_VIOLATION = "23503"


def search_term(value: str) -> str:
    """User text made safe for a PostgREST or=(...) expression."""
    return "".join(ch for ch in (value or "") if ch not in ",()").strip()


class BackendError(Exception):
    """A call to the hosted backend failed."""

    def __init__(self, message: str, status_code: int = 500, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def is_foreign_key_violation(self) -> bool:
        return self.code == FOREIGN_KEY_VIOLATION or "violates foreign key constraint" in self.message


def _error_from_response(response: httpx.Response) -> BackendError:
    # GoTrue and PostgREST disagree on the error field name
    message, code = None, None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
        )
        code = body.get("code") or body.get("error_code")
    if not message:
        message = response.text or f"HTTP {response.status_code}"
    return BackendError(str(message), status_code=response.status_code, code=str(code) if code else None)


class TableQuery:
    """Chainable PostgREST query for a single table."""

    def __init__(self, client: "BackendClient", table: str):
        self._client = client
        self._table = table
        self._params: List[tuple] = []
        self._columns = "*"
        self._single = False
        self._maybe_single = False

    # --- filters ---
    def select(self, columns: str = "*") -> "TableQuery":
        self._columns = columns
        return self

    def _filter(self, column: str, op: str, value: Any) -> "TableQuery":
        self._params.append((column, f"{op}.{value}"))
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        if isinstance(value, bool):
            value = str(value).lower()
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "neq", value)

    def lt(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "lt", value)

    def gte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "gte", value)

    def ilike(self, column: str, pattern: str) -> "TableQuery":
        return self._filter(column, "ilike", pattern)

    def in_(self, column: str, values: Iterable[Any]) -> "TableQuery":
        joined = ",".join(str(v) for v in values)
        return self._filter(column, "in", f"({joined})")

    def or_(self, expression: str) -> "TableQuery":
        self._params.append(("or", f"({expression})"))
        return self

    # --- modifiers ---
    def order(self, column: str, desc: bool = False) -> "TableQuery":
        self._params.append(("order", f"{column}.{'desc' if desc else 'asc'}"))
        return self

    def limit(self, count: int) -> "TableQuery":
        self._params.append(("limit", str(count)))
        return self

    def range(self, start: int, end: int) -> "TableQuery":
        """Inclusive row range, as used for paging."""
        self._params.append(("offset", str(start)))
        self._params.append(("limit", str(end - start + 1)))
        return self

    def single(self) -> "TableQuery":
        self._single = True
        return self

    def maybe_single(self) -> "TableQuery":
        self._maybe_single = True
        return self

    # --- execution ---
    @property
    def _path(self) -> str:
        return f"/rest/v1/{self._table}"

    def _filters_only(self) -> List[tuple]:
        return [p for p in self._params if p[0] not in ("order", "limit", "offset")]

    async def execute(self) -> Any:
        params = [("select", self._columns)] + self._params
        headers = {}
        if self._single:
            headers["Accept"] = "application/vnd.pgrst.object+json"
        data = await self._client.request("GET", self._path, params=params, headers=headers)
        if self._maybe_single:
            return data[0] if data else None
        return data

    async def insert(self, rows: Any, returning: bool = True) -> Any:
        headers = {"Prefer": "return=representation" if returning else "return=minimal"}
        return await self._client.request("POST", self._path, json=rows, headers=headers)

    async def update(self, values: Dict[str, Any], returning: bool = True) -> Any:
        filters = self._filters_only()
        if not filters:
            raise ValueError("update() requires at least one filter")
        headers = {"Prefer": "return=representation" if returning else "return=minimal"}
        return await self._client.request("PATCH", self._path, params=filters, json=values, headers=headers)

    async def upsert(self, rows: Any, returning: bool = True) -> Any:
        prefer = "resolution=merge-duplicates," + ("return=representation" if returning else "return=minimal")
        return await self._client.request("POST", self._path, json=rows, headers={"Prefer": prefer})

    async def delete(self) -> Any:
        filters = self._filters_only()
        if not filters:
            raise ValueError("delete() requires at least one filter")
        return await self._client.request("DELETE", self._path, params=filters)


class BackendClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(self, method: str, path: str, *, params=None, json=None, headers=None, content=None) -> Any:
        try:
            response = await self._http.request(
                method, path, params=params, json=json, content=content, headers=self._headers(headers)
            )
        except httpx.RequestError as e:
            logger.error(f"Backend request error {method} {path}: {e}")
            raise BackendError(f"Backend unreachable: {e}", status_code=502) from e

        if response.status_code >= 400:
            error = _error_from_response(response)
            logger.warning(f"Backend {method} {path} failed ({response.status_code}): {error.message}")
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    # ---- auth ----
    async def get_user(self) -> Optional[dict]:
        """Return the session user for the current access token, or None."""
        if not self.access_token:
            return None
        try:
            return await self.request("GET", "/auth/v1/user")
        except BackendError as e:
            if e.status_code in (401, 403, 404):
                return None
            raise

    async def sign_in_with_password(self, email: str, password: str) -> dict:
        return await self.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    async def sign_out(self) -> None:
        if self.access_token:
            await self.request("POST", "/auth/v1/logout")

    # ---- data ----
    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    async def rpc(self, function: str, params: Optional[Dict[str, Any]] = None, single: bool = False) -> Any:
        headers = {"Accept": "application/vnd.pgrst.object+json"} if single else None
        return await self.request("POST", f"/rest/v1/rpc/{function}", json=params or {}, headers=headers)

    # ---- storage ----
    async def upload(self, bucket: str, path: str, content: bytes, content_type: str = "application/octet-stream") -> Any:
        return await self.request(
            "POST",
            f"/storage/v1/object/{bucket}/{path}",
            content=content,
            headers={"Content-Type": content_type},
        )

    async def remove(self, bucket: str, paths: List[str]) -> Any:
        return await self.request("DELETE", f"/storage/v1/object/{bucket}", json={"prefixes": paths})

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"


class AdminClient(BackendClient):
    """Privileged client bypassing row-level security. Server side only."""

    def __init__(self, base_url: str, service_role_key: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(base_url, service_role_key, access_token=None, timeout=timeout, transport=transport)

    async def create_user(self, email: str, password: str, email_confirm: bool = True) -> dict:
        return await self.request(
            "POST",
            "/auth/v1/admin/users",
            json={"email": email, "password": password, "email_confirm": email_confirm},
        )

    async def update_user_by_id(self, user_id: str, attributes: Dict[str, Any]) -> dict:
        return await self.request("PUT", f"/auth/v1/admin/users/{user_id}", json=attributes)

    async def delete_user(self, user_id: str) -> None:
        await self.request("DELETE", f"/auth/v1/admin/users/{user_id}")
