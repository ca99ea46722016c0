# catalog/client.py
"""
Thin JSON client for the catalog API plus the read-through query cache the
front end keeps between requests.

Reads go through QueryCache (keyed by endpoint path, five minute TTL); any
successful write invalidates every cached entry under the written collection
so the next read re-fetches.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

logging.basicConfig(level=logging.INFO)

DEFAULT_STALE_TIME = 5 * 60 # seconds


class ApiError(Exception):
    """A non-2xx response from the catalog API."""

    def __init__(self, status_code: int, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details or []


class QueryCache:
    """Process-local cache of read results, keyed by endpoint path."""

    def __init__(self, ttl: float = DEFAULT_STALE_TIME, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def invalidate(self, prefix: str) -> int:
        """Drops the entry for `prefix` and every entry nested below it. Returns how many were dropped."""
        prefix = prefix.rstrip("/")
        stale = [key for key in self._entries if key == prefix or key.startswith(prefix + "/")]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


class ApiClient:
    """
    Request wrapper used by the forms. `http` may be any httpx.Client, which
    includes FastAPI's TestClient.
    """

    def __init__(self, base_url: str = "", http: Optional[httpx.Client] = None, cache: Optional[QueryCache] = None):
        self._http = http or httpx.Client(base_url=base_url, timeout=10.0)
        self.cache = cache if cache is not None else QueryCache()

    def request(self, method: str, endpoint: str, json: Any = None) -> Any:
        response = self._http.request(method, endpoint, json=json)
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get("error") or response.reason_phrase or "Request failed"
            logging.warning(f"{method} {endpoint} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, message, body.get("details"))
        return response.json()

    def get(self, endpoint: str) -> Any:
        cached = self.cache.get(endpoint)
        if cached is not None:
            return cached
        data = self.request("GET", endpoint)
        self.cache.set(endpoint, data)
        return data

    def _write(self, method: str, endpoint: str, collection: str, json: Any = None) -> Any:
        data = self.request(method, endpoint, json=json)
        self.cache.invalidate(collection)
        return data

    # --- Content ---
    def list_content(self) -> List[Dict[str, Any]]:
        return self.get("/api/content")

    def list_published_content(self) -> List[Dict[str, Any]]:
        return self.get("/api/content/published")

    def get_content(self, content_id: int) -> Dict[str, Any]:
        return self.get(f"/api/content/{content_id}")

    def create_content(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("POST", "/api/content", "/api/content", payload)

    def update_content(self, content_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("PUT", f"/api/content/{content_id}", "/api/content", payload)

    def delete_content(self, content_id: int) -> Dict[str, Any]:
        return self._write("DELETE", f"/api/content/{content_id}", "/api/content")

    # --- Upcoming content ---
    def list_upcoming_content(self) -> List[Dict[str, Any]]:
        return self.get("/api/upcoming-content")

    def get_upcoming_content(self, upcoming_id: int) -> Dict[str, Any]:
        return self.get(f"/api/upcoming-content/{upcoming_id}")

    def create_upcoming_content(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("POST", "/api/upcoming-content", "/api/upcoming-content", payload)

    def update_upcoming_content(self, upcoming_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("PUT", f"/api/upcoming-content/{upcoming_id}", "/api/upcoming-content", payload)

    def delete_upcoming_content(self, upcoming_id: int) -> Dict[str, Any]:
        return self._write("DELETE", f"/api/upcoming-content/{upcoming_id}", "/api/upcoming-content")

    # --- Analytics ---
    def track_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._write("POST", "/api/analytics", "/api/analytics", payload)

    def get_analytics(self) -> Dict[str, Any]:
        return self.get("/api/analytics")
