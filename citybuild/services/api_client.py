# citybuild/services/api_client.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from citybuild.core.config import get_settings

logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    400: "Bad request",
    404: "Resource not found",
    413: "File too large",
    415: "Unsupported file type",
    422: "Validation failed",
    500: "Server error",
}


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.detail = detail


class ApiClient:
    """
    Bearer-token HTTP client for the marketplace API.

    `token_store` is anything with get_auth_token()/set_auth_token()
    (UserStorage fits). A 401 clears the stored token and calls
    `on_unauthorized`; the response is still returned to the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token_store: Any,
        on_unauthorized: Optional[Callable[[], None]] = None,
        client: Optional[httpx.Client] = None,
        api_prefix: Optional[str] = None,
        timeout: float = 30.0,
    ):
        settings = get_settings()
        self.token_store = token_store
        self.on_unauthorized = on_unauthorized
        self.api_prefix = settings.api_prefix if api_prefix is None else api_prefix
        self._client = client or httpx.Client(
            base_url=base_url or settings.api_base_url,
            timeout=timeout,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # transport
    # ------------------------------------------------------------------

    def fetch_with_auth(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        token = self.token_store.get_auth_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = path if path.startswith("http") else f"{self.api_prefix}{path}"
        response = self._client.request(method, url, headers=headers, **kwargs)

        if response.status_code == 401:
            logger.info("unauthorized response; clearing token", extra={"path": path})
            self.token_store.set_auth_token(None)
            if self.on_unauthorized is not None:
                self.on_unauthorized()
        return response

    def _json(self, response: httpx.Response) -> Any:
        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        try:
            body = response.json()
            detail = body.get("detail") if isinstance(body, dict) else body
        except ValueError:
            detail = response.text
        base = _STATUS_MESSAGES.get(response.status_code)
        if base is None:
            base = "Unauthorized" if response.status_code == 401 else f"Request failed ({response.status_code})"
        message = f"{base}: {detail}" if isinstance(detail, str) and detail else base
        raise ApiError(response.status_code, message, detail)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._json(self.fetch_with_auth("GET", path, params=params))

    def post(self, path: str, json: Any = None) -> Any:
        return self._json(self.fetch_with_auth("POST", path, json=json))

    def put(self, path: str, json: Any = None) -> Any:
        return self._json(self.fetch_with_auth("PUT", path, json=json))

    def patch(self, path: str, json: Any = None) -> Any:
        return self._json(self.fetch_with_auth("PATCH", path, json=json))

    def delete(self, path: str) -> Any:
        return self._json(self.fetch_with_auth("DELETE", path))

    # ------------------------------------------------------------------
    # endpoints
    # ------------------------------------------------------------------

    def login(self, email: str, password: str = "") -> Dict[str, Any]:
        data = self.post("/auth/login", {"email": email, "password": password})
        self.token_store.set_auth_token(data["token"])
        return data

    def logout(self) -> None:
        self.token_store.set_auth_token(None)

    def get_project(self, project_id: str) -> Dict[str, Any]:
        return self.get(f"/projects/{project_id}")

    def update_project(self, project_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self.put(f"/projects/{project_id}", updates)

    def upload_project_file(
        self,
        project_id: str,
        filename: str,
        content: bytes,
        content_type: str,
        category: str = "plans",
    ) -> Dict[str, Any]:
        response = self.fetch_with_auth(
            "POST",
            f"/projects/{project_id}/files",
            files={"file": (filename, content, content_type)},
            data={"category": category},
        )
        return self._json(response)
