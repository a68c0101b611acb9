from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
import pydantic

from appflow_package.core.errors import InconsistentResponseError, RemoteError
from appflow_package.models.job import BuildRequest, DownloadUrl, PackageBuild

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)


class AppflowClient:
    """
    Minimal client for the Appflow package-build endpoints.

    Holds no state between calls besides the connection settings: every status
    check is a fresh GET, so it is always safe to call again.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout_s: float = 30.0,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_s = timeout_s
        # Injected client (tests hand in a TestClient); otherwise one per call.
        self._http = http

    def create_job(self, app_id: str, request: BuildRequest) -> PackageBuild:
        data = self._request(
            "POST",
            f"/apps/{app_id}/packages/verbose_post",
            operation="create build",
            json=request.to_payload(),
        )
        return _parse(PackageBuild, data)

    def get_job(self, app_id: str, job_id: int) -> PackageBuild:
        data = self._request(
            "GET",
            f"/apps/{app_id}/packages/{job_id}",
            operation=f"get build {job_id}",
        )
        return _parse(PackageBuild, data)

    def get_download_url(self, app_id: str, job_id: int) -> DownloadUrl:
        data = self._request(
            "GET",
            f"/apps/{app_id}/packages/{job_id}/download",
            operation=f"get download URL for build {job_id}",
        )
        return _parse(DownloadUrl, data)

    def _request(self, method: str, path: str, *, operation: str, json: Any = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self.token}"}
        logger.debug("%s %s", method, url)

        try:
            if self._http is not None:
                # injected clients carry their own timeout
                r = self._http.request(method, url, headers=headers, json=json)
            else:
                with httpx.Client(timeout=self.timeout_s) as client:
                    r = client.request(method, url, headers=headers, json=json)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteError(
                _error_message(e.response),
                status_code=status,
                operation=operation,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteError(str(e) or type(e).__name__, operation=operation) from e

        try:
            body = r.json()
        except ValueError as e:
            raise RemoteError(
                f"Invalid JSON in response (HTTP {r.status_code})",
                status_code=r.status_code,
                operation=operation,
            ) from e

        # Ionic API wraps payloads as {"data": ..., "meta": ...}
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        if isinstance(body, dict):
            return body
        raise RemoteError(
            f"Unexpected response shape: {type(body).__name__}",
            status_code=r.status_code,
            operation=operation,
        )


def _error_message(response: httpx.Response) -> str:
    """
    Prefer the API's own error message ({"error": {"message": ...}}), falling
    back to the HTTP status line.
    """
    fallback = f"HTTP {response.status_code} {response.reason_phrase}".strip()
    try:
        body = response.json()
    except ValueError:
        return fallback

    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return f"{fallback}: {err['message']}"
        if isinstance(err, str) and err:
            return f"{fallback}: {err}"
    return fallback


def _parse(model: Type[M], data: Dict[str, Any]) -> M:
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise InconsistentResponseError(
            f"Malformed {model.__name__} in API response: {e.error_count()} invalid field(s)"
        ) from e
