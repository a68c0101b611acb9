from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from fastapi.testclient import TestClient

from appflow_package.services.appflow_client import AppflowClient

APP_ID = "a1b2c3d4"
TOKEN = "test-token"


def build_payload(job_id: int = 42, state: str = "pending", trace: str = "", **extra: Any) -> dict:
    data = {
        "job_id": job_id,
        "id": f"pkg-{job_id}",
        "caller_id": 7,
        "platform": "android",
        "build_type": "debug",
        "created": "2026-01-01T10:00:00Z",
        "finished": None,
        "state": state,
        "commit": {"sha": "2345cd3305a1cf94de34e93b73a932f25baac77c", "note": "fix splash"},
        "stack": {"friendly_name": "Android"},
        "profile_tag": None,
        "environment_name": None,
        "native_config_name": None,
        "job": {"trace": trace},
    }
    data.update(extra)
    return data


class FakeAppflow:
    """
    In-process stand-in for the Appflow API.

    `snapshots` are served one per status poll; the last one repeats.
    """

    def __init__(self) -> None:
        self.snapshots: list[dict] = [build_payload(state="success", trace="done\n")]
        self.create_status: int | None = None
        self.status_error_at: int | None = None
        self.download_url: str | None = "http://testserver/artifacts/42"
        self.content_disposition: str | None = "attachment; filename=app-release.apk"
        self.artifact = b"PK\x03\x04fake-apk-bytes" * 100

        self.created_bodies: list[dict] = []
        self.auth_headers: list[str | None] = []
        self.status_calls = 0
        self.download_url_calls = 0
        self.artifact_calls = 0

        self.app = self._build_app()

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.post("/apps/{app_id}/packages/verbose_post")
        async def create(app_id: str, request: Request):
            self.auth_headers.append(request.headers.get("authorization"))
            if self.create_status is not None:
                return JSONResponse(
                    {"error": {"message": "Authorization failed"}}, status_code=self.create_status
                )
            body = await request.json()
            self.created_bodies.append(body)
            return {"data": build_payload(state="created", trace="", build_type=body["build_type"]), "meta": {}}

        @app.get("/apps/{app_id}/packages/{job_id}")
        def status(app_id: str, job_id: int, request: Request):
            self.auth_headers.append(request.headers.get("authorization"))
            idx = self.status_calls
            self.status_calls += 1
            if self.status_error_at is not None and idx >= self.status_error_at:
                return JSONResponse({"error": {"message": "boom"}}, status_code=500)
            snap = self.snapshots[min(idx, len(self.snapshots) - 1)]
            return {"data": snap, "meta": {}}

        @app.get("/apps/{app_id}/packages/{job_id}/download")
        def download_url(app_id: str, job_id: int):
            self.download_url_calls += 1
            return {"data": {"url": self.download_url}, "meta": {}}

        @app.get("/artifacts/{name}")
        def artifact(name: str):
            self.artifact_calls += 1
            headers = {}
            if self.content_disposition is not None:
                headers["content-disposition"] = self.content_disposition
            return Response(self.artifact, media_type="application/octet-stream", headers=headers)

        return app


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def build_created(self, app_id, build) -> None:
        self.events.append(("created", build.job_id))

    def queued_notice(self) -> None:
        self.events.append(("queued", None))

    def log_chunk(self, text: str) -> None:
        self.events.append(("log", text))

    def log_end(self) -> None:
        self.events.append(("log_end", None))

    def remote_error(self, error) -> None:
        self.events.append(("remote_error", error))

    def build_completed(self, filename: str) -> None:
        self.events.append(("completed", filename))

    def kinds(self) -> list[str]:
        return [k for k, _ in self.events]

    def log_text(self) -> str:
        return "".join(v for k, v in self.events if k == "log")


@pytest.fixture
def fake() -> FakeAppflow:
    return FakeAppflow()


@pytest.fixture
def http(fake: FakeAppflow):
    with TestClient(fake.app) as c:
        yield c


@pytest.fixture
def client(http) -> AppflowClient:
    return AppflowClient("http://testserver", TOKEN, http=http)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True)
def _clean_appflow_env(monkeypatch):
    for name in (
        "APPFLOW_API_URL",
        "APPFLOW_TOKEN",
        "APPFLOW_APP_ID",
        "APPFLOW_POLL_INTERVAL_SEC",
        "APPFLOW_HTTP_TIMEOUT_SEC",
        "APPFLOW_DOWNLOAD_TIMEOUT_SEC",
        "APPFLOW_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
