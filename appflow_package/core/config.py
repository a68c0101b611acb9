import os
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

from appflow_package.core.errors import ValidationError

# .env from the app project directory; a real shell export always wins
load_dotenv(find_dotenv(usecwd=True), override=False)


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    return v if v and v.strip() else default


def _env_float(name: str, default: str) -> float:
    raw = _env(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    # Read at instantiation (not import) so tests can monkeypatch the env.
    api_url: str = field(default_factory=lambda: _env("APPFLOW_API_URL", "https://api.ionicjs.com"))
    token: str | None = field(default_factory=lambda: _env("APPFLOW_TOKEN"))
    app_id: str | None = field(default_factory=lambda: _env("APPFLOW_APP_ID"))

    # Polling + HTTP knobs
    poll_interval_s: float = field(default_factory=lambda: _env_float("APPFLOW_POLL_INTERVAL_SEC", "5"))
    http_timeout_s: float = field(default_factory=lambda: _env_float("APPFLOW_HTTP_TIMEOUT_SEC", "30"))
    download_timeout_s: float = field(default_factory=lambda: _env_float("APPFLOW_DOWNLOAD_TIMEOUT_SEC", "300"))

    log_level: str = field(default_factory=lambda: _env("APPFLOW_LOG_LEVEL", "WARNING"))
