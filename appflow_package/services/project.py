from __future__ import annotations

import json
from pathlib import Path

from appflow_package.core.errors import ValidationError

PROJECT_CONFIG_FILE = "ionic.config.json"


def read_project_app_id(directory: str | Path = ".") -> str | None:
    """
    Appflow app id from ionic.config.json (`"id": "abcd1234"`), or None when the
    file is missing or has no id.
    """
    path = Path(directory) / PROJECT_CONFIG_FILE
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ValidationError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        return None
    app_id = data.get("id")
    if app_id is None:
        return None
    app_id = str(app_id).strip()
    return app_id or None


def require_app_id(explicit: str | None, configured: str | None, directory: str | Path = ".") -> str:
    """
    --app-id beats APPFLOW_APP_ID beats ionic.config.json.
    """
    for candidate in (explicit, configured):
        if candidate and candidate.strip():
            return candidate.strip()

    app_id = read_project_app_id(directory)
    if app_id:
        return app_id

    raise ValidationError(
        f"No Appflow app id: pass --app-id, set APPFLOW_APP_ID, or run inside a project "
        f"whose {PROJECT_CONFIG_FILE} has an \"id\"."
    )
