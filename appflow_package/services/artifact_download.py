from __future__ import annotations

import logging
import re
from email.message import Message
from pathlib import Path
from typing import Optional

import httpx

from appflow_package.core.errors import DownloadIOError, DownloadNetworkError
from appflow_package.services.filenames import is_valid_file_name

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_NAME = "output.bin"

_LOOSE_FILENAME_RE = re.compile(r"""filename\s*=\s*"?([^";]+)"?""", re.IGNORECASE)


def filename_from_content_disposition(value: str | None) -> str | None:
    """
    Pull a bare file name out of a Content-Disposition header.

    Supports:
    - attachment; filename=app-release.apk
    - attachment; filename="My App.ipa"
    - attachment; filename*=UTF-8''My%20App.ipa

    Any directory part is dropped; the server does not get to pick where we write.
    A name that is not a usable bare file name (NUL, ":", reserved device
    names) gives None.
    """
    if not value:
        return None

    msg = Message()
    msg["content-disposition"] = value
    name = msg.get_filename()

    if not name:
        # headers without a disposition type, e.g. just "filename=x.apk"
        m = _LOOSE_FILENAME_RE.search(value)
        name = m.group(1) if m else None
    if not name:
        return None

    name = name.replace("\\", "/").rsplit("/", 1)[-1].strip()
    if not is_valid_file_name(name):
        return None
    return name


def download_artifact(
    url: str,
    override_name: str = "",
    *,
    client: Optional[httpx.Client] = None,
    directory: str | Path = ".",
    timeout_s: float = 300.0,
    chunk_size: int = 64 * 1024,
) -> str:
    """
    Stream `url` into `directory` and return the file name used.

    An existing file with the same name is overwritten. If the transfer dies
    half way the partial file is left on disk.
    """
    try:
        if client is not None:
            # an injected client keeps whatever timeout it was built with
            return _stream_to_file(client, url, override_name, Path(directory), chunk_size)
        with httpx.Client(timeout=timeout_s) as own:
            return _stream_to_file(own, url, override_name, Path(directory), chunk_size)
    except httpx.HTTPStatusError as e:
        raise DownloadNetworkError(
            f"Download failed: HTTP {e.response.status_code} for {url}"
        ) from e
    except httpx.HTTPError as e:
        raise DownloadNetworkError(f"Download failed: {e}") from e
    except (OSError, ValueError) as e:
        # ValueError: open() on a name with an embedded NUL
        raise DownloadIOError(f"Could not write build file: {e}") from e


def _stream_to_file(
    client: httpx.Client,
    url: str,
    override_name: str,
    directory: Path,
    chunk_size: int,
) -> str:
    with client.stream("GET", url, follow_redirects=True) as r:
        r.raise_for_status()

        if override_name:
            filename = override_name
        else:
            filename = (
                filename_from_content_disposition(r.headers.get("content-disposition"))
                or DEFAULT_ARTIFACT_NAME
            )

        target = directory / filename
        logger.debug("downloading %s -> %s", url, target)

        written = 0
        with open(target, "wb") as fh:
            for chunk in r.iter_bytes(chunk_size):
                fh.write(chunk)
                written += len(chunk)

    logger.debug("wrote %d bytes to %s", written, target)
    return filename
