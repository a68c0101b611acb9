from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from appflow_package.core.errors import CommitResolutionError

logger = logging.getLogger(__name__)


def resolve_head_commit(cwd: str | Path = ".") -> str:
    """
    Returns the full sha of HEAD in `cwd`.

    The value is passed to Appflow as-is; it is not checked to look like a sha.
    """
    args = ["git", "rev-parse", "HEAD"]
    try:
        p = subprocess.run(args, cwd=str(cwd), capture_output=True, text=True, timeout=30)
    except FileNotFoundError:
        raise CommitResolutionError("git not found. Install it or pass --commit explicitly.")
    except subprocess.TimeoutExpired:
        raise CommitResolutionError("git rev-parse HEAD timed out.")

    if p.returncode != 0:
        raise CommitResolutionError(
            p.stderr.strip() or p.stdout.strip() or "git rev-parse HEAD failed"
        )

    sha = p.stdout.strip()
    if not sha:
        raise CommitResolutionError("git rev-parse HEAD returned nothing")

    logger.debug("Commit hash: %s", sha)
    return sha
