from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from appflow_package.models.job import PackageBuild


class AppflowError(Exception):
    """Base for every error the build command surfaces to the user."""

    exit_code = 1


class ValidationError(AppflowError):
    exit_code = 2


class CommitResolutionError(AppflowError):
    pass


class RemoteError(AppflowError):
    """
    A failed call to the Appflow API.

    status_code is None for transport failures (DNS, refused, timeout).
    """

    def __init__(self, message: str, *, status_code: int | None = None, operation: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.operation = operation

    @property
    def unauthorized(self) -> bool:
        return self.status_code == 401


class BuildFailedError(AppflowError):
    exit_code = 3

    def __init__(self, build: PackageBuild) -> None:
        super().__init__(f"Build {build.job_id} failed")
        self.build = build


class InconsistentResponseError(AppflowError):
    exit_code = 4


class LogRewrittenError(InconsistentResponseError):
    def __init__(self, job_id: int, cursor: int, length: int) -> None:
        super().__init__(
            f"Build {job_id} log shrank from {cursor} to {length} characters"
        )
        self.cursor = cursor
        self.length = length


class DownloadError(AppflowError):
    exit_code = 5


class DownloadNetworkError(DownloadError):
    pass


class DownloadIOError(DownloadError):
    pass
