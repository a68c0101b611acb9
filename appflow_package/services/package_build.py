from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional, TypeVar

from appflow_package.core.errors import (
    BuildFailedError,
    InconsistentResponseError,
    RemoteError,
    ValidationError,
)
from appflow_package.models.job import BuildRequest, PackageBuild
from appflow_package.services.appflow_client import AppflowClient
from appflow_package.services.artifact_download import download_artifact
from appflow_package.services.filenames import is_valid_file_name
from appflow_package.services.git import resolve_head_commit
from appflow_package.services.log_tailer import DEFAULT_POLL_INTERVAL_S, tail_build_log
from appflow_package.services.presenter import BuildSink

logger = logging.getLogger(__name__)

T = TypeVar("T")

Downloader = Callable[[str, str], str]
CommitResolver = Callable[[Path], str]


def _default_downloader(directory: Path) -> Downloader:
    def run(url: str, override_name: str) -> str:
        return download_artifact(url, override_name, directory=directory)

    return run


class PackageBuildRunner:
    """
    Drives one package build from creation to a downloaded artifact.

    Created -> Polling -> Succeeded | Failed. Any remote failure on the way
    aborts the run; job creation is never retried since it is not idempotent.
    """

    def __init__(
        self,
        client: AppflowClient,
        sink: BuildSink,
        *,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        sleep: Callable[[float], None] = time.sleep,
        downloader: Optional[Downloader] = None,
        resolve_commit: CommitResolver = resolve_head_commit,
    ) -> None:
        self.client = client
        self.sink = sink
        self.poll_interval_s = poll_interval_s
        self.sleep = sleep
        self.downloader = downloader
        self.resolve_commit = resolve_commit

    def run(
        self,
        app_id: str,
        request: BuildRequest,
        build_file_name: str | None = None,
        cwd: str | Path = ".",
    ) -> str:
        """Returns the name of the downloaded build file."""
        cwd = Path(cwd)

        if not request.commit_sha:
            request = request.model_copy(update={"commit_sha": self.resolve_commit(cwd)})

        build = self._remote(lambda: self.client.create_job(app_id, request))
        logger.debug("created build %s (state=%s)", build.job_id, build.state)

        # Checked after creation (it only matters on success) but before the
        # long poll, so a typo does not cost a whole build wait.
        custom_name = ""
        if build_file_name:
            if not is_valid_file_name(build_file_name):
                raise ValidationError(f"{build_file_name} is not a valid file name")
            custom_name = build_file_name

        self.sink.build_created(app_id, build)

        build = self.wait_for_build(app_id, build.job_id)
        if not build.succeeded:
            raise BuildFailedError(build)

        download = self._remote(lambda: self.client.get_download_url(app_id, build.job_id))
        if not download.url:
            raise InconsistentResponseError(
                f"Build {build.job_id} succeeded but the download response has no URL"
            )

        downloader = self.downloader or _default_downloader(cwd)
        filename = downloader(download.url, custom_name)
        self.sink.build_completed(filename)
        return filename

    def wait_for_build(self, app_id: str, job_id: int) -> PackageBuild:
        return tail_build_log(
            lambda: self._remote(lambda: self.client.get_job(app_id, job_id)),
            self.sink,
            interval_s=self.poll_interval_s,
            sleep=self.sleep,
        )

    def _remote(self, call: Callable[[], T]) -> T:
        try:
            return call()
        except RemoteError as e:
            self.sink.remote_error(e)
            raise
