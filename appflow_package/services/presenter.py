from __future__ import annotations

from typing import Protocol

import click

from appflow_package.core.errors import RemoteError
from appflow_package.models.job import PackageBuild

QUEUED_NOTICE = "Concurrency limit reached: build will start as soon as other builds finish."
RELOGIN_HINT = "Try logging out and back in again."


class BuildSink(Protocol):
    """Where the build run reports progress. Content only; formatting is the sink's business."""

    def build_created(self, app_id: str, build: PackageBuild) -> None: ...

    def queued_notice(self) -> None: ...

    def log_chunk(self, text: str) -> None: ...

    def log_end(self) -> None: ...

    def remote_error(self, error: RemoteError) -> None: ...

    def build_completed(self, filename: str) -> None: ...


def summary_rows(app_id: str, build: PackageBuild) -> list[tuple[str, str | None]]:
    """(label, value) pairs for the 'Build created' table; None means not set."""
    commit = build.commit
    commit_text = f"{commit.sha[:6]} {commit.note or ''}".strip() if commit else None
    return [
        ("Appflow ID", app_id),
        ("Build ID", str(build.job_id)),
        ("Commit", commit_text),
        ("Target Platform", build.stack.friendly_name if build.stack else None),
        ("Build Type", build.build_type),
        ("Security Profile", build.profile_tag),
        ("Environment", build.environment_name),
        ("Native Config", build.native_config_name),
    ]


class ConsolePresenter:
    def build_created(self, app_id: str, build: PackageBuild) -> None:
        rows = summary_rows(app_id, build)
        width = max(len(label) for label, _ in rows)

        click.secho("> Build created", fg="green")
        for label, value in rows:
            if value:
                shown = click.style(value, bold=True)
            else:
                shown = click.style("not set", dim=True)
            click.echo(f"{label.ljust(width)} : {shown}")
        click.echo()

    def queued_notice(self) -> None:
        click.secho(QUEUED_NOTICE, fg="yellow")

    def log_chunk(self, text: str) -> None:
        click.echo(text, nl=False)

    def log_end(self) -> None:
        click.echo()

    def remote_error(self, error: RemoteError) -> None:
        click.secho(f"[ERROR] Unable to {error.operation}: {error}", fg="red", err=True)
        if error.unauthorized:
            click.secho(f"[ERROR] {RELOGIN_HINT}", fg="red", err=True)

    def build_completed(self, filename: str) -> None:
        click.secho(f"> Build completed: {filename}", fg="green")
