from __future__ import annotations

import sys
from pathlib import Path

import click

from appflow_package import __version__
from appflow_package.core.config import Settings
from appflow_package.core.errors import AppflowError, RemoteError, ValidationError
from appflow_package.core.logging import configure_logging
from appflow_package.models.job import (
    BuildRequest,
    BuildType,
    Platform,
    build_types_for,
    parse_build_type,
    parse_platform,
)
from appflow_package.services.appflow_client import AppflowClient
from appflow_package.services.artifact_download import download_artifact
from appflow_package.services.package_build import PackageBuildRunner
from appflow_package.services.presenter import ConsolePresenter
from appflow_package.services.project import require_app_id

PLATFORM_CHOICES = [p.value for p in Platform]
BUILD_TYPE_CHOICES = [t.value for t in BuildType]

EPILOG = """
\b
Examples:
  appflow-package build android debug
  appflow-package build ios development --security-profile="iOS Security Profile Name"
  appflow-package build android debug --environment="My Custom Environment Name"
  appflow-package build android debug --native-config="My Custom Native Config Name"
  appflow-package build android debug --commit=2345cd3305a1cf94de34e93b73a932f25baac77c
  appflow-package build ios development --security-profile="iOS Security Profile Name" --target-platform="iOS - Xcode 9"
  appflow-package build ios development --security-profile="iOS Security Profile Name" --build-file-name=my_custom_file_name.ipa
"""


@click.group(name="appflow-package")
@click.version_option(__version__)
def cli():
    """Appflow package builds"""
    pass


def _resolve_platform(value: str | None, interactive: bool) -> Platform:
    if value:
        return parse_platform(value)
    if not interactive:
        raise ValidationError("Missing platform (one of: " + ", ".join(PLATFORM_CHOICES) + ")")
    chosen = click.prompt("Platform to package", type=click.Choice(PLATFORM_CHOICES))
    return Platform(chosen)


def _resolve_build_type(platform: Platform, value: str | None, interactive: bool) -> BuildType:
    allowed = [t.value for t in build_types_for(platform)]

    if value and value in allowed:
        return BuildType(value)
    if value:
        if not interactive:
            # raises with the list of valid types
            return parse_build_type(platform, value)
        click.secho(
            f"[WARN] Build type {value} incompatible for {platform.value}; please choose a correct one",
            fg="yellow",
            err=True,
        )
    elif not interactive:
        raise ValidationError("Missing build type (one of: " + ", ".join(allowed) + ")")

    chosen = click.prompt("Build type", type=click.Choice(allowed))
    return BuildType(chosen)


def _resolve_security_profile(platform: Platform, value: str | None, interactive: bool) -> str | None:
    # mandatory for every iOS build
    if platform is not Platform.IOS or value:
        return value
    if not interactive:
        raise ValidationError("A security profile is mandatory to build an iOS package")
    click.secho("[WARN] A security profile is mandatory to build an iOS package", fg="yellow", err=True)
    return click.prompt("Security Profile Name")


@cli.command(name="build", epilog=EPILOG)
@click.argument("platform", required=False, type=click.Choice(PLATFORM_CHOICES))
@click.argument("build_type", metavar="TYPE", required=False, type=click.Choice(BUILD_TYPE_CHOICES))
@click.option("--security-profile", metavar="NAME", help="Security profile")
@click.option("--environment", metavar="NAME", help="The group of environment variables exposed to your build")
@click.option("--native-config", metavar="NAME", help="The group of native config variables exposed to your build")
@click.option("--commit", metavar="SHA1", help="Commit (defaults to HEAD)")
@click.option("--target-platform", metavar="NAME", help="Target platform")
@click.option("--build-file-name", metavar="NAME", help="The name for the downloaded build file")
@click.option("--app-id", metavar="ID", help="Appflow app id (defaults to APPFLOW_APP_ID or ionic.config.json)")
@click.option("--token", metavar="TOKEN", help="Appflow API token (defaults to APPFLOW_TOKEN)")
@click.option("--interactive/--no-interactive", default=True, help="Prompt for missing inputs")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging on stderr")
def build_command(
    platform,
    build_type,
    security_profile,
    environment,
    native_config,
    commit,
    target_platform,
    build_file_name,
    app_id,
    token,
    interactive,
    verbose,
):
    """
    Create a package build on Appflow, tail its log, and download the app
    package into the current directory once the build succeeds.

    Apart from --commit, the options take the names chosen in the Appflow
    Dashboard. --build-file-name is a file name only, not a path.
    """
    try:
        settings = Settings()
        configure_logging("DEBUG" if verbose else settings.log_level)

        plat = _resolve_platform(platform, interactive)
        btype = _resolve_build_type(plat, build_type, interactive)
        profile = _resolve_security_profile(plat, security_profile, interactive)

        request = BuildRequest(
            platform=plat,
            build_type=btype,
            commit_sha=commit,
            stack_name=target_platform,
            profile_name=profile,
            environment_name=environment,
            native_config_name=native_config,
        )

        cwd = Path.cwd()
        resolved_app_id = require_app_id(app_id, settings.app_id, cwd)
        api_token = token or settings.token
        if not api_token:
            raise ValidationError("No Appflow token: pass --token or set APPFLOW_TOKEN (log in first).")

        client = AppflowClient(settings.api_url, api_token, timeout_s=settings.http_timeout_s)
        runner = PackageBuildRunner(
            client,
            ConsolePresenter(),
            poll_interval_s=settings.poll_interval_s,
            downloader=lambda url, name: download_artifact(
                url, name, directory=cwd, timeout_s=settings.download_timeout_s
            ),
        )
        runner.run(resolved_app_id, request, build_file_name=build_file_name, cwd=cwd)
    except AppflowError as e:
        # remote errors were already reported by the presenter
        if not isinstance(e, RemoteError):
            click.secho(f"[ERROR] {e}", fg="red", err=True)
        sys.exit(e.exit_code)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
