from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from appflow_package.core.errors import ValidationError

TERMINAL_STATES = frozenset({"success", "failed"})
QUEUED_STATE = "created"  # concurrency limit reached, waiting for a builder


class Platform(str, Enum):
    ANDROID = "android"
    IOS = "ios"


class BuildType(str, Enum):
    DEBUG = "debug"
    RELEASE = "release"
    DEVELOPMENT = "development"
    AD_HOC = "ad-hoc"
    APP_STORE = "app-store"
    ENTERPRISE = "enterprise"

    @property
    def platform(self) -> Platform:
        if self in _BUILD_TYPES[Platform.ANDROID]:
            return Platform.ANDROID
        return Platform.IOS


_BUILD_TYPES: dict[Platform, tuple[BuildType, ...]] = {
    Platform.ANDROID: (BuildType.DEBUG, BuildType.RELEASE),
    Platform.IOS: (BuildType.DEVELOPMENT, BuildType.AD_HOC, BuildType.APP_STORE, BuildType.ENTERPRISE),
}


def build_types_for(platform: Platform | str) -> tuple[BuildType, ...]:
    return _BUILD_TYPES[Platform(platform)]


def parse_platform(value: str) -> Platform:
    try:
        return Platform(value)
    except ValueError:
        choices = ", ".join(p.value for p in Platform)
        raise ValidationError(f"Unknown platform {value!r} (expected one of: {choices})")


def parse_build_type(platform: Platform, value: str) -> BuildType:
    allowed = build_types_for(platform)
    try:
        bt = BuildType(value)
    except ValueError:
        bt = None
    if bt not in allowed:
        choices = ", ".join(t.value for t in allowed)
        raise ValidationError(
            f"Build type {value!r} incompatible for {platform.value} (expected one of: {choices})"
        )
    return bt


class BuildRequest(BaseModel):
    """
    Everything needed to create a package build.

    platform/build_type are checked against each other here, so an invalid
    combination can never reach the API.
    """

    model_config = ConfigDict(frozen=True)

    platform: Platform
    build_type: BuildType
    commit_sha: str | None = None
    stack_name: str | None = None  # --target-platform
    profile_name: str | None = None  # --security-profile
    environment_name: str | None = None
    native_config_name: str | None = None

    def model_post_init(self, __context: Any) -> None:
        if self.build_type not in build_types_for(self.platform):
            raise ValidationError(
                f"Build type {self.build_type.value!r} incompatible for {self.platform.value}"
            )

    def to_payload(self) -> dict[str, Any]:
        """Wire body; options that were never set are left out, not sent as null."""
        payload = {
            "platform": self.platform.value,
            "build_type": self.build_type.value,
            "commit_sha": self.commit_sha,
            "stack_name": self.stack_name,
            "profile_name": self.profile_name,
            "environment_name": self.environment_name,
            "native_config_name": self.native_config_name,
        }
        return {k: v for k, v in payload.items() if v is not None}


class BuildCommit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sha: str = ""
    note: str | None = None


class BuildStack(BaseModel):
    model_config = ConfigDict(extra="ignore")

    friendly_name: str | None = None


class BuildJob(BaseModel):
    model_config = ConfigDict(extra="ignore")

    trace: str | None = None


class PackageBuild(BaseModel):
    """
    A package build as returned by the Appflow API.

    Never mutated locally; every poll produces a fresh instance.
    """

    model_config = ConfigDict(extra="ignore")

    job_id: int
    id: str | None = None
    caller_id: int | None = None
    platform: str | None = None
    build_type: str | None = None
    created: str | None = None
    finished: str | None = None
    state: str
    commit: BuildCommit | None = None
    stack: BuildStack | None = None
    profile_tag: str | None = None
    automation_id: int | None = None
    automation_name: str | None = None
    environment_id: int | None = None
    environment_name: str | None = None
    native_config_id: int | None = None
    native_config_name: str | None = None
    job: BuildJob | None = None

    @property
    def trace(self) -> str:
        if self.job is None:
            return ""
        return self.job.trace or ""

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_queued(self) -> bool:
        return self.state == QUEUED_STATE

    @property
    def succeeded(self) -> bool:
        return self.state == "success"


class DownloadUrl(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str | None = None
