import pytest

from appflow_package.core.errors import ValidationError
from appflow_package.models.job import (
    BuildRequest,
    BuildType,
    PackageBuild,
    Platform,
    build_types_for,
    parse_build_type,
    parse_platform,
)

from conftest import build_payload


def test_build_types_are_split_per_platform():
    assert build_types_for("android") == (BuildType.DEBUG, BuildType.RELEASE)
    assert BuildType.APP_STORE in build_types_for(Platform.IOS)
    assert BuildType.DEBUG.platform is Platform.ANDROID
    assert BuildType.AD_HOC.platform is Platform.IOS


def test_ios_debug_is_rejected():
    with pytest.raises(ValidationError):
        BuildRequest(platform="ios", build_type="debug")

    with pytest.raises(ValidationError) as exc:
        parse_build_type(Platform.IOS, "debug")
    assert "development" in str(exc.value)


def test_unknown_platform_is_rejected():
    with pytest.raises(ValidationError):
        parse_platform("windows")


def test_request_payload_matches_api_field_names():
    req = BuildRequest(
        platform=Platform.IOS,
        build_type=BuildType.AD_HOC,
        commit_sha="abc123",
        stack_name="iOS - Xcode 9",
        profile_name="Prod profile",
        environment_name="staging",
    )
    assert req.to_payload() == {
        "platform": "ios",
        "build_type": "ad-hoc",
        "commit_sha": "abc123",
        "stack_name": "iOS - Xcode 9",
        "profile_name": "Prod profile",
        "environment_name": "staging",
    }


def test_unset_options_are_left_out_of_payload():
    req = BuildRequest(platform="android", build_type="debug", commit_sha="abc")
    assert req.to_payload() == {"platform": "android", "build_type": "debug", "commit_sha": "abc"}


def test_package_build_parses_and_classifies_state():
    b = PackageBuild.model_validate(build_payload(state="created", trace="abc", unknown_field=1))
    assert b.job_id == 42
    assert b.trace == "abc"
    assert b.is_queued
    assert not b.is_terminal

    done = PackageBuild.model_validate(build_payload(state="failed", job=None))
    assert done.trace == ""
    assert done.is_terminal
    assert not done.succeeded

    assert PackageBuild.model_validate(build_payload(state="success")).succeeded
    assert not PackageBuild.model_validate(build_payload(state="running")).is_terminal
