from appflow_package.models.job import (
    BuildRequest,
    BuildType,
    DownloadUrl,
    PackageBuild,
    Platform,
)

__all__ = ["BuildRequest", "BuildType", "DownloadUrl", "PackageBuild", "Platform"]
