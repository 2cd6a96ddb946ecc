from mrelease.core.build.abc import BuildResult, BuildRunner

__all__ = ["BuildResult", "BuildRunner"]
