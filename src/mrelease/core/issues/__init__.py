from mrelease.core.issues.abc import IssueTracker

__all__ = ["IssueTracker"]
