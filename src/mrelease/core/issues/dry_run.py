"""No-op wrapper for issue creation."""

from mrelease.cli.output import user_output
from mrelease.core.issues.abc import IssueTracker


class DryRunIssueTracker(IssueTracker):
    """Prints the issue that would be created instead of creating it."""

    def __init__(self, wrapped: IssueTracker) -> None:
        self._wrapped = wrapped

    def create_issue(
        self,
        repo: str,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str] | None = None,
    ) -> str:
        user_output(f"[dry-run] Would create issue in {repo}: {title}")
        return ""
