"""Issue tracker implementation using the gh CLI."""

from mrelease.core.issues.abc import IssueTracker
from mrelease.core.subprocess import run_subprocess_with_context


class GhIssueTracker(IssueTracker):
    """Production implementation using `gh issue create`.

    Note: Relies on gh's own authentication; failures (not installed, not
    authenticated) surface as ExecuteError.
    """

    def __init__(self, org: str) -> None:
        self._org = org

    def create_issue(
        self,
        repo: str,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str] | None = None,
    ) -> str:
        cmd = ["gh", "issue", "create", "-R", f"{self._org}/{repo}", "--title", title]
        cmd.extend(["--body", body])
        for label in labels:
            cmd.extend(["--label", label])
        for assignee in assignees or []:
            cmd.extend(["--assignee", assignee])

        result = run_subprocess_with_context(cmd, operation_context=f"create issue in {repo}")
        # gh prints the new issue URL, e.g. https://github.com/owner/repo/issues/123
        return result.stdout.strip()
