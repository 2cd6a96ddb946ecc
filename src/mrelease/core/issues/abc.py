"""Issue tracker interface."""

from abc import ABC, abstractmethod


class IssueTracker(ABC):
    """Abstract interface for creating issues in simulation repositories.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def create_issue(
        self,
        repo: str,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str] | None = None,
    ) -> str:
        """Create an issue and return its URL.

        Args:
            repo: Repository name within the configured organization
            title: Issue title
            body: Issue body (markdown)
            labels: Labels to apply
            assignees: Optional GitHub usernames to assign
        """
        ...
