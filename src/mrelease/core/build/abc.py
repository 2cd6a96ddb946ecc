"""Build tool interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from mrelease.core.errors import BuildError


@dataclass(frozen=True)
class BuildResult:
    """Exit status and captured output of a build tool invocation."""

    exit_code: int
    stdout: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def raise_for_failure(self, description: str) -> None:
        if not self.succeeded:
            raise BuildError(f"{description} failed with exit code {self.exit_code}\n{self.stdout}")


class BuildRunner(ABC):
    """Abstract interface for build and package-install commands.

    All implementations (real and fake) must implement this interface.
    Non-zero exits are returned in the result, not raised.
    """

    @abstractmethod
    def build(self, checkout_dir: Path, args: list[str]) -> BuildResult:
        """Run the build tool with `args` inside `checkout_dir`."""
        ...

    @abstractmethod
    def install(self, repo_dir: Path) -> BuildResult:
        """Bring a repository's package dependencies up to date."""
        ...


def build_arguments(
    brands: tuple[str, ...],
    *,
    uses_chipper2: bool,
    all_html: bool = True,
    debug_html: bool = True,
    lint: bool = False,
    locales: str = "*",
) -> list[str]:
    """Command-line arguments for building a release branch."""
    if uses_chipper2:
        args = [f"--brands={','.join(brands)}", f"--locales={locales}"]
    else:
        args = [f"--brand={brands[0]}", f"--locales={locales}"]
    if all_html:
        args.append("--allHTML")
    if debug_html:
        args.append("--debugHTML")
    if not lint:
        args.append("--lint=false")
    return args
