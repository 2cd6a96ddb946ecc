"""Application context with dependency injection."""

from dataclasses import dataclass, replace
from pathlib import Path

import click

from mrelease.cli.output import user_output
from mrelease.core.build.abc import BuildRunner
from mrelease.core.build.real import SubprocessBuildRunner
from mrelease.core.config import ConfigStore, MaintenanceConfig, RealConfigStore, default_config
from mrelease.core.deploy.abc import Deployer
from mrelease.core.deploy.dry_run import DryRunDeployer
from mrelease.core.deploy.real import SubprocessDeployer
from mrelease.core.git.abc import Git
from mrelease.core.git.dry_run import DryRunGit
from mrelease.core.git.real import RealGit
from mrelease.core.issues.abc import IssueTracker
from mrelease.core.issues.dry_run import DryRunIssueTracker
from mrelease.core.issues.real import GhIssueTracker
from mrelease.core.metadata.abc import MetadataService
from mrelease.core.metadata.real import RequestsMetadataService
from mrelease.core.state import DryRunStateStore, JsonFileStateStore, StateStore
from mrelease.core.time import RealTime, Time


@dataclass(frozen=True)
class MaintenanceContext:
    """Immutable context holding all dependencies for maintenance operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    metadata: MetadataService
    issues: IssueTracker
    builder: BuildRunner
    deployer: Deployer
    state_store: StateStore
    config_store: ConfigStore
    time: Time
    config: MaintenanceConfig
    cwd: Path  # Current working directory at CLI invocation
    dry_run: bool

    @staticmethod
    def for_test(
        git: Git | None = None,
        metadata: MetadataService | None = None,
        issues: IssueTracker | None = None,
        builder: BuildRunner | None = None,
        deployer: Deployer | None = None,
        state_store: StateStore | None = None,
        config_store: ConfigStore | None = None,
        time: Time | None = None,
        config: MaintenanceConfig | None = None,
        cwd: Path | None = None,
        dry_run: bool = False,
    ) -> "MaintenanceContext":
        """Create test context with optional pre-configured gateways.

        Every gateway left as None is replaced by an empty fake, and the
        config defaults to one rooted at `cwd` (a sentinel path when omitted).

        Example:
            >>> git = FakeGit(remote_branches={Path("/repos/sim-a"): {"1.2": "abc"}})
            >>> ctx = MaintenanceContext.for_test(git=git, cwd=Path("/repos/perennial"))
        """
        from tests.fakes.build import FakeBuildRunner
        from tests.fakes.config import FakeConfigStore
        from tests.fakes.deploy import FakeDeployer
        from tests.fakes.git import FakeGit
        from tests.fakes.issues import FakeIssueTracker
        from tests.fakes.metadata import FakeMetadataService
        from tests.fakes.state import FakeStateStore
        from tests.fakes.time import FakeTime
        from tests.test_utils.paths import sentinel_path

        if cwd is None:
            cwd = sentinel_path()

        if git is None:
            git = FakeGit()

        if metadata is None:
            metadata = FakeMetadataService()

        if issues is None:
            issues = FakeIssueTracker()

        if builder is None:
            builder = FakeBuildRunner()

        if deployer is None:
            deployer = FakeDeployer()

        if state_store is None:
            state_store = FakeStateStore()

        if config_store is None:
            config_store = FakeConfigStore()

        if time is None:
            time = FakeTime()

        if config is None:
            config = default_config(cwd)

        # Apply dry-run wrappers if needed (matching production behavior)
        if dry_run:
            git = DryRunGit(git)
            issues = DryRunIssueTracker(issues)
            deployer = DryRunDeployer(deployer)
            state_store = DryRunStateStore(state_store)

        return MaintenanceContext(
            git=git,
            metadata=metadata,
            issues=issues,
            builder=builder,
            deployer=deployer,
            state_store=state_store,
            config_store=config_store,
            time=time,
            config=config,
            cwd=cwd,
            dry_run=dry_run,
        )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        tuple[Path | None, str | None]: (path, error_message)
    """
    try:
        return (Path.cwd(), None)
    except (FileNotFoundError, OSError):
        return (None, "Current working directory no longer exists")


def create_context(*, dry_run: bool, state_file: Path | None = None) -> MaintenanceContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        dry_run: If True, wrap every gateway that writes (pushes, issues,
                 deploys, the state file) with a wrapper that prints the
                 intended action instead
        state_file: Overrides the configured state file location

    Returns:
        MaintenanceContext with real implementations
    """
    # 1. Capture cwd (no deps)
    cwd, error_msg = safe_cwd()
    if cwd is None:
        user_output(click.style("Error: ", fg="red") + str(error_msg))
        raise SystemExit(1)

    # 2. Load config (defaults when the file does not exist)
    config_store = RealConfigStore()
    config = config_store.load(cwd)
    if state_file is not None:
        config = replace(config, state_file=state_file.resolve())

    # 3. Create gateways
    time: Time = RealTime()
    git: Git = RealGit()
    metadata: MetadataService = RequestsMetadataService(config.metadata_server, time=time)
    issues: IssueTracker = GhIssueTracker(config.github_org)
    deployer: Deployer = SubprocessDeployer(config.tooling_dir, list(config.deploy_command))
    state_store: StateStore = JsonFileStateStore(config.state_file)

    # 4. Apply dry-run wrappers if needed
    if dry_run:
        git = DryRunGit(git)
        issues = DryRunIssueTracker(issues)
        deployer = DryRunDeployer(deployer)
        state_store = DryRunStateStore(state_store)

    return MaintenanceContext(
        git=git,
        metadata=metadata,
        issues=issues,
        builder=SubprocessBuildRunner(),
        deployer=deployer,
        state_store=state_store,
        config_store=config_store,
        time=time,
        config=config,
        cwd=cwd,
        dry_run=dry_run,
    )
