"""Maintenance configuration data structures and loading.

Configuration lives in ~/.mrelease/config.toml. Every key is optional;
missing keys fall back to defaults derived from the invocation directory,
which is expected to be the tooling checkout sitting next to all other
repositories (``<repos_root>/perennial``).
"""

import os
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import tomlkit

from mrelease.core.errors import ValidationError

DEFAULT_STATE_FILENAME = ".maintenance.json"


@dataclass(frozen=True)
class MaintenanceConfig:
    """Immutable maintenance configuration.

    Loaded once at CLI entry point and stored in MaintenanceContext.
    """

    repos_root: Path
    state_file: Path
    release_branches_dir: Path
    tooling_dir: Path
    concurrency: int = 5
    metadata_server: str = "https://phet.colorado.edu"
    github_org: str = "phetsims"
    primary_branch: str = "main"
    locales: str = "*"
    deploy_command: tuple[str, ...] = field(default=("grunt",))

    def repo_dir(self, repo: str) -> Path:
        return self.repos_root / repo

    def remote_url(self, repo: str) -> str:
        return f"https://github.com/{self.github_org}/{repo}.git"


def default_config(cwd: Path) -> MaintenanceConfig:
    """Defaults for running from the tooling checkout at `cwd`."""
    repos_root = cwd.parent
    return MaintenanceConfig(
        repos_root=repos_root,
        state_file=cwd / DEFAULT_STATE_FILENAME,
        release_branches_dir=repos_root / "release-branches",
        tooling_dir=cwd,
    )


def _parse_path(value: Any, cwd: Path) -> Path:
    path = Path(str(value)).expanduser()
    return path if path.is_absolute() else (cwd / path).resolve()


def _parse_positive_int(value: Any, cwd: Path) -> int:
    number = int(value)
    if number < 1:
        raise ValueError("must be at least 1")
    return number


def _parse_str(value: Any, cwd: Path) -> str:
    return str(value)


def _parse_command(value: Any, cwd: Path) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(value.split())
    return tuple(str(part) for part in value)


# key -> (dataclass field, parser)
CONFIG_KEYS = {
    "repos_root": ("repos_root", _parse_path),
    "state_file": ("state_file", _parse_path),
    "release_branches_dir": ("release_branches_dir", _parse_path),
    "tooling_dir": ("tooling_dir", _parse_path),
    "concurrency": ("concurrency", _parse_positive_int),
    "metadata_server": ("metadata_server", _parse_str),
    "github_org": ("github_org", _parse_str),
    "primary_branch": ("primary_branch", _parse_str),
    "locales": ("locales", _parse_str),
    "deploy_command": ("deploy_command", _parse_command),
}


def apply_settings(
    config: MaintenanceConfig, settings: dict[str, Any], cwd: Path
) -> MaintenanceConfig:
    """Return `config` with raw TOML settings applied.

    Raises:
        ValidationError: On an unknown key or a value that does not parse
    """
    changes: dict[str, Any] = {}
    for key, raw in settings.items():
        if key not in CONFIG_KEYS:
            raise ValidationError(f"Unknown config key: {key}")
        field_name, parse = CONFIG_KEYS[key]
        try:
            changes[field_name] = parse(raw, cwd)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid value for {key}: {raw!r} ({e})") from e
    return replace(config, **changes)


class ConfigStore(ABC):
    """Abstract interface for config operations.

    Provides dependency injection for config access, enabling in-memory
    implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if the config file exists."""
        ...

    @abstractmethod
    def load_settings(self) -> dict[str, Any]:
        """Load the raw key/value settings (empty when no file exists)."""
        ...

    @abstractmethod
    def set_value(self, key: str, value: Any) -> None:
        """Persist a single setting, keeping the rest of the file intact."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the config file (for messages)."""
        ...

    def load(self, cwd: Path) -> MaintenanceConfig:
        """Load the effective configuration for an invocation from `cwd`."""
        return apply_settings(default_config(cwd), self.load_settings(), cwd)


class RealConfigStore(ConfigStore):
    """Production implementation that reads/writes ~/.mrelease/config.toml."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._path = config_path

    def path(self) -> Path:
        if self._path is not None:
            return self._path
        override = os.environ.get("MRELEASE_CONFIG")
        if override:
            return Path(override).expanduser()
        return Path.home() / ".mrelease" / "config.toml"

    def exists(self) -> bool:
        return self.path().exists()

    def load_settings(self) -> dict[str, Any]:
        config_path = self.path()
        if not config_path.exists():
            return {}
        try:
            return tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValidationError(f"Malformed config file {config_path}: {e}") from e

    def set_value(self, key: str, value: Any) -> None:
        if key not in CONFIG_KEYS:
            raise ValidationError(f"Unknown config key: {key}")

        config_path = self.path()
        if config_path.exists():
            with config_path.open("r", encoding="utf-8") as f:
                doc = tomlkit.load(f)
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("mrelease configuration"))

        doc[key] = value

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)
