"""Fake config store for testing."""

from pathlib import Path
from typing import Any

from mrelease.core.config import CONFIG_KEYS, ConfigStore
from mrelease.core.errors import ValidationError


class FakeConfigStore(ConfigStore):
    """In-memory implementation for testing.

    Settings are held in a dict; `path` is only used in messages.
    """

    def __init__(
        self,
        *,
        settings: dict[str, Any] | None = None,
        path: Path | None = None,
    ) -> None:
        """Create FakeConfigStore.

        Args:
            settings: Raw settings, as they would appear in the TOML file.
                None means the file does not exist.
            path: Reported config path
        """
        self._settings = dict(settings) if settings is not None else None
        self._path = path if path is not None else Path("/test/config/config.toml")

    @property
    def settings(self) -> dict[str, Any] | None:
        return self._settings

    def exists(self) -> bool:
        return self._settings is not None

    def load_settings(self) -> dict[str, Any]:
        return dict(self._settings) if self._settings is not None else {}

    def set_value(self, key: str, value: Any) -> None:
        if key not in CONFIG_KEYS:
            raise ValidationError(f"Unknown config key: {key}")
        if self._settings is None:
            self._settings = {}
        self._settings[key] = value

    def path(self) -> Path:
        return self._path
