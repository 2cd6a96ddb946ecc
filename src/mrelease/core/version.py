"""Simulation version strings.

Versions have the form ``MAJOR.MINOR.MAINTENANCE[-TEST_TYPE.TEST_NUMBER]``:

- ``1.5.0`` is a production version
- ``1.5.0-rc.1`` is a release candidate published before ``1.5.0``
- ``1.5.0-dev.1`` is a dev build from the primary branch

A trailing legacy brand suffix (``1.3.0-dev.1-phetio``) is accepted when
parsing and dropped.
"""

import re
from dataclasses import dataclass, replace
from typing import Any

from mrelease.core.errors import ValidationError

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)(-(([^.-]+)\.(\d+)))?(-([^.-]+))?$")


@dataclass(frozen=True)
class SimVersion:
    """Immutable simulation version.

    Comparison helpers only look at major/minor/maintenance; the test part is
    left to callers.
    """

    major: int
    minor: int
    maintenance: int
    test_type: str | None = None
    test_number: int | None = None
    build_timestamp: str | None = None

    @staticmethod
    def parse(version_string: str, build_timestamp: str | None = None) -> "SimVersion":
        """Parse a version such as '1.0.0' or '1.0.1-rc.3'.

        Raises:
            ValidationError: If the string is not a simulation version
        """
        match = _VERSION_PATTERN.match(version_string)
        if match is None:
            raise ValidationError(f"could not parse version: {version_string}")

        test_number = match.group(7)
        return SimVersion(
            major=int(match.group(1)),
            minor=int(match.group(2)),
            maintenance=int(match.group(3)),
            test_type=match.group(6),
            test_number=int(test_number) if test_number is not None else None,
            build_timestamp=build_timestamp,
        )

    @staticmethod
    def from_branch(branch: str) -> "SimVersion":
        """Version for a '{major}.{minor}' branch, with maintenance 0."""
        bits = branch.split(".")
        if len(bits) != 2 or not all(bit.isdigit() for bit in bits):
            raise ValidationError(f"Bad branch, should be {{MAJOR}}.{{MINOR}}, had: {branch}")
        return SimVersion(major=int(bits[0]), minor=int(bits[1]), maintenance=0)

    @staticmethod
    def ensure_release_branch(branch: str) -> None:
        """Validate that a branch name (optionally '-suffixed') can be a release branch."""
        version = SimVersion.from_branch(branch.split("-")[0])
        if version.major <= 0:
            raise ValidationError("Major version for a branch should be greater than zero")

    @staticmethod
    def deserialize(data: dict[str, Any]) -> "SimVersion":
        return SimVersion(
            major=int(data["major"]),
            minor=int(data["minor"]),
            maintenance=int(data["maintenance"]),
            test_type=data.get("testType"),
            test_number=data.get("testNumber"),
            build_timestamp=data.get("buildTimestamp"),
        )

    def serialize(self) -> dict[str, Any]:
        return {
            "major": self.major,
            "minor": self.minor,
            "maintenance": self.maintenance,
            "testType": self.test_type,
            "testNumber": self.test_number,
            "buildTimestamp": self.build_timestamp,
        }

    @property
    def is_release_candidate(self) -> bool:
        return self.test_type == "rc"

    @property
    def is_production(self) -> bool:
        return self.test_type is None

    def compare_number(self, other: "SimVersion") -> int:
        """Return -1, 0 or 1 comparing major/minor/maintenance only."""
        mine = (self.major, self.minor, self.maintenance)
        theirs = (other.major, other.minor, other.maintenance)
        if mine < theirs:
            return -1
        if mine > theirs:
            return 1
        return 0

    def is_after(self, other: "SimVersion") -> bool:
        return self.compare_number(other) == 1

    def is_before_or_equal_to(self, other: "SimVersion") -> bool:
        return self.compare_number(other) <= 0

    def next_release_candidate(self) -> "SimVersion":
        """The version an RC deploy of this package.json version publishes."""
        if self.test_type == "rc":
            return replace(self, test_number=(self.test_number or 0) + 1, build_timestamp=None)
        return replace(self, test_type="rc", test_number=1, build_timestamp=None)

    def to_production(self) -> "SimVersion":
        """The version a production deploy of this release candidate publishes."""
        return replace(self, test_type=None, test_number=None, build_timestamp=None)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.maintenance}"
        if self.test_type is not None:
            text += f"-{self.test_type}.{self.test_number}"
        return text
