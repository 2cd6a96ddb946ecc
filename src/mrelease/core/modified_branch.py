"""Working state of one release branch during a maintenance cycle."""

from dataclasses import dataclass, field
from typing import Any

from mrelease.core.capabilities import LinkCapabilities
from mrelease.core.errors import ValidationError
from mrelease.core.patch import Patch
from mrelease.core.release_branch import ReleaseBranch
from mrelease.core.version import SimVersion

UNRELEASED_ISSUE_LABEL = "status:ready-for-qa"


@dataclass
class ModifiedBranch:
    """A release branch with pending or applied (but unpublished) changes.

    Attributes:
        release_branch: Shared descriptor, never copied
        changed_dependencies: dependency repo -> local SHA not yet in the manifest
        needed_patches: Patches still to be applied, in order
        pending_messages: Messages for applied changes not yet pushed
        pushed_messages: Messages for changes pushed but not yet in production
        deployed_version: Last deployed version; cleared whenever a dependency changes
    """

    release_branch: ReleaseBranch
    changed_dependencies: dict[str, str] = field(default_factory=dict)
    needed_patches: list[Patch] = field(default_factory=list)
    pending_messages: list[str] = field(default_factory=list)
    pushed_messages: list[str] = field(default_factory=list)
    deployed_version: SimVersion | None = None

    @property
    def repo(self) -> str:
        return self.release_branch.repo

    @property
    def branch(self) -> str:
        return self.release_branch.branch

    @property
    def brands(self) -> tuple[str, ...]:
        return self.release_branch.brands

    @property
    def is_unused(self) -> bool:
        """Whether nothing about this branch is worth tracking any more."""
        return (
            not self.needed_patches
            and not self.changed_dependencies
            and not self.pushed_messages
            and not self.pending_messages
        )

    @property
    def is_ready_for_release_candidate(self) -> bool:
        return (
            not self.needed_patches
            and bool(self.pushed_messages)
            and self.deployed_version is None
        )

    @property
    def is_ready_for_production(self) -> bool:
        return (
            not self.needed_patches
            and bool(self.pushed_messages)
            and self.deployed_version is not None
            and self.deployed_version.is_release_candidate
        )

    @property
    def dependency_branch(self) -> str:
        """Branch name used in dependency repositories for this release branch."""
        return f"{self.repo}-{self.branch}"

    def needs_patch(self, patch: Patch) -> bool:
        return any(needed is patch for needed in self.needed_patches)

    def add_pending_message(self, message: str) -> None:
        if message not in self.pending_messages:
            self.pending_messages.append(message)

    def push_pending_messages(self) -> None:
        """Move pending messages to pushed, keeping pushed messages unique."""
        for message in self.pending_messages:
            if message not in self.pushed_messages:
                self.pushed_messages.append(message)
        self.pending_messages = []

    def serialize(self) -> dict[str, Any]:
        return {
            "releaseBranch": self.release_branch.serialize(),
            "changedDependencies": dict(self.changed_dependencies),
            "neededPatches": [patch.name for patch in self.needed_patches],
            "pendingMessages": list(self.pending_messages),
            "pushedMessages": list(self.pushed_messages),
            "deployedVersion": (
                self.deployed_version.serialize() if self.deployed_version is not None else None
            ),
        }

    @staticmethod
    def deserialize(data: dict[str, Any], patches: list[Patch]) -> "ModifiedBranch":
        """Rebuild a ModifiedBranch, linking needed patch names to `patches` by reference."""
        patches_by_name = {patch.name: patch for patch in patches}
        needed: list[Patch] = []
        for name in data.get("neededPatches", []):
            if name not in patches_by_name:
                raise ValidationError(f"Modified branch references unknown patch: {name}")
            needed.append(patches_by_name[name])

        deployed = data.get("deployedVersion")
        return ModifiedBranch(
            release_branch=ReleaseBranch.deserialize(data["releaseBranch"]),
            changed_dependencies=dict(data.get("changedDependencies", {})),
            needed_patches=needed,
            pending_messages=list(data.get("pendingMessages", [])),
            pushed_messages=list(data.get("pushedMessages", [])),
            deployed_version=SimVersion.deserialize(deployed) if deployed else None,
        )

    def deployed_link_lines(
        self, capabilities: LinkCapabilities, include_messages: bool = True
    ) -> list[str]:
        """Markdown checklist lines linking to the deployed versions for testing."""
        if self.deployed_version is None:
            raise ValidationError(f"{self.repo} {self.branch} has no deployed version")

        repo = self.repo
        version = str(self.deployed_version)
        chipper2 = capabilities.uses_chipper2
        standalone = capabilities.phetio_standalone_query_parameter
        proxies_param = (
            "relativeSimPath" if capabilities.uses_relative_sim_path else "launchLocalVersion"
        )
        studio_name = "studio" if capabilities.uses_phetio_studio else "instance-proxies"
        studio_title = "Studio" if studio_name == "studio" else "Instance Proxies"
        phet_folder = "/phet" if chipper2 else ""
        phetio_folder = "/phet-io" if chipper2 else ""
        phet_suffix = "_phet" if chipper2 else ""
        phetio_suffix = "_all_phet-io" if chipper2 else "_en-phetio"
        phetio_brand_suffix = "" if chipper2 else "-phetio"
        studio_path = (
            ""
            if capabilities.uses_phetio_studio_index
            else f"/{studio_name}.html?sim={repo}&{proxies_param}"
        )
        phetio_dev_version = version if chipper2 else "-phetio".join(version.split("-"))

        links: list[str] = []
        if self.deployed_version.is_release_candidate:
            dev_root = f"https://phet-dev.colorado.edu/html/{repo}"
            if "phet" in self.brands:
                links.append(f"]({dev_root}/{version}{phet_folder}/{repo}_all{phet_suffix}.html)")
            if "phet-io" in self.brands:
                phetio_root = f"{dev_root}/{phetio_dev_version}{phetio_folder}"
                links.append(f" phet-io]({phetio_root}/{repo}{phetio_suffix}.html?{standalone})")
                links.append(
                    f" phet-io {studio_title}]({phetio_root}/wrappers/{studio_name}{studio_path})"
                )
        else:
            if "phet" in self.brands:
                links.append(
                    f"](https://phet.colorado.edu/sims/html/{repo}/{version}/{repo}_all.html)"
                )
            if "phet-io" in self.brands:
                phetio_root = (
                    f"https://phet-io.colorado.edu/sims/{repo}/{version}{phetio_brand_suffix}"
                )
                links.append(f" phet-io]({phetio_root}/{repo}{phetio_suffix}.html?{standalone})")
                links.append(
                    f" phet-io {studio_title}]({phetio_root}/wrappers/{studio_name}{studio_path})"
                )

        lines = [f"- [ ] [{repo} {version}{link}" for link in links]
        if include_messages:
            lines.insert(0, f"\n**{repo} {self.branch}** ({', '.join(self.pushed_messages)})\n")
        return lines

    def unreleased_issue_body(self, additional_notes: str = "") -> str:
        """Body of the QA issue noting untested changes on an unreleased branch."""
        messages = "\n".join(f"- {message}" for message in self.pushed_messages)
        body = (
            f"This branch ({self.branch}) had changes related to the following applied:\n\n"
            f"{messages}\n\n"
            "Presumably one or more of these changes is likely to have been applied after the "
            "last RC version, and should be spot-checked by QA in the next RC (or if it was ready "
            "for a production release, an additional spot-check RC should be created).\n"
        )
        if additional_notes:
            body += f"\n{additional_notes}"
        return body

    def unreleased_issue_title(self) -> str:
        return f"Maintenance patches applied to branch {self.branch}"

    def __str__(self) -> str:
        return f"{self.repo} {self.branch}"
