"""Dependency manifest (dependencies.json) helpers.

A manifest maps each repository name to ``{"sha": ..., "branch": ...}`` and
may carry a free-form ``"comment"`` entry that is not a repository.
"""

import json
from typing import Any

MANIFEST_FILENAME = "dependencies.json"
COMMENT_KEY = "comment"

Manifest = dict[str, Any]


def parse_manifest(text: str) -> Manifest:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{MANIFEST_FILENAME} must contain a JSON object")
    return data


def dump_manifest(manifest: Manifest) -> str:
    return json.dumps(manifest, indent=2) + "\n"


def dependency_repos(manifest: Manifest) -> list[str]:
    return [key for key in manifest if key != COMMENT_KEY]


def pinned_sha(manifest: Manifest, repo: str) -> str | None:
    """Return the commit pinned for `repo`, or None if it is not a dependency."""
    entry = manifest.get(repo)
    if repo == COMMENT_KEY or not isinstance(entry, dict):
        return None
    return entry.get("sha")


def set_pinned_sha(manifest: Manifest, repo: str, sha: str, branch: str | None = None) -> None:
    entry = manifest.setdefault(repo, {})
    entry["sha"] = sha
    if branch is not None:
        entry["branch"] = branch
