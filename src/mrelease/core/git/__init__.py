from mrelease.core.git.abc import CherryPickResult, Git

__all__ = ["CherryPickResult", "Git"]
