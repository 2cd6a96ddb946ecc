"""Interactive maintenance session."""

import code
import logging
from typing import Any

import click

from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine
from mrelease.core.errors import MaintenanceError
from mrelease.core.predicates import (
    ContainsText,
    MatchesPattern,
    Negated,
    ReleaseBranchSelector,
    accept_all,
)
from mrelease.core.release_branch import ReleaseBranch

BANNER = """mrelease interactive session

  m        the maintenance engine, e.g. m.create_patch("sim-a", "issue #12", "fix-1")
  session  session settings, e.g. session.verbose = True
  select   ReleaseBranchSelector.build(repos=..., brands=..., released=...)
"""


class MaintenanceSession:
    """State of one interactive session: the engine and how chatty it is."""

    def __init__(self, engine: MaintenanceEngine, *, verbose: bool = False) -> None:
        self.engine = engine
        self._logger = logging.getLogger("mrelease")
        self.verbose = verbose

    @property
    def verbose(self) -> bool:
        return self._logger.level <= logging.INFO

    @verbose.setter
    def verbose(self, value: bool) -> None:
        self._logger.setLevel(logging.INFO if value else logging.ERROR)

    def namespace(self) -> dict[str, Any]:
        return {
            "session": self,
            "m": self.engine,
            "engine": self.engine,
            "ReleaseBranch": ReleaseBranch,
            "select": ReleaseBranchSelector.build,
            "ContainsText": ContainsText,
            "MatchesPattern": MatchesPattern,
            "Negated": Negated,
            "accept_all": accept_all,
        }


class _SessionConsole(code.InteractiveConsole):
    """Console that reports maintenance failures without a full traceback."""

    def runcode(self, code_object: Any) -> None:
        # Mirrors code.InteractiveConsole.runcode, which handles every exception itself
        try:
            exec(code_object, self.locals)
        except MaintenanceError as e:
            self.write(f"Maintenance task failed: {e}\n")
        except SystemExit:
            raise
        except BaseException:
            self.showtraceback()


@click.command("repl")
@click.option("--verbose/--quiet", "verbose", default=False, help="Show progress lines")
@click.pass_obj
def repl_cmd(ctx: MaintenanceContext, verbose: bool) -> None:
    """Start an interactive session with the engine bound to `m`."""
    session = MaintenanceSession(MaintenanceEngine(ctx), verbose=verbose)
    _SessionConsole(locals=session.namespace()).interact(banner=BANNER, exitmsg="")
