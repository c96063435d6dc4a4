"""Build dispatch for reltrack.

Drives the external build executor for every pending ledger row and
records the outcome. The executor is optional: when it is missing or not
executable the whole pass is skipped and no rows are touched.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence
from typing import TYPE_CHECKING

from reltrack.models.config import DEFAULT_HOOK_RELPATH
from reltrack.models.release import BuildOutcome

if TYPE_CHECKING:
    from reltrack.ledger import ReleaseLedger
    from reltrack.protocols import BuildRunner

logger = logging.getLogger(__name__)


def hook_path(git_dir: str) -> str:
    """Default location of the build executor inside a git directory."""
    return os.path.join(git_dir, *DEFAULT_HOOK_RELPATH.split("/"))


def executor_available(path: str) -> bool:
    """True if *path* is a regular file we may read and execute."""
    return os.path.isfile(path) and os.access(path, os.R_OK | os.X_OK)


def run_build_executor(path: str, args: Sequence[str]) -> int:
    """Run the executor synchronously and return its exit status.

    No timeout is applied. Termination by a signal is reported as the
    negated signal number, as subprocess does. A failure to exec the
    program at all surfaces as OSError.
    """
    proc = subprocess.run([path, *args], check=False)
    return proc.returncode


class BuildDispatcher:
    """Invokes the build executor for each pending release."""

    def __init__(
        self,
        ledger: ReleaseLedger,
        executor_path: str,
        *,
        runner: BuildRunner = run_build_executor,
    ) -> None:
        self._ledger = ledger
        self._executor_path = executor_path
        self._runner = runner

    @property
    def executor_path(self) -> str:
        return self._executor_path

    def is_enabled(self) -> bool:
        return executor_available(self._executor_path)

    def dispatch(self) -> list[BuildOutcome]:
        """Build every pending release once, recording each outcome.

        Returns the outcomes in invocation order; an empty list when the
        executor is unavailable.
        """
        if not self.is_enabled():
            logger.debug(
                "build executor %s not found or not executable; skipping builds",
                self._executor_path,
            )
            return []

        outcomes: list[BuildOutcome] = []
        for pending in self._ledger.pending_builds():
            logger.info(
                "will build '%s' for '%s' as '%s'",
                pending.commit, pending.branch, pending.release,
            )
            try:
                exit_code = self._runner(
                    self._executor_path,
                    [pending.commit, pending.branch, pending.release],
                )
            except OSError as e:
                # Exec failure (e.g. bad interpreter line) is a failed build.
                logger.error("failed to run %s: %s", self._executor_path, e)
                exit_code = -1
            outcome = BuildOutcome(
                commit=pending.commit,
                branch=pending.branch,
                release=pending.release,
                exit_code=exit_code,
            )
            self._ledger.record_outcome(pending.release, pending.branch, outcome.state)
            logger.info("build status is: %s", outcome.state)
            outcomes.append(outcome)
        return outcomes
