"""ReleaseTracker -- the entry point for one tracking run.

Opens the repository gateway and the ledger, reconciles every candidate
release discovered on tracked branches, then dispatches builds for the
rows left pending.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from pydantic import BaseModel

from reltrack.exceptions import ReleaseTrackError
from reltrack.gateway import GitRepository
from reltrack.ledger import ReleaseLedger
from reltrack.models.config import DEFAULT_LEDGER_NAME, TrackerConfig
from reltrack.models.release import BuildOutcome, CandidateRelease, ReconcileOutcome
from reltrack.operations.discovery import discover_releases
from reltrack.operations.dispatch import BuildDispatcher, hook_path, run_build_executor

if TYPE_CHECKING:
    from reltrack.protocols import BuildRunner, RepositoryGateway

logger = logging.getLogger(__name__)


class TrackResult(BaseModel):
    """Summary of one tracking run."""

    added: list[CandidateRelease] = []
    replaced: list[CandidateRelease] = []
    unchanged: list[CandidateRelease] = []
    builds: list[BuildOutcome] = []
    dispatched: bool = False

    @property
    def discovered(self) -> int:
        return len(self.added) + len(self.replaced) + len(self.unchanged)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.replaced or self.builds)


def ledger_path(git_dir: str) -> str:
    """Default ledger location inside a git directory."""
    return os.path.join(git_dir, DEFAULT_LEDGER_NAME)


class ReleaseTracker:
    """Discovers releases in a repository and keeps the ledger current.

    Create via :meth:`open` for a real repository, or pass a gateway and
    ledger directly (tests use an in-memory gateway and ledger).

    Example::

        with ReleaseTracker.open(TrackerConfig(repo_path="/srv/git/pkg.git")) as t:
            result = t.run()
    """

    def __init__(
        self,
        gateway: RepositoryGateway,
        ledger: ReleaseLedger,
        *,
        config: TrackerConfig | None = None,
        runner: BuildRunner = run_build_executor,
    ) -> None:
        self._gateway = gateway
        self._ledger = ledger
        self._config = config or TrackerConfig()
        self._runner = runner
        self._closed = False

    @classmethod
    def open(
        cls,
        config: TrackerConfig | None = None,
        *,
        runner: BuildRunner = run_build_executor,
    ) -> ReleaseTracker:
        """Open the repository and its ledger.

        Raises:
            RepositoryOpenError: the repository cannot be opened.
            LedgerError: the ledger cannot be opened or created.
            LedgerNotFoundError: the ledger file is missing and
                ``config.create_ledger`` is false.
        """
        config = config or TrackerConfig()
        gateway = GitRepository.open(config.repo_path)
        try:
            if config.db_url is not None:
                ledger = ReleaseLedger.open(url=config.db_url)
            else:
                ledger = ReleaseLedger.open(
                    config.db_path or ledger_path(gateway.git_dir),
                    create=config.create_ledger,
                )
        except ReleaseTrackError:
            gateway.close()
            raise
        return cls(gateway, ledger, config=config, runner=runner)

    @property
    def gateway(self) -> RepositoryGateway:
        return self._gateway

    @property
    def ledger(self) -> ReleaseLedger:
        return self._ledger

    @property
    def executor_path(self) -> str:
        return self._config.hook_path or hook_path(self._gateway.git_dir)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def reconcile_all(self, result: TrackResult | None = None) -> TrackResult:
        """Discover releases on every tracked branch and reconcile them."""
        result = result or TrackResult()
        buckets = {
            ReconcileOutcome.ADDED: result.added,
            ReconcileOutcome.REPLACED: result.replaced,
            ReconcileOutcome.UNCHANGED: result.unchanged,
        }
        for candidate in discover_releases(self._gateway, namespace=self._config.namespace):
            outcome = self._ledger.reconcile(candidate)
            buckets[outcome].append(candidate)
        return result

    def dispatch_builds(self, result: TrackResult | None = None) -> TrackResult:
        """Run the build executor for every pending release."""
        result = result or TrackResult()
        dispatcher = BuildDispatcher(self._ledger, self.executor_path, runner=self._runner)
        result.dispatched = dispatcher.is_enabled()
        result.builds.extend(dispatcher.dispatch())
        return result

    def run(self) -> TrackResult:
        """Reconcile all branches, then dispatch pending builds."""
        result = self.reconcile_all()
        if self._config.dispatch_builds:
            self.dispatch_builds(result)
        logger.debug(
            "run complete: %d discovered, %d added, %d replaced, %d built",
            result.discovered, len(result.added), len(result.replaced), len(result.builds),
        )
        return result

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._ledger.close()
        close_gateway = getattr(self._gateway, "close", None)
        if close_gateway is not None:
            close_gateway()

    def __enter__(self) -> ReleaseTracker:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else self._gateway.git_dir
        return f"ReleaseTracker({state})"
