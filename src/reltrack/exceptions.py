"""reltrack exception hierarchy.

All reltrack-specific exceptions inherit from ReleaseTrackError.
"""


class ReleaseTrackError(Exception):
    """Base exception for all reltrack errors."""


class RepositoryOpenError(ReleaseTrackError):
    """Raised when a git repository cannot be located or opened."""

    def __init__(self, path: str | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        where = path if path is not None else "."
        super().__init__(f"{where}: {reason}")


class LedgerError(ReleaseTrackError):
    """Raised when a ledger statement fails.

    Carries the statement text alongside the backing database error so the
    CLI can report both before terminating.
    """

    def __init__(self, statement: str, cause: BaseException) -> None:
        self.statement = statement
        self.cause = cause
        super().__init__(f"{cause} (while executing '{statement}')")


class InvalidBranchNameError(ReleaseTrackError):
    """Raised when a branch name is not valid for release-tracking."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid branch name '{name}': {reason}")


class CommitLookupError(ReleaseTrackError):
    """Raised when a reference or commit cannot be resolved."""

    def __init__(self, ref: str, reason: str | None = None) -> None:
        self.ref = ref
        self.reason = reason
        msg = f"Failed to locate commit for '{ref}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class LedgerNotFoundError(ReleaseTrackError):
    """Raised when an existing ledger is required but none is present."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"No release ledger at {path}")
