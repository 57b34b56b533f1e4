"""
Custom exception types used across stepwise.

The CLI is the only layer that turns these into exit codes; everything
below it raises and lets the error propagate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .checker import CheckReport


class StepwiseError(Exception):
    """Base class for all stepwise specific errors."""


class GitError(StepwiseError):
    """Raised when git operations fail."""


class BranchNameError(StepwiseError):
    """Raised when a derived branch name is illegal or ambiguous."""


class CheckFailedError(StepwiseError):
    """
    Raised when the build-verification command fails for a commit.

    The working tree is left checked out at ``commit`` so the failure
    can be inspected by hand.
    """

    def __init__(
        self,
        commit: str,
        returncode: int,
        report: Optional["CheckReport"] = None,
    ) -> None:
        super().__init__(f"check failed at commit {commit} (exit code {returncode})")
        self.commit = commit
        self.returncode = returncode
        self.report = report


class DevShellError(StepwiseError):
    """Raised when the development shell cannot be resolved."""
