"""
Configuration model for stepwise.

The CLI constructs a Config instance and passes it down into the
branch and check operations so behavior can be adjusted without relying
on global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_REMOTE = "origin"
DEFAULT_PREFIX = "part-"
DEFAULT_START_BRANCHES = 5
DEFAULT_CHECK_COMMAND = "cargo check"


@dataclass
class Config:
    """
    Top-level configuration for a stepwise run.
    """

    remote: str = DEFAULT_REMOTE
    prefix: str = DEFAULT_PREFIX
    start_branches: int = DEFAULT_START_BRANCHES
    push: bool = True
    dry_run: bool = False
    check_command: str = DEFAULT_CHECK_COMMAND
    allow_dirty: bool = False
    report_path: Optional[str] = None
    verbosity: int = 0
