"""
Git integration for stepwise.

All interaction with the git CLI goes through ``_run_git`` so that
logging and error reporting stay in one place.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from .errors import GitError

LOG = logging.getLogger(__name__)

# Output of the %x00 placeholder that separates hash and subject in
# ``git log`` output. Subjects never contain NUL.
_FIELD_SEP = "\x00"


@dataclass(frozen=True)
class Commit:
    """
    One entry of the commit history: abbreviated hash and subject line.
    """

    short_hash: str
    subject: str


def _run_git(
    args: list[str],
    cwd: Optional[str] = None,
    input_text: Optional[str] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command and return the completed process.

    A non-zero exit status raises GitError carrying the command line and
    git's own error output. Output is decoded as UTF-8 with undecodable
    bytes replaced, since commit messages are not guaranteed to be UTF-8.
    """

    cmd = ["git", *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
            input=input_text,
        )
    except OSError as exc:  # noqa: BLE001
        raise GitError(f"failed to execute git: {exc}") from exc

    if completed.returncode != 0:
        LOG.debug("git stderr: %s", completed.stderr)
        detail = (completed.stderr or "").strip()
        message = f"git command failed: {' '.join(cmd)}"
        if detail:
            message = f"{message}: {detail}"
        raise GitError(message)

    return completed


def list_commits(reverse: bool = False) -> List[Commit]:
    """
    Return the history reachable from HEAD.

    Newest first by default, which is the order ``git log`` prints;
    ``reverse=True`` gives oldest first.
    """

    args = ["log", "--pretty=format:%h%x00%s"]
    if reverse:
        args.append("--reverse")

    output = _run_git(args).stdout
    commits: List[Commit] = []
    for line in output.splitlines():
        if not line:
            continue
        short_hash, _, subject = line.partition(_FIELD_SEP)
        commits.append(Commit(short_hash=short_hash, subject=subject))
    return commits


def rev_parse(rev: str) -> str:
    """
    Resolve a revision expression to a full commit hash.
    """

    return _run_git(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"]).stdout.strip()


def force_branch(name: str, start_point: str) -> None:
    """
    Create or move branch ``name`` to ``start_point`` unconditionally.
    """

    _run_git(["branch", "--force", name, start_point])


def push_branch(remote: str, name: str, force: bool = True) -> None:
    """
    Push a local branch to ``remote`` under the same name.
    """

    args = ["push", remote, name]
    if force:
        args.append("--force")
    _run_git(args)


def checkout(ref: str) -> None:
    """
    Check out the given ref.
    """

    _run_git(["checkout", ref])


def get_toplevel() -> str:
    """
    Return the root directory of the current working tree.
    """

    return _run_git(["rev-parse", "--show-toplevel"]).stdout.strip()


def ensure_repo_clean() -> None:
    """
    Raise GitError if the working tree has uncommitted changes.
    """

    status = _run_git(["status", "--porcelain"]).stdout
    entries = [line for line in status.splitlines() if line.strip()]
    if entries:
        listing = ", ".join(line[3:] for line in entries)
        raise GitError(f"repository has uncommitted changes: {listing}")
