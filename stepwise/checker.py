"""
Build-verify every commit of the history in order.

Commits are visited oldest first, skipping the very first one. Each is
checked out and the check command is run from the repository root. The
first failure stops the walk and leaves the working tree at the failing
commit.
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
import sys
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from .config import Config
from .errors import CheckFailedError, StepwiseError
from .git_adapter import Commit, checkout, ensure_repo_clean, get_toplevel, list_commits

LOG = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """
    Outcome of running the check command at one commit.
    """

    commit: str
    subject: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class CheckReport:
    """
    All commits visited by a check run, oldest first.

    ``failed`` is the result that stopped the walk, if any; it is also
    the last entry of ``results``.
    """

    command: str
    total_commits: int
    results: List[CheckResult] = field(default_factory=list)
    failed: Optional[CheckResult] = None

    @property
    def visited(self) -> List[str]:
        return [r.commit for r in self.results]


def run_check_command(command: str, cwd: str) -> int:
    """
    Run ``command`` in ``cwd`` and return its exit status.

    Output is not captured so build diagnostics reach the terminal.
    """

    argv = shlex.split(command)
    if not argv:
        raise StepwiseError("check command is empty")

    LOG.debug("Running check command: %s", " ".join(argv))
    try:
        completed = subprocess.run(argv, cwd=cwd, check=False)
    except OSError as exc:  # noqa: BLE001
        raise StepwiseError(f"failed to execute check command {argv[0]!r}: {exc}") from exc
    return completed.returncode


def check_all_commits(config: Config) -> CheckReport:
    """
    Entry point for ``stepwise check``.

    Raises CheckFailedError at the first commit whose check command
    exits non-zero; a failing checkout raises GitError. Either way no
    later commit is visited.
    """

    LOG.debug("Checking commits with config: %s", config)

    if not config.allow_dirty:
        ensure_repo_clean()

    toplevel = get_toplevel()
    commits = list_commits(reverse=True)
    report = CheckReport(command=config.check_command, total_commits=len(commits))

    for commit in _commits_to_check(commits):
        LOG.info("Checking %s: %s", commit.short_hash, commit.subject)
        checkout(commit.short_hash)

        returncode = run_check_command(config.check_command, cwd=toplevel)
        result = CheckResult(
            commit=commit.short_hash,
            subject=commit.subject,
            returncode=returncode,
        )
        report.results.append(result)

        if not result.ok:
            report.failed = result
            LOG.error(
                "Check failed at %s (%s) with exit code %d",
                commit.short_hash,
                commit.subject,
                returncode,
            )
            raise CheckFailedError(commit.short_hash, returncode, report=report)

    LOG.info("All %d checked commits passed", len(report.results))
    return report


def _commits_to_check(commits: List[Commit]) -> List[Commit]:
    # The oldest commit is skipped.
    return commits[1:]


def report_to_dict(report: CheckReport) -> Dict[str, Any]:
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "command": report.command,
        "summary": {
            "total_commits": report.total_commits,
            "checked_commits": len(report.results),
            "passed": report.failed is None,
            "failed_commit": report.failed.commit if report.failed else None,
        },
        "results": [asdict(r) for r in report.results],
    }


def write_check_report(report: CheckReport, output_path: str) -> None:
    """
    Persist a report as formatted JSON.
    """

    path = Path(output_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report_to_dict(report), indent=2, sort_keys=True) + "\n")


def print_check_summary(report: CheckReport, out: Optional[TextIO] = None) -> None:
    """
    Print a concise human-readable report summary.
    """

    stream = out or sys.stdout
    lines = [
        f"Command: {report.command}",
        f"Checked: {len(report.results)} of {report.total_commits} commits",
    ]
    if report.failed is None:
        lines.append("Status: all passed")
    else:
        lines.append(
            f"Status: failed at {report.failed.commit} ({report.failed.subject}) "
            f"with exit code {report.failed.returncode}"
        )
    stream.write("\n".join(lines) + "\n")
