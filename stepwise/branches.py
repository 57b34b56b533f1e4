"""
Publish every commit of the history as its own branch.

Each commit gets a ``part-<token>`` branch, force-created locally and
force-pushed. After that, ``part-<i>.0`` markers are placed one commit
before ``part-<i>.1`` so every section has a starting point.

The whole plan is computed and validated before any ref is touched.
Once mutation starts, the first failing git command aborts the run and
whatever was already created or pushed stays in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal

from .config import Config
from .errors import BranchNameError, GitError
from .git_adapter import Commit, force_branch, list_commits, push_branch, rev_parse
from .naming import (
    commit_branch_name,
    first_step_branch_name,
    start_branch_name,
    validate_branch_name,
)

LOG = logging.getLogger(__name__)


@dataclass
class BranchAssignment:
    """
    A branch to force-create at ``target``.

    ``source`` is the human-readable origin of the target: the commit
    subject for commit branches, or the revision expression
    (``part-3.1~1``) for start markers.
    """

    name: str
    target: str
    kind: Literal["commit", "start"]
    source: str


@dataclass
class BranchPlan:
    """
    Ordered branch assignments: commit branches newest first, then
    start markers in ascending section order.
    """

    assignments: List[BranchAssignment] = field(default_factory=list)

    def names(self) -> List[str]:
        return [a.name for a in self.assignments]


def plan_branches(commits: List[Commit], config: Config) -> BranchPlan:
    """
    Derive and validate all branch assignments for ``commits``.

    ``commits`` must be in ``git log`` order (newest first). Start
    markers are resolved against the commits planned for
    ``part-<i>.1``; a missing step or a root-commit step raises before
    anything is written.
    """

    plan = BranchPlan()
    claimed: Dict[str, Commit] = {}

    for commit in commits:
        name = commit_branch_name(commit.subject, config.prefix, commit.short_hash)
        validate_branch_name(name, commit=commit.short_hash)

        previous = claimed.get(name)
        if previous is not None:
            raise BranchNameError(
                f"branch name {name!r} derived from both commit "
                f"{previous.short_hash} ({previous.subject!r}) and commit "
                f"{commit.short_hash} ({commit.subject!r})"
            )
        claimed[name] = commit

        plan.assignments.append(
            BranchAssignment(
                name=name,
                target=commit.short_hash,
                kind="commit",
                source=commit.subject,
            )
        )

    for i in range(1, config.start_branches + 1):
        step_name = first_step_branch_name(i, config.prefix)
        step_commit = claimed.get(step_name)
        if step_commit is None:
            raise BranchNameError(
                f"cannot place {start_branch_name(i, config.prefix)}: "
                f"no commit maps to {step_name}"
            )

        name = start_branch_name(i, config.prefix)
        validate_branch_name(name)
        if name in claimed:
            raise BranchNameError(
                f"start marker {name!r} collides with commit "
                f"{claimed[name].short_hash} ({claimed[name].subject!r})"
            )

        try:
            parent = rev_parse(f"{step_commit.short_hash}~1")
        except GitError as exc:
            raise GitError(
                f"cannot place {name}: {step_name} ({step_commit.short_hash}) has no parent"
            ) from exc

        plan.assignments.append(
            BranchAssignment(
                name=name,
                target=parent,
                kind="start",
                source=f"{step_name}~1",
            )
        )

    return plan


def apply_branch_plan(plan: BranchPlan, config: Config) -> None:
    """
    Force-create and (optionally) force-push every planned branch.

    In dry-run mode this only logs what would happen.
    """

    if config.dry_run:
        LOG.info("Dry run: would update %d branches", len(plan.assignments))
        for assignment in plan.assignments:
            LOG.info(
                "  %s -> %s (%s)",
                assignment.name,
                assignment.target,
                assignment.source,
            )
        return

    for assignment in plan.assignments:
        LOG.info("Setting %s to %s", assignment.name, assignment.target)
        force_branch(assignment.name, assignment.target)
        if config.push:
            LOG.info("Force-pushing %s to %s", assignment.name, config.remote)
            push_branch(config.remote, assignment.name, force=True)


def update_branches(config: Config) -> BranchPlan:
    """
    Entry point for ``stepwise branches``.
    """

    LOG.debug("Updating branches with config: %s", config)

    commits = list_commits()
    plan = plan_branches(commits, config)
    apply_branch_plan(plan, config)
    return plan
