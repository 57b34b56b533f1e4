"""
Branch-name derivation for stepwise.

A step commit is published under ``<prefix><token>`` where ``token`` is
the first word of its subject with colons removed, so a subject like
``2.3: Draw the terrain`` becomes ``part-2.3``.
"""

from __future__ import annotations

import re
from typing import Optional

from .config import DEFAULT_PREFIX
from .errors import BranchNameError

# Characters git refuses anywhere in a ref name (see git-check-ref-format).
_FORBIDDEN_CHARS = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


def subject_token(subject: str, short_hash: str = "") -> str:
    """
    Return the first whitespace-delimited word of ``subject`` with all
    colons stripped.

    A blank subject yields ``short_hash`` instead, as a ``git log
    --pretty="%h %s"`` line then holds nothing but the hash.
    """

    words = subject.split()
    if not words:
        return short_hash.replace(":", "")
    return words[0].replace(":", "")


def commit_branch_name(
    subject: str,
    prefix: str = DEFAULT_PREFIX,
    short_hash: str = "",
) -> str:
    return f"{prefix}{subject_token(subject, short_hash)}"


def start_branch_name(n: int, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}{n}.0"


def first_step_branch_name(n: int, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}{n}.1"


def branch_name_problem(name: str) -> Optional[str]:
    """
    Return why ``name`` is not a legal branch name, or None if it is.

    The rules mirror ``git check-ref-format --branch``.
    """

    if not name:
        return "name is empty"
    if name == "@":
        return "name is '@'"
    if name.startswith("-"):
        return "name starts with '-'"
    if name.startswith("/") or name.endswith("/"):
        return "name starts or ends with '/'"
    if "//" in name:
        return "name contains '//'"
    if ".." in name:
        return "name contains '..'"
    if "@{" in name:
        return "name contains '@{'"
    if name.endswith("."):
        return "name ends with '.'"

    match = _FORBIDDEN_CHARS.search(name)
    if match:
        return f"name contains forbidden character {match.group(0)!r}"

    for component in name.split("/"):
        if component.startswith("."):
            return f"component {component!r} starts with '.'"
        if component.endswith(".lock"):
            return f"component {component!r} ends with '.lock'"

    return None


def validate_branch_name(name: str, commit: Optional[str] = None) -> None:
    """
    Raise BranchNameError if ``name`` cannot be used as a branch name.
    """

    problem = branch_name_problem(name)
    if problem is None:
        return

    where = f" (derived from commit {commit})" if commit else ""
    raise BranchNameError(f"invalid branch name {name!r}{where}: {problem}")
