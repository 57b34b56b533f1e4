from stepwise.errors import BranchNameError
from stepwise.naming import (
    branch_name_problem,
    commit_branch_name,
    start_branch_name,
    subject_token,
    validate_branch_name,
)


def test_subject_token_strips_colons_from_first_word():
    assert subject_token("A: x") == "A"
    assert subject_token("1.2: Open a window") == "1.2"
    assert subject_token("a:b:c rest") == "abc"


def test_subject_token_collapses_leading_whitespace():
    assert subject_token("   3.1:\tterrain") == "3.1"


def test_blank_subject_falls_back_to_short_hash():
    assert subject_token("", "9a5cafe") == "9a5cafe"
    assert subject_token("   ", "9a5cafe") == "9a5cafe"
    assert commit_branch_name("", "part-", "9a5cafe") == "part-9a5cafe"


def test_commit_and_start_branch_names():
    assert commit_branch_name("B: y", "part-") == "part-B"
    assert commit_branch_name("4.1: Realtime", "step/") == "step/4.1"
    assert start_branch_name(3, "part-") == "part-3.0"


def test_branch_name_problem_accepts_ordinary_names():
    for name in ["part-1.1", "part-A", "step/2.0", "part-fix_build"]:
        assert branch_name_problem(name) is None, name


def test_branch_name_problem_rejects_illegal_names():
    bad = [
        "part-a..b",
        "part-what?",
        "part-[wip]",
        "part-a~1",
        "part-b^",
        "part-dir/.hidden",
        "part-x.lock",
        "part-end.",
        "part-@{u}",
        "-part",
        "part-a\\b",
        "part-//x",
        "part-x/",
    ]
    for name in bad:
        assert branch_name_problem(name) is not None, name


def test_validate_branch_name_mentions_commit():
    try:
        validate_branch_name("part-why?", commit="abc1234")
    except BranchNameError as exc:
        message = str(exc)
        assert "part-why?" in message
        assert "abc1234" in message
    else:
        raise AssertionError("expected BranchNameError to be raised")
