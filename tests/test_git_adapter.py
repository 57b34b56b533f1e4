import subprocess

from stepwise.errors import GitError
from stepwise.git_adapter import Commit, _run_git, ensure_repo_clean, list_commits


def test_run_git_includes_stderr_details_on_failure(monkeypatch):
    def fake_run(*args, **kwargs):
        return subprocess.CompletedProcess(
            args=["git", "status"],
            returncode=128,
            stdout="",
            stderr="fatal: not a git repository",
        )

    monkeypatch.setattr("stepwise.git_adapter.subprocess.run", fake_run)

    try:
        _run_git(["status"])
    except GitError as exc:
        message = str(exc)
        assert "git status" in message
        assert "fatal: not a git repository" in message
    else:
        raise AssertionError("expected GitError to be raised")


def test_run_git_wraps_missing_executable(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr("stepwise.git_adapter.subprocess.run", fake_run)

    try:
        _run_git(["status"])
    except GitError as exc:
        assert "failed to execute git" in str(exc)
    else:
        raise AssertionError("expected GitError to be raised")


def test_ensure_repo_clean_reports_dirty_entries(monkeypatch):
    class FakeCompleted:
        def __init__(self, stdout: str):
            self.stdout = stdout

    monkeypatch.setattr(
        "stepwise.git_adapter._run_git",
        lambda args, cwd=None, input_text=None: FakeCompleted(" M foo.rs\n?? tmp.txt\n"),
    )

    try:
        ensure_repo_clean()
    except GitError as exc:
        message = str(exc)
        assert "repository has uncommitted changes" in message
        assert "foo.rs" in message
    else:
        raise AssertionError("expected GitError to be raised")


def test_list_commits_splits_hash_from_subject(monkeypatch):
    calls = []

    class FakeCompleted:
        stdout = "b2c3d4e\x002.1: Draw terrain: hills\na1b2c3d\x00\n"

    def fake_run_git(args, cwd=None, input_text=None):
        calls.append(args)
        return FakeCompleted()

    monkeypatch.setattr("stepwise.git_adapter._run_git", fake_run_git)

    commits = list_commits(reverse=True)

    assert commits == [
        Commit(short_hash="b2c3d4e", subject="2.1: Draw terrain: hills"),
        Commit(short_hash="a1b2c3d", subject=""),
    ]
    assert calls[0][0] == "log"
    assert "--reverse" in calls[0]


def test_list_commits_tolerates_non_utf8_subjects(tmp_path, monkeypatch):
    repo = tmp_path / "repo"
    repo.mkdir()
    for args in (
        ["init"],
        ["config", "user.name", "stepwise"],
        ["config", "user.email", "stepwise@example.com"],
    ):
        subprocess.run(["git", *args], cwd=str(repo), check=True, capture_output=True)

    message = tmp_path / "message.txt"
    message.write_bytes(b"caf\xe9: latin-1 subject\n")
    subprocess.run(
        ["git", "commit", "--allow-empty", "-F", str(message)],
        cwd=str(repo),
        check=True,
        capture_output=True,
    )

    monkeypatch.chdir(repo)
    commits = list_commits()

    assert len(commits) == 1
    assert commits[0].subject.startswith("caf\ufffd")
