import subprocess
from pathlib import Path

from ai_changelog import git_adapter
from ai_changelog.errors import GitError


def _run_git(args, cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        text=True,
        capture_output=True,
        check=True,
    )


def _make_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    _run_git(["init", "-b", "main"], cwd=repo)
    _run_git(["config", "user.name", "ai-changelog"], cwd=repo)
    _run_git(["config", "user.email", "ai-changelog@example.com"], cwd=repo)

    (repo / "README.md").write_text("# Demo\n")
    _run_git(["add", "README.md"], cwd=repo)
    _run_git(["commit", "-m", "Initial commit"], cwd=repo)
    return repo


def test_run_git_includes_stderr_details_on_failure(monkeypatch):
    def fake_run(*args, **kwargs):
        return subprocess.CompletedProcess(
            args=["git", "status"],
            returncode=128,
            stdout="",
            stderr="fatal: not a git repository",
        )

    monkeypatch.setattr("ai_changelog.git_adapter.subprocess.run", fake_run)

    try:
        git_adapter._run_git(["status"])
    except GitError as exc:
        message = str(exc)
        assert "git status" in message
        assert "fatal: not a git repository" in message
    else:
        raise AssertionError("expected GitError to be raised")


def test_queries_are_soft_outside_a_repository(tmp_path):
    cwd = str(tmp_path)

    assert not git_adapter.is_inside_work_tree(cwd=cwd)
    assert git_adapter.get_current_branch(cwd=cwd) == ""
    assert git_adapter.list_local_branches(cwd=cwd) == []
    assert git_adapter.get_recent_checkouts(cwd=cwd) == []
    assert git_adapter.count_commits("main..HEAD", cwd=cwd) == 0


def test_range_queries(tmp_path):
    repo = _make_repo(tmp_path)
    _run_git(["checkout", "-b", "feature/login"], cwd=repo)
    (repo / "src").mkdir()
    (repo / "src" / "login.py").write_text("def login():\n    return True\n")
    _run_git(["add", "."], cwd=repo)
    _run_git(["commit", "-m", "Add login"], cwd=repo)
    (repo / "README.md").write_text("# Demo\n\nNow with login.\n")
    _run_git(["commit", "-am", "Document login"], cwd=repo)
    cwd = str(repo)

    assert git_adapter.is_inside_work_tree(cwd=cwd)
    assert git_adapter.get_current_branch(cwd=cwd) == "feature/login"
    assert sorted(git_adapter.list_local_branches(cwd=cwd)) == ["feature/login", "main"]
    assert git_adapter.ref_exists("main", cwd=cwd)
    assert not git_adapter.ref_exists("origin/main", cwd=cwd)
    assert git_adapter.count_commits("main..HEAD", cwd=cwd) == 2
    assert sorted(git_adapter.get_changed_files("main..HEAD", cwd=cwd)) == ["README.md", "src/login.py"]
    assert git_adapter.get_commit_subjects("main..HEAD", cwd=cwd) == ["Document login", "Add login"]
    assert git_adapter.get_commit_subjects("main..HEAD", "src/login.py", cwd=cwd) == ["Add login"]

    diff = git_adapter.get_file_diff("main..HEAD", "src/login.py", cwd=cwd)
    assert "+def login():" in diff


def test_recent_checkouts_come_from_reflog(tmp_path):
    repo = _make_repo(tmp_path)
    _run_git(["branch", "develop"], cwd=repo)
    _run_git(["branch", "topic"], cwd=repo)
    _run_git(["checkout", "develop"], cwd=repo)
    _run_git(["checkout", "topic"], cwd=repo)
    _run_git(["checkout", "develop"], cwd=repo)

    assert git_adapter.get_recent_checkouts(cwd=str(repo)) == ["develop", "topic"]


def test_remote_branches_skip_symbolic_head(monkeypatch):
    monkeypatch.setattr(
        git_adapter,
        "_git_output",
        lambda args, cwd=None: "origin/HEAD\norigin/main\norigin/release\norigin\n",
    )

    assert git_adapter.list_remote_branches() == ["origin/main", "origin/release"]


def test_non_utf8_content_is_decoded_with_replacement(tmp_path):
    repo = _make_repo(tmp_path)
    (repo / "notes.txt").write_bytes(b"caf\xe9 cr\xe8me\n")
    _run_git(["add", "notes.txt"], cwd=repo)
    _run_git(["commit", "-m", "Add notes"], cwd=repo)
    (repo / "notes.txt").write_bytes(b"caf\xe9 cr\xe8me br\xfbl\xe9e\n")
    _run_git(["commit", "-am", "Caf\xe9 notes"], cwd=repo)
    cwd = str(repo)

    diff = git_adapter.get_file_diff("HEAD~1..HEAD", "notes.txt", cwd=cwd)

    assert "+caf\ufffd cr\ufffdme br\ufffdl\ufffde" in diff
    assert git_adapter.get_commit_subjects("HEAD~1..HEAD", cwd=cwd) == ["Caf\xe9 notes"]
