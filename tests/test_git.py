import subprocess

import pytest

from appflow_package.core.errors import CommitResolutionError
from appflow_package.services import git as git_mod


def test_resolve_head_commit(monkeypatch):
    def fake_run(args, **kwargs):
        assert args == ["git", "rev-parse", "HEAD"]
        return subprocess.CompletedProcess(args, 0, stdout="2345cd3305a1cf94de34e93b73a932f25baac77c\n", stderr="")

    monkeypatch.setattr(git_mod.subprocess, "run", fake_run)
    assert git_mod.resolve_head_commit() == "2345cd3305a1cf94de34e93b73a932f25baac77c"


def test_not_a_repository(monkeypatch):
    def fake_run(args, **kwargs):
        return subprocess.CompletedProcess(args, 128, stdout="", stderr="fatal: not a git repository\n")

    monkeypatch.setattr(git_mod.subprocess, "run", fake_run)
    with pytest.raises(CommitResolutionError) as exc:
        git_mod.resolve_head_commit()
    assert "not a git repository" in str(exc.value)


def test_git_not_installed(monkeypatch):
    def fake_run(args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(git_mod.subprocess, "run", fake_run)
    with pytest.raises(CommitResolutionError):
        git_mod.resolve_head_commit()
