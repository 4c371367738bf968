"""Tests for collecting review data and writing the working copy."""

import os
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from redraft_core import gather
from redraft_core.errors import GitError
from redraft_core.models import ExistingComment, TopLevelEntry

BASE = "b" * 40
HEAD = "h" * 40


@pytest.fixture
def repo():
    r = MagicMock()
    r.full_name = "owner/repo"
    return r


@pytest.fixture
def pr():
    p = MagicMock()
    p.number = 7
    p.user.login = "ann"
    p.title = "Add bar"
    p.state = "open"
    p.base.sha = BASE
    p.head.sha = HEAD
    p.created_at = datetime(2024, 1, 1)
    p.merged_at = None
    p.closed_at = None
    p.html_url = "https://github.com/owner/repo/pull/7"
    p.body = "desc"
    return p


@pytest.fixture
def patched(mocker, pr):
    mocker.patch("redraft_core.gather.get_pull", return_value=pr)
    mocker.patch(
        "redraft_core.gather.list_top_level_entries",
        return_value=[TopLevelEntry(body="hi", author="bob", created_at=datetime(2024, 1, 2))],
    )
    mocker.patch(
        "redraft_core.gather.list_existing_comments",
        return_value=[
            ExistingComment(
                id=1, revision=HEAD, path="a.txt", position=2, author="bob", created_at=None, body="why?"
            )
        ],
    )
    return {
        "fetch": mocker.patch("redraft_core.gather.git.fetch_pull_ref"),
        "show": mocker.patch("redraft_core.gather.git.show_commits", return_value="commit-diff\n"),
        "combined": mocker.patch("redraft_core.gather.git.combined_diff", return_value="combined-diff\n"),
        "stat": mocker.patch("redraft_core.gather.git.diff_stat", return_value=" a.txt | 1 +\n"),
    }


def test_gathers_all_pieces(repo, patched):
    data = gather.gather_review_data(repo, 7, {"diff_mode": "commits"})

    assert data.pr.number == 7
    assert data.pr.head_sha == HEAD
    assert [e.body for e in data.entries] == ["hi"]
    assert len(data.index) == 1
    assert data.diff_text == "commit-diff\n"
    assert data.diffstat == " a.txt | 1 +\n"
    patched["fetch"].assert_called_once_with("https://github.com/owner/repo", 7)
    patched["show"].assert_called_once_with(BASE, HEAD)
    patched["combined"].assert_not_called()


def test_combined_mode(repo, patched):
    data = gather.gather_review_data(repo, 7, {"diff_mode": "combined"})
    assert data.diff_text == "combined-diff\n"
    patched["show"].assert_not_called()


def test_remote_url_from_config(repo, patched):
    gather.gather_review_data(repo, 7, {"remote_url": "git@github.com:fork/repo.git"})
    patched["fetch"].assert_called_once_with("git@github.com:fork/repo.git", 7)


def test_fetch_failure_propagates(repo, patched):
    patched["fetch"].side_effect = GitError(["git", "fetch"], 128, "fatal: couldn't find remote ref")
    with pytest.raises(GitError):
        gather.gather_review_data(repo, 7, {})
    patched["show"].assert_not_called()


def test_write_working_copy(tmp_path):
    path = gather.write_working_copy("some text\n")
    try:
        assert os.path.basename(path).startswith("redraft-edit-")
        assert path.endswith(".diff")
        with open(path, encoding="utf-8") as f:
            assert f.read() == "some text\n"
    finally:
        os.unlink(path)
