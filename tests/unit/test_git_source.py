"""Unit tests for the git commit source."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import git
import pytest

from dailytodo.extraction import GitCommitSource, filter_by_author, parse_log_output
from dailytodo.extraction.git_source import LOG_FIELD_SEPARATOR
from dailytodo.models import GitCommit, RepositoryConfig, RepositoryRef


@pytest.fixture
def test_repo():
    """Create a temporary Git repository for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        repo = git.Repo.init(repo_path)

        # Configure git
        repo.config_writer().set_value("user", "name", "Test User").release()
        repo.config_writer().set_value("user", "email", "test@example.com").release()

        # Create initial commit
        (repo_path / "README.md").write_text("# Test Project\n")
        repo.index.add(["README.md"])
        repo.index.commit("Initial commit")

        # Create second commit
        (repo_path / "main.py").write_text("def hello():\n    print('Hello, World!')\n")
        repo.index.add(["main.py"])
        repo.index.commit("Add main.py")

        # Create third commit
        (repo_path / "main.py").write_text("def hello():\n    print('Hello, todo!')\n")
        repo.index.add(["main.py"])
        repo.index.commit("Fix: Update hello message | greet")

        repo.close()
        yield repo_path


def repository_for(path, name="project"):
    return RepositoryConfig(path=str(path), name=name)


def line(*fields):
    return LOG_FIELD_SEPARATOR.join(fields)


def test_get_commits(test_repo):
    """Test recent commits are read with hash, author and repository."""
    commits = GitCommitSource().get_commits(repository_for(test_repo), days=7)

    assert {commit.message for commit in commits} == {
        "Initial commit",
        "Add main.py",
        "Fix: Update hello message | greet",
    }
    for commit in commits:
        assert len(commit.hash) == 8
        assert commit.author == "Test User"
        assert commit.timestamp.tzinfo is not None
        assert commit.repository == RepositoryRef(name="project", path=str(test_repo))


def test_get_commits_from_subdirectory(test_repo):
    """Test a path inside a working tree finds its repository."""
    subdir = test_repo / "docs"
    subdir.mkdir()

    assert len(GitCommitSource().get_commits(repository_for(subdir), days=7)) == 3


def test_get_commits_respects_lookback():
    """Test commits older than the window are left out."""
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        repo = git.Repo.init(repo_path)
        repo.config_writer().set_value("user", "name", "Test User").release()
        repo.config_writer().set_value("user", "email", "test@example.com").release()

        (repo_path / "old.txt").write_text("old\n")
        repo.index.add(["old.txt"])
        repo.index.commit(
            "Ancient history",
            author_date="2020-01-01T12:00:00",
            commit_date="2020-01-01T12:00:00",
        )

        (repo_path / "new.txt").write_text("new\n")
        repo.index.add(["new.txt"])
        repo.index.commit("Recent work")
        repo.close()

        commits = GitCommitSource().get_commits(repository_for(repo_path), days=7)

    assert [commit.message for commit in commits] == ["Recent work"]


def test_get_commits_excludes_merges(test_repo):
    """Test merge commits are not reported."""
    repo = git.Repo(test_repo)
    head = repo.head.commit
    repo.index.commit("Merge branch 'feature'", parent_commits=[head, head.parents[0]])
    repo.close()

    messages = {commit.message for commit in GitCommitSource().get_commits(repository_for(test_repo), days=7)}

    assert "Merge branch 'feature'" not in messages


def test_filters_by_repository_identity(test_repo):
    """Test commits by other authors are dropped using git's user.name."""
    repo = git.Repo(test_repo)
    (test_repo / "other.txt").write_text("other\n")
    repo.index.add(["other.txt"])
    repo.index.commit(
        "Someone else's work",
        author=git.Actor("Other Person", "other@example.com"),
        committer=git.Actor("Other Person", "other@example.com"),
    )
    repo.close()

    commits = GitCommitSource().get_commits(repository_for(test_repo), days=7)

    assert len(commits) == 3
    assert all(commit.author == "Test User" for commit in commits)


def test_configured_author_overrides_identity(test_repo):
    """Test an explicit author filter, matched case-insensitively."""
    assert len(GitCommitSource(git_author="test").get_commits(repository_for(test_repo), days=7)) == 3
    assert GitCommitSource(git_author="nobody").get_commits(repository_for(test_repo), days=7) == []


def test_not_a_repository():
    """Test a plain directory yields no commits."""
    with tempfile.TemporaryDirectory() as tmpdir:
        assert GitCommitSource().get_commits(repository_for(tmpdir), days=7) == []


def test_missing_path():
    """Test a path that does not exist yields no commits."""
    assert GitCommitSource().get_commits(repository_for("/nonexistent/path"), days=7) == []


def test_git_failure_yields_no_commits(test_repo, caplog):
    """Test a failing git command is logged and treated as no commits."""

    class BrokenGit:
        def log(self, *args, **kwargs):
            raise git.exc.GitCommandError("git log", 128, stderr="fatal: bad revision")

    class BrokenRepo:
        git = BrokenGit()
        working_dir = str(test_repo)

        def close(self):
            pass

    class BrokenSource(GitCommitSource):
        def open_repo(self, path):
            return BrokenRepo()

    assert BrokenSource().get_commits(repository_for(test_repo), days=7) == []
    assert "Failed to fetch git commits" in caplog.text


def test_parse_log_output():
    """Test parsing of delimited git log lines."""
    output = "\n".join(
        [
            line("0123456789abcdef", "Add feature | with pipe", "Jane Doe", "2026-10-16T10:00:00+02:00"),
            "",
            line("fedcba9876543210", "  Fix bug  ", "John", "2026-10-15T09:30:00Z"),
        ]
    )
    ref = RepositoryRef(name="api", path="/work/api")

    commits = parse_log_output(output, ref)

    assert [commit.hash for commit in commits] == ["01234567", "fedcba98"]
    assert commits[0].message == "Add feature | with pipe"
    assert commits[0].author == "Jane Doe"
    assert commits[0].timestamp == datetime(2026, 10, 16, 8, 0, tzinfo=timezone.utc)
    assert commits[1].message == "Fix bug"
    assert commits[1].repository == ref


def test_parse_log_output_skips_bad_lines():
    """Test lines with the wrong field count or a bad date are skipped."""
    output = "\n".join(
        [
            "abc|def|ghi|jkl",
            line("abc", "only three", "fields"),
            line("abc", "bad date", "Jane", "not-a-date"),
            line("abcdef0123", "good", "Jane", "2026-10-16T10:00:00+00:00"),
        ]
    )

    commits = parse_log_output(output)

    assert [commit.message for commit in commits] == ["good"]
    assert commits[0].repository is None


def test_parse_empty_output():
    """Test no output means no commits."""
    assert parse_log_output("") == []


def test_filter_by_author():
    """Test case-insensitive substring matching on the author."""
    when = datetime(2026, 10, 16, tzinfo=timezone.utc)
    commits = [
        GitCommit(hash="a", message="m", author="Jane Doe", date="", timestamp=when),
        GitCommit(hash="b", message="m", author="John Smith", date="", timestamp=when),
    ]

    assert [commit.hash for commit in filter_by_author(commits, "jane")] == ["a"]
    assert [commit.hash for commit in filter_by_author(commits, "O")] == ["a", "b"]
    assert filter_by_author(commits, None) == commits
    assert filter_by_author(commits, "") == commits
