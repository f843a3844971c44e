"""End-to-end tests of the perbranch command line."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner
from git import Repo
from git.exc import GitCommandError

from perbranch import __version__
from perbranch.cli.main import cli
from perbranch.git.cache import get_cache_path


@pytest.fixture
def invoke(root):
    runner = CliRunner()

    def _invoke(*args, **kwargs):
        env = {"PERBRANCH_ROOT": str(root), "COLUMNS": "250"}
        return runner.invoke(cli, list(args), env=env, **kwargs)

    return _invoke


@pytest.mark.short
def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.short
class TestInit:
    def test_creates_root(self, tmp_path):
        result = CliRunner().invoke(cli, ["init", str(tmp_path / "new")])

        assert result.exit_code == 0
        assert (tmp_path / "new" / ".perbranch" / "perbranch.cfg").exists()

    def test_existing_root(self, root):
        result = CliRunner().invoke(cli, ["init", str(root)])

        assert result.exit_code == 1
        assert "already exists" in result.output


class TestAdd:
    @pytest.mark.integration
    def test_with_base(self, invoke, root, remote_url):
        result = invoke("add", remote_url, "feature/x", "--base", "main")

        assert result.exit_code == 0, result.output
        assert (root / "user" / "upstream" / "feature-x" / ".git").is_dir()
        assert get_cache_path(root, "user", "upstream").exists()

    @pytest.mark.integration
    def test_detects_base(self, invoke, root, remote_url):
        result = invoke("add", remote_url, "feature/x")

        assert result.exit_code == 0, result.output
        assert (root / "user" / "upstream" / "feature-x").is_dir()

    @pytest.mark.integration
    def test_owner_repo_source(self, invoke, root, remote_url):
        assert invoke("add", remote_url, "first").exit_code == 0

        result = invoke("add", "user/upstream", "second", "-b", "develop")

        assert result.exit_code == 0, result.output
        assert (root / "user" / "upstream" / "second").is_dir()

    @pytest.mark.integration
    def test_owner_repo_source_from_cache(self, invoke, root, remote_url):
        assert invoke("add", remote_url, "first").exit_code == 0
        assert invoke("rm", "user/upstream/first", "--force").exit_code == 0

        result = invoke("add", "user/upstream", "second")

        assert result.exit_code == 0, result.output

    @pytest.mark.integration
    def test_no_cache(self, invoke, root, remote_url):
        result = invoke("add", remote_url, "feat", "--no-cache")

        assert result.exit_code == 0, result.output
        assert not get_cache_path(root, "user", "upstream").exists()

    @pytest.mark.integration
    def test_existing_target(self, invoke, root, remote_url):
        (root / "user" / "upstream" / "feat").mkdir(parents=True)

        result = invoke("add", remote_url, "feat", "--base", "main")

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert "Suggestion:" in result.output

    @pytest.mark.integration
    def test_collision(self, invoke, remote_url):
        result = invoke("add", remote_url, "develop", "--base", "main")

        assert result.exit_code == 1
        assert 'Remote branch "develop" already exists' in result.output

    @pytest.mark.short
    def test_malformed_url(self, invoke):
        result = invoke("add", "ftp://example.com/user/repo", "feat", "--base", "main")

        assert result.exit_code == 1
        assert "Invalid Git URL format" in result.output

    @pytest.mark.short
    def test_unknown_owner_repo(self, invoke):
        result = invoke("add", "nobody/nothing", "feat", "--base", "main")

        assert result.exit_code == 1
        assert "No clone URL known for nobody/nothing" in result.output

    @pytest.mark.short
    def test_invalid_branch(self, invoke):
        result = invoke(
            "add", "https://github.com/user/repo.git", "bad..name", "--base", "main"
        )

        assert result.exit_code == 1
        assert "Invalid branch name" in result.output

    @pytest.mark.short
    def test_without_root(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PERBRANCH_ROOT", raising=False)
        monkeypatch.chdir(tmp_path)

        result = CliRunner().invoke(
            cli, ["add", "https://github.com/user/repo.git", "feat"]
        )

        assert result.exit_code == 1
        assert "perbranch init" in result.output


@pytest.mark.short
class TestLs:
    def test_empty(self, invoke):
        assert invoke("ls").exit_code == 0

    def test_lists_checkouts(self, invoke, root):
        (root / "octocat" / "hello" / "feat-x" / ".git").mkdir(parents=True)

        result = invoke("ls")

        assert result.exit_code == 0
        assert "octocat" in result.output
        assert "hello" in result.output
        assert "feat-x" in result.output


@pytest.mark.short
class TestRm:
    def test_force(self, invoke, root):
        checkout = root / "user" / "repo" / "main"
        (checkout / ".git").mkdir(parents=True)

        result = invoke("rm", "user/repo/main", "--force")

        assert result.exit_code == 0, result.output
        assert not checkout.exists()
        assert not (root / "user").exists()

    def test_declined(self, invoke, root):
        checkout = root / "user" / "repo" / "main"
        (checkout / ".git").mkdir(parents=True)

        result = invoke("rm", "user/repo/main", input="n\n")

        assert result.exit_code == 1
        assert checkout.exists()

    def test_confirmed(self, invoke, root):
        checkout = root / "user" / "repo" / "main"
        (checkout / ".git").mkdir(parents=True)

        result = invoke("rm", "user/repo/main", input="y\n")

        assert result.exit_code == 0
        assert not checkout.exists()

    def test_incomplete_path(self, invoke):
        result = invoke("rm", "user/repo", "--force")

        assert result.exit_code == 1
        assert "Incomplete path provided" in result.output

    def test_unknown_branch(self, invoke, root):
        (root / "user" / "repo" / "main" / ".git").mkdir(parents=True)

        result = invoke("rm", "user/repo/other", "--force")

        assert result.exit_code == 1
        assert "Available branches: main" in result.output


class TestCache:
    @pytest.mark.integration
    def test_ls_and_rm(self, invoke, root, remote_url):
        assert invoke("add", remote_url, "feat", "--base", "main").exit_code == 0

        listed = invoke("cache", "ls")
        assert listed.exit_code == 0
        assert "user/upstream" in listed.output

        removed = invoke("cache", "rm", "user/upstream")
        assert removed.exit_code == 0
        assert not get_cache_path(root, "user", "upstream").exists()
        assert (root / "user" / "upstream" / "feat").is_dir()

    @pytest.mark.short
    def test_ls_empty(self, invoke):
        assert invoke("cache", "ls").exit_code == 0

    @pytest.mark.short
    def test_rm_missing(self, invoke):
        assert invoke("cache", "rm", "user/none").exit_code == 0

    @pytest.mark.short
    def test_rm_invalid_name(self, invoke):
        result = invoke("cache", "rm", "just-a-name")

        assert result.exit_code == 1
        assert "Expected format: owner/repo" in result.output


@pytest.mark.short
class TestDebug:
    URL = "https://github.com/user/repo.git"

    def fail_clone(self, invoke, *flags):
        error = GitCommandError(
            ["git", "clone", self.URL, "target"],
            128,
            stderr="fatal: Authentication failed for 'https://github.com/user/repo.git/'",
        )
        with patch.object(Repo, "clone_from", side_effect=error):
            return invoke(*flags, "add", self.URL, "feat", "-b", "main", "--no-cache")

    def test_original_error_hidden(self, invoke):
        result = self.fail_clone(invoke)

        assert result.exit_code == 1
        assert "Authentication failed" in result.output
        assert "Original error:" not in result.output

    def test_original_error_shown(self, invoke):
        result = self.fail_clone(invoke, "--debug")

        assert result.exit_code == 1
        assert "Original error:" in result.output
