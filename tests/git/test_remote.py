"""Tests for recovering origin URLs from existing checkouts."""

import pytest
from git import Repo

from perbranch.git.remote import get_origin_url, resolve_remote_url


def test_resolves_from_checkout(root, upstream_repo, repo_factory):
    repo_factory.checkout(upstream_repo, root / "user" / "upstream" / "main")

    result = resolve_remote_url(root, "user", "upstream")

    assert result.found
    assert result.url == str(upstream_repo)
    assert result.source == "main"


def test_skips_checkout_without_origin(root, upstream_repo, repo_factory):
    Repo.init(str(root / "user" / "upstream" / "aaa-local")).close()
    repo_factory.checkout(upstream_repo, root / "user" / "upstream" / "develop")

    result = resolve_remote_url(root, "user", "upstream")

    assert result.found
    assert result.source == "develop"


def test_first_checkout_in_listing_order_wins(root, repo_factory):
    first = repo_factory.create(name="first")
    second = repo_factory.create(name="second")
    repo_factory.checkout(second, root / "user" / "repo" / "b")
    repo_factory.checkout(first, root / "user" / "repo" / "a")

    result = resolve_remote_url(root, "user", "repo")

    assert result.url == str(first)
    assert result.source == "a"


@pytest.mark.short
def test_unknown_repository(root):
    result = resolve_remote_url(root, "nobody", "nothing")

    assert not result.found
    assert result.url is None
    assert result.source is None


@pytest.mark.short
def test_fake_checkout_is_ignored(root):
    (root / "user" / "repo" / "main" / ".git").mkdir(parents=True)

    assert not resolve_remote_url(root, "user", "repo").found


@pytest.mark.short
def test_get_origin_url_on_plain_directory(tmp_path):
    assert get_origin_url(tmp_path) is None
