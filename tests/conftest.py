import io
import logging
from pathlib import Path

import pytest

from perbranch.config import Layout, initialize_root

from .repo_factory import REMOTE_BASE, UpstreamRepoFactory


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("perbranch")
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    logger.setLevel(previous_level)
    log_stream.close()


@pytest.fixture
def root(tmp_path) -> Path:
    """An initialized perbranch root."""
    return initialize_root(tmp_path / "root")


@pytest.fixture
def layout(root) -> Layout:
    return Layout(root)


# git fixtures


@pytest.fixture
def repo_factory(tmp_path) -> UpstreamRepoFactory:
    return UpstreamRepoFactory(tmp_path / "upstreams")


@pytest.fixture
def upstream_repo(repo_factory) -> Path:
    """Upstream with ``main`` as default branch and a ``develop`` branch."""
    return repo_factory.create()


@pytest.fixture
def remote(repo_factory, monkeypatch) -> UpstreamRepoFactory:
    """Serve the factory's repositories under ``REMOTE_BASE``.

    Git rewrites the URL prefix to the local directory (``url.insteadOf``), so
    the code under test sees regular https URLs while no network is involved.
    """
    monkeypatch.setenv("GIT_CONFIG_COUNT", "1")
    monkeypatch.setenv("GIT_CONFIG_KEY_0", f"url.{repo_factory.base_dir}/.insteadOf")
    monkeypatch.setenv("GIT_CONFIG_VALUE_0", REMOTE_BASE)
    return repo_factory


@pytest.fixture
def remote_url(remote) -> str:
    """URL of ``user/upstream`` with branches ``main`` (default) and ``develop``."""
    remote.create(name="user/upstream.git")
    return f"{REMOTE_BASE}user/upstream.git"
