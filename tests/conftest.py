"""Shared test fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from ncsync.core.config import SyncConfig


@pytest.fixture(autouse=True)
def reset_ncsync_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees ncsync records in every test."""
    yield
    ncsync_logger = logging.getLogger("ncsync")
    for handler in ncsync_logger.handlers[:]:
        ncsync_logger.removeHandler(handler)
    ncsync_logger.setLevel(logging.NOTSET)
    ncsync_logger.propagate = True


@pytest.fixture
def sync_config(tmp_path: Path) -> SyncConfig:
    """Create a SyncConfig pointing at temporary paths."""
    return SyncConfig(
        user="alice",
        secret="s3cr3t pa$$",
        server_host="cloud.example.com",
        sync_dir=tmp_path / "data",
        health_file=tmp_path / "healthcheck",
        update_marker=tmp_path / "last-update",
    )
