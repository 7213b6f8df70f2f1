from __future__ import annotations

import os
import time

import pytest
from fastapi.testclient import TestClient

from pastel.config import load_config
from pastel.ids import IdAllocator
from pastel.keys import AuthorizationGate, KeyDeriver
from pastel.server import create_app
from pastel.service import PasteService
from pastel.store import PasteStore

SECRET = b"test-secret-do-not-use"
DAY = 24 * 60 * 60


def age_paste(store: PasteStore, paste_id: str, days: float) -> None:
    """Set a paste's modification time to `days` ago."""
    timestamp = time.time() - days * DAY
    os.utime(store.root / paste_id, (timestamp, timestamp))


@pytest.fixture
def store(tmp_path):
    return PasteStore(tmp_path / "uploads")


@pytest.fixture
def deriver():
    return KeyDeriver(SECRET)


@pytest.fixture
def service(store, deriver):
    return PasteService(
        store=store,
        allocator=IdAllocator(store.exists),
        deriver=deriver,
        gate=AuthorizationGate(store, deriver),
        max_paste_bytes=1024,
    )


@pytest.fixture
def config(tmp_path):
    config = load_config(tmp_path / "home")
    config["max_paste_bytes"] = 1024
    return config


@pytest.fixture
def client(config):
    app = create_app(config, SECRET, start_sweeper=False)
    with TestClient(app) as client:
        yield client
