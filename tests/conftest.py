from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = BASE_DIR / "src"

sys.path.insert(0, str(SRC_DIR))

from bizdocs_sdk.config import ClientConfig  # noqa: E402
from bizdocs_sdk.local_store import LocalDocumentStore  # noqa: E402

BASE_URL = "https://api.example.com"


@pytest.fixture
def config(tmp_path: Path) -> ClientConfig:
    return ClientConfig(
        env_name="test",
        api_base_url=BASE_URL,
        retries=0,
        retry_backoff_seconds=0,
        local_store_dir=str(tmp_path / "store"),
    )


@pytest.fixture
def store(tmp_path: Path) -> LocalDocumentStore:
    return LocalDocumentStore(base_dir=tmp_path / "store")
