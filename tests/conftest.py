"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os

import pytest

from serum_client.config import ClientOptions, clear_dotenv_cache
from tests.helpers.serum_fakes import FakeSigner, FakeTransport

# Keep tests independent of a developer's real key and .env files
os.environ.pop("PRIVATE_KEY", None)
os.environ.setdefault("SERUM_API_TIMEOUT_SECONDS", "7")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Run every test without PRIVATE_KEY and with no .env defaults."""
    monkeypatch.delenv("PRIVATE_KEY", raising=False)
    monkeypatch.setattr("serum_client.config.environment._DOTENV_CANDIDATES", (tmp_path / ".env",))
    clear_dotenv_cache()
    yield
    clear_dotenv_cache()


@pytest.fixture
def client_options() -> ClientOptions:
    return ClientOptions(endpoint="http://serum.test", timeout_seconds=1.0)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()
