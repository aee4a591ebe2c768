"""Tests for environment settings and client options."""

import pytest

from serum_client.config import (
    DEFAULT_RPC_TIMEOUT_SECONDS,
    ClientOptions,
    ConfigurationError,
    Endpoints,
    EnvironmentSettings,
    TransportKind,
    clear_dotenv_cache,
    default_client_options,
    log_append_setting,
    private_key_setting,
    read_dotenv,
    timeout_setting,
)


@pytest.fixture
def dotenv_file(tmp_path, monkeypatch):
    path = tmp_path / ".env"
    monkeypatch.setattr("serum_client.config.environment._DOTENV_CANDIDATES", (path,))
    clear_dotenv_cache()
    return path


class TestReadDotenv:
    def test_missing_file_returns_empty(self, tmp_path):
        assert read_dotenv(tmp_path / "absent.env") == {}

    def test_parses_values(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("# comment\nexport PRIVATE_KEY='abc'\nSERUM_API_TIMEOUT_SECONDS = \"3.5\"\nnot a pair\n=orphan\n")

        assert read_dotenv(path) == {"PRIVATE_KEY": "abc", "SERUM_API_TIMEOUT_SECONDS": "3.5"}

    def test_first_candidate_wins(self, tmp_path, monkeypatch):
        first = tmp_path / "first.env"
        second = tmp_path / "second.env"
        first.write_text("PRIVATE_KEY=first\n")
        second.write_text("PRIVATE_KEY=second\nSERUM_LOG_APPEND=yes\n")
        monkeypatch.setattr("serum_client.config.environment._DOTENV_CANDIDATES", (first, second))
        clear_dotenv_cache()

        assert private_key_setting() == "first"
        assert log_append_setting() is True


class TestSettings:
    def test_environment_wins_over_dotenv(self, monkeypatch, dotenv_file):
        dotenv_file.write_text("PRIVATE_KEY=from-file\n")
        monkeypatch.setenv("PRIVATE_KEY", "from-env")

        assert private_key_setting() == "from-env"

    def test_blank_environment_value_falls_back_to_dotenv(self, monkeypatch, dotenv_file):
        dotenv_file.write_text("PRIVATE_KEY=from-file\n")
        monkeypatch.setenv("PRIVATE_KEY", "  ")

        assert private_key_setting() == "from-file"

    def test_dotenv_is_cached_until_cleared(self, dotenv_file):
        assert private_key_setting() is None
        dotenv_file.write_text("PRIVATE_KEY=later\n")

        assert private_key_setting() is None
        clear_dotenv_cache()
        assert private_key_setting() == "later"

    def test_timeout_default_and_override(self, monkeypatch, dotenv_file):
        monkeypatch.delenv("SERUM_API_TIMEOUT_SECONDS", raising=False)
        assert timeout_setting() == DEFAULT_RPC_TIMEOUT_SECONDS

        monkeypatch.setenv("SERUM_API_TIMEOUT_SECONDS", "2.5")
        assert timeout_setting() == 2.5

    @pytest.mark.parametrize("raw", ["soon", "0", "-1"])
    def test_timeout_rejects_bad_values(self, monkeypatch, dotenv_file, raw):
        monkeypatch.setenv("SERUM_API_TIMEOUT_SECONDS", raw)

        with pytest.raises(ConfigurationError):
            timeout_setting()

    @pytest.mark.parametrize(("raw", "expected"), [("yes", True), ("0", False), ("On", True), ("false", False)])
    def test_log_append_flag(self, monkeypatch, dotenv_file, raw, expected):
        monkeypatch.setenv("SERUM_LOG_APPEND", raw)

        assert log_append_setting() is expected

    def test_log_append_rejects_garbage(self, monkeypatch, dotenv_file):
        monkeypatch.setenv("SERUM_LOG_APPEND", "sometimes")

        with pytest.raises(ConfigurationError):
            log_append_setting()

    def test_load_snapshot(self, monkeypatch, dotenv_file):
        dotenv_file.write_text("PRIVATE_KEY=k\nSERUM_LOG_APPEND=1\n")
        monkeypatch.setenv("SERUM_API_TIMEOUT_SECONDS", "4")

        assert EnvironmentSettings.load() == EnvironmentSettings(private_key="k", timeout_seconds=4.0, log_append=True)


class TestClientOptions:
    def test_defaults(self):
        options = ClientOptions(endpoint="http://serum.test")

        assert options.timeout_seconds == DEFAULT_RPC_TIMEOUT_SECONDS == 7.0
        assert options.private_key is None
        assert not options.has_signing_key

    def test_rejects_empty_endpoint(self):
        with pytest.raises(ConfigurationError):
            ClientOptions(endpoint="")

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ConfigurationError):
            ClientOptions(endpoint="http://serum.test", timeout_seconds=0)

    def test_signer_counts_as_key(self, fake_signer):
        assert ClientOptions(endpoint="http://serum.test", signer=fake_signer).has_signing_key


class TestDefaultClientOptions:
    def test_missing_private_key_is_not_an_error(self, dotenv_file):
        options = default_client_options(Endpoints.mainnet(TransportKind.HTTP))

        assert options.endpoint == Endpoints.MAINNET_HTTP
        assert options.private_key is None

    def test_reads_key_and_timeout(self, monkeypatch, dotenv_file):
        dotenv_file.write_text("PRIVATE_KEY=base58key\n")
        monkeypatch.setenv("SERUM_API_TIMEOUT_SECONDS", "3")

        options = default_client_options(Endpoints.testnet(TransportKind.WS))

        assert options.endpoint == Endpoints.TESTNET_WS
        assert options.private_key == "base58key"
        assert options.timeout_seconds == 3.0


def test_endpoints_cover_every_transport():
    for kind in TransportKind:
        assert Endpoints.mainnet(kind)
        assert Endpoints.testnet(kind)
    assert Endpoints.mainnet(TransportKind.GRPC).endswith(":9000")
