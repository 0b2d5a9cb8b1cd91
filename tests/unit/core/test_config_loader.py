"""
Tests unitaires LOT 1: ConfigLoader

Priorité: variables CAFE_* > fichier YAML > valeurs par défaut.
"""

from decimal import Decimal

import pytest

from cafe_client.core.config_loader import ConfigLoader
from cafe_client.core.errors import CafeClientError, ConfigError
from cafe_client.core.interfaces import MAX_CONNECT_TIMEOUT, MAX_REQUEST_TIMEOUT, ClientConfig, IConfigLoader


@pytest.fixture
def write_yaml(tmp_path):
    def _write(text: str) -> str:
        path = tmp_path / "cafe.yaml"
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


# ══════════════════════════════════════════════════════════════════════════════
# TESTS DÉFAUTS
# ══════════════════════════════════════════════════════════════════════════════


class TestDefaults:
    def test_implements_interface(self) -> None:
        assert isinstance(ConfigLoader(environ={}), IConfigLoader)

    def test_defaults_without_file(self) -> None:
        config = ConfigLoader(environ={}).load()

        assert config.api_base_url == "http://127.0.0.1:8000"
        assert config.storage_namespace == "cafe"
        assert config.tax_rate == Decimal("0")
        assert config.currency_symbol == "₹"
        assert config.order_number_max_length == 20
        assert config.log_level == "INFO"

    def test_storage_key(self) -> None:
        assert ClientConfig(storage_namespace="shop").storage_key("user") == "shop_user"


# ══════════════════════════════════════════════════════════════════════════════
# TESTS FICHIER ET ENVIRONNEMENT
# ══════════════════════════════════════════════════════════════════════════════


class TestSources:
    def test_yaml_file(self, write_yaml) -> None:
        path = write_yaml(
            "api_base_url: https://api.cafe.example/\n"
            "tax_rate: '0.08'\n"
            "currency_symbol: $\n"
            "endpoint_timeouts:\n"
            "  /api/admin/:\n"
            "    connect_timeout: 2\n"
            "    request_timeout: 45\n"
        )

        config = ConfigLoader(environ={}).load(path)

        assert config.api_base_url == "https://api.cafe.example"
        assert config.tax_rate == Decimal("0.08")
        assert config.currency_symbol == "$"
        assert config.endpoint_timeouts["/api/admin/"].request_timeout == 45

    def test_empty_file_means_defaults(self, write_yaml) -> None:
        config = ConfigLoader(environ={}).load(write_yaml(""))
        assert config == ClientConfig()

    def test_environment_wins_over_file(self, write_yaml) -> None:
        path = write_yaml("api_base_url: http://from-file\nlog_level: debug\n")
        environ = {"CAFE_API_URL": "https://from-env", "CAFE_TAX_RATE": "0.05", "CAFE_LOG_LEVEL": ""}

        config = ConfigLoader(environ=environ).load(path)

        assert config.api_base_url == "https://from-env"
        assert config.tax_rate == Decimal("0.05")
        assert config.log_level == "DEBUG"

    def test_warning_alias(self) -> None:
        config = ConfigLoader(environ={"CAFE_LOG_LEVEL": "warning"}).load()
        assert config.log_level == "WARN"


# ══════════════════════════════════════════════════════════════════════════════
# TESTS ERREURS
# ══════════════════════════════════════════════════════════════════════════════


class TestErrors:
    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="non trouvée"):
            ConfigLoader(environ={}).load(str(tmp_path / "absent.yaml"))

    def test_invalid_yaml(self, write_yaml) -> None:
        with pytest.raises(ConfigError, match="YAML"):
            ConfigLoader(environ={}).load(write_yaml("api_base_url: [unclosed\n"))

    def test_non_mapping_document(self, write_yaml) -> None:
        with pytest.raises(ConfigError, match="objet YAML"):
            ConfigLoader(environ={}).load(write_yaml("- a\n- b\n"))

    def test_config_error_is_client_error(self) -> None:
        assert issubclass(ConfigError, CafeClientError)

    @pytest.mark.parametrize(
        "environ",
        [
            {"CAFE_API_URL": "ftp://cafe"},
            {"CAFE_TAX_RATE": "1.5"},
            {"CAFE_TAX_RATE": "-0.1"},
            {"CAFE_ITEM_RETRY_ATTEMPTS": "0"},
            {"CAFE_LOG_LEVEL": "verbose"},
            {"CAFE_CONNECT_TIMEOUT": "0"},
            {"CAFE_CONNECT_TIMEOUT": str(MAX_CONNECT_TIMEOUT + 1)},
            {"CAFE_REQUEST_TIMEOUT": str(MAX_REQUEST_TIMEOUT + 1)},
        ],
    )
    def test_out_of_range_values(self, environ) -> None:
        with pytest.raises(ConfigError, match="Configuration invalide"):
            ConfigLoader(environ=environ).load()

    def test_timeout_at_limit_accepted(self) -> None:
        config = ConfigLoader(environ={"CAFE_REQUEST_TIMEOUT": str(MAX_REQUEST_TIMEOUT)}).load()
        assert config.request_timeout == MAX_REQUEST_TIMEOUT

    def test_short_order_number_rejected(self, write_yaml) -> None:
        with pytest.raises(ConfigError):
            ConfigLoader(environ={}).load(write_yaml("order_number_max_length: 4\n"))
