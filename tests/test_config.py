"""Tests for configuration loading."""
import pytest
import yaml

from label_exporter.config import ProxyConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["LABEL_EXPORTER_PROXY_HOST", "LABEL_EXPORTER_LABELS_DIR", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = load_config()
    assert config.listen_address == ":9900"
    assert config.accept_prefix == ""
    assert config.proxy_host == "localhost"
    assert config.labels_dir == "/tmp/target"
    assert config.labels_recursive is False
    assert config.fetch_timeout_s == 10.0
    assert config.listen == ("0.0.0.0", 9900)


def test_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "listen_address": "127.0.0.1:9901",
        "proxy_host": "backend.local",
        "labels_dir": "/etc/labels",
        "labels_recursive": True,
    }))

    config = load_config(str(path))

    assert config.listen == ("127.0.0.1", 9901)
    assert config.proxy_host == "backend.local"
    assert config.labels_dir == "/etc/labels"
    assert config.labels_recursive is True


def test_empty_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(str(path)) == ProxyConfig()


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/config.yaml")


def test_precedence(tmp_path, monkeypatch):
    """Flags beat environment, environment beats the file."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"proxy_host": "from-file", "labels_dir": "/file"}))
    monkeypatch.setenv("LABEL_EXPORTER_PROXY_HOST", "from-env")
    monkeypatch.setenv("LABEL_EXPORTER_LABELS_DIR", "/env")

    config = load_config(str(path), overrides={"labels_dir": "/flag", "accept_prefix": None})

    assert config.proxy_host == "from-env"
    assert config.labels_dir == "/flag"
    assert config.accept_prefix == ""


def test_log_level_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert load_config().log_level == "DEBUG"


@pytest.mark.parametrize("overrides", [
    {"listen_address": "9900"},
    {"listen_address": "host:http"},
    {"listen_address": ":70000"},
    {"fetch_timeout_s": 0},
    {"log_level": "chatty"},
])
def test_invalid_values(overrides):
    with pytest.raises(ValueError):
        load_config(overrides=overrides)


def test_ipv6_listen_address():
    config = ProxyConfig(listen_address="[::1]:9900")
    assert config.listen == ("::1", 9900)
