"""Configuration models using Pydantic for validation."""
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, field_validator
import os


ENV_OVERRIDES = {
    "LABEL_EXPORTER_PROXY_HOST": "proxy_host",
    "LABEL_EXPORTER_LABELS_DIR": "labels_dir",
    "LOG_LEVEL": "log_level",
}


class ProxyConfig(BaseModel):
    """Proxy configuration."""
    listen_address: str = ":9900"
    accept_prefix: str = ""
    proxy_host: str = "localhost"
    labels_dir: str = "/tmp/target"
    labels_recursive: bool = False
    fetch_timeout_s: float = 10.0
    log_level: str = "INFO"

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, v):
        """Require host:port with a numeric port."""
        host, sep, port = v.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"listen_address must be host:port, got '{v}'")
        if not 0 < int(port) < 65536:
            raise ValueError(f"listen_address port out of range: {port}")
        return v

    @field_validator('fetch_timeout_s')
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("fetch_timeout_s must be positive")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def listen(self) -> Tuple[str, int]:
        """Host and port to bind; an empty host means all interfaces."""
        host, _, port = self.listen_address.rpartition(":")
        return host.strip("[]") or "0.0.0.0", int(port)


def load_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> ProxyConfig:
    """
    Load and validate configuration.

    Precedence, lowest first: defaults, YAML file, environment, ``overrides``
    (command-line flags). ``None`` values in ``overrides`` are ignored.
    """
    import yaml

    raw_config: Dict[str, Any] = {}
    if config_path:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        if not isinstance(raw_config, dict):
            raise ValueError(f"Configuration file must hold a mapping: {config_path}")

    # Apply environment variable overrides
    for env_name, field_name in ENV_OVERRIDES.items():
        if env_value := os.getenv(env_name):
            raw_config[field_name] = env_value

    if overrides:
        raw_config.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ProxyConfig(**raw_config)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
