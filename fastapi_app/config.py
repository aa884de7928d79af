import logging
import os
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


class OperatorConfig:
    """Server-side configuration (bind address, logging, CORS) for the API"""

    def __init__(self, config_path: str = None):
        self.config_path = config_path or os.getenv("OPERATOR_CONFIG", "conf/operator.yaml")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from operator.yaml on top of the defaults"""
        config = self._get_default_config()
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    loaded = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"[config] Failed to load operator config: {e}, using defaults")
                loaded = {}
            else:
                logger.info(f"[config] Loaded operator config from {self.config_path}")
            config = _deep_merge(config, loaded)
        else:
            logger.warning(
                f"[config] Operator config not found at {self.config_path}, using defaults"
            )

        if os.getenv("PORT"):
            try:
                config["server"]["port"] = int(os.getenv("PORT"))
            except ValueError:
                logger.warning(f"[config] Ignoring non-numeric PORT={os.getenv('PORT')!r}")
        if os.getenv("LOG_LEVEL"):
            config["server"]["log_level"] = os.getenv("LOG_LEVEL").lower()
        return config

    def _get_default_config(self) -> Dict[str, Any]:
        """Return default configuration"""
        return {
            "server": {
                "host": "127.0.0.1",
                "port": 3000,
                "workers": 1,
                "log_level": "info",
                "allow_external_bind": False,
            },
            "security": {
                "cors": {
                    "enabled": False,
                    "allow_origins": [],
                    "allow_credentials": False,
                    "allow_methods": ["GET", "POST"],
                    "allow_headers": ["*"],
                    "expose_headers": ["Content-Disposition"],
                    "max_age": 86400,
                },
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key path (e.g., 'server.port')"""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value


def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


# Global config instance
operator_config = OperatorConfig()
