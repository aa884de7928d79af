import logging
from typing import Any, Dict

from .config import operator_config

logger = logging.getLogger(__name__)

LOCAL_HOSTS = ["127.0.0.1", "localhost", "::1"]


def get_cors_config() -> Dict[str, Any]:
    """Get CORS configuration with secure defaults"""
    cors_enabled = operator_config.get("security.cors.enabled", False)

    if not cors_enabled:
        logger.info("[security] CORS disabled - no cross-origin requests allowed")
        return {
            "allow_origins": [],
            "allow_credentials": False,
            "allow_methods": [],
            "allow_headers": [],
            "expose_headers": [],
            "max_age": 86400,
        }

    allowed_origins = operator_config.get("security.cors.allow_origins", [])
    logger.info(f"[security] CORS enabled for origins: {allowed_origins}")

    return {
        "allow_origins": allowed_origins,
        "allow_credentials": operator_config.get("security.cors.allow_credentials", False),
        "allow_methods": operator_config.get("security.cors.allow_methods", ["GET", "POST"]),
        "allow_headers": operator_config.get("security.cors.allow_headers", ["*"]),
        "expose_headers": operator_config.get("security.cors.expose_headers", ["Content-Disposition"]),
        "max_age": operator_config.get("security.cors.max_age", 86400),
    }


def resolve_bind_host() -> str:
    """Host to bind; falls back to 127.0.0.1 unless external binding is allowed"""
    host = operator_config.get("server.host", "127.0.0.1")
    allow_external = operator_config.get("server.allow_external_bind", False)

    if not allow_external and host not in LOCAL_HOSTS:
        logger.warning(f"[security] Forcing local binding from {host} to 127.0.0.1")
        operator_config.config["server"]["host"] = "127.0.0.1"
        return "127.0.0.1"

    if allow_external and host in ["0.0.0.0", "::"]:
        logger.warning("[security] External binding enabled - server will be accessible from any IP")

    return host
