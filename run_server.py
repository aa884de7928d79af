#!/usr/bin/env python3
"""Run the Image Compositor API server"""

import uvicorn

from fastapi_app.config import operator_config
from fastapi_app.security import resolve_bind_host


def main():
    """Run the FastAPI server"""
    host = resolve_bind_host()
    port = operator_config.get("server.port", 3000)
    log_level = operator_config.get("server.log_level", "info")

    print("Starting Image Compositor API")
    print(f"Server: {host}:{port}")
    print(f"Log level: {log_level}")
    print(f"CORS: {'Enabled' if operator_config.get('security.cors.enabled') else 'Disabled'}")
    print("-" * 50)

    uvicorn.run(
        "fastapi_app:app",
        host=host,
        port=port,
        log_level=log_level,
        workers=operator_config.get("server.workers", 1),
    )


if __name__ == "__main__":
    main()
