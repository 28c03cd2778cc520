"""Run the chat server with uvicorn.

Usage:
    python -m scripts.run_server [--host 0.0.0.0] [--port 5000] [--reload]
"""

import argparse

import uvicorn

from app.core.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the group chat server")
    parser.add_argument("--host", default=settings.server.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.server.port, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if settings.app.debug else "info",
    )


if __name__ == "__main__":
    main()
