#!/usr/bin/env python3
"""
paperpile-navigate - API server

Usage:
    python app.py
    python app.py --port 8080 --no-reload
"""

import argparse

import uvicorn

from paperpile_navigate.utils.config import settings


def main():
    """Main application entry point"""
    parser = argparse.ArgumentParser(description="paperpile-navigate API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=3001, help="Port to bind (default: 3001)")
    parser.add_argument("--reload", action="store_true", default=True, help="Enable auto-reload (default: True)")
    parser.add_argument("--no-reload", dest="reload", action="store_false", help="Disable auto-reload")
    args = parser.parse_args()

    print("=" * 80)
    print(f"paperpile-navigate API on http://{args.host}:{args.port} ({settings.environment})")
    print(f"Docs: http://{args.host}:{args.port}/docs")
    print("=" * 80)

    uvicorn.run(
        "paperpile_navigate.backend.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
