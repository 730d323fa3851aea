#!/usr/bin/env python3
"""
Campus Admin API Runner
=======================

Usage:
    python run_app.py                    # Development mode with auto-reload
    python run_app.py --mode prod        # Production mode, multiple workers
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
"""

import argparse
import os
import sys

def check_environment():
    """Report which credential source will be used"""
    if os.path.exists(".env"):
        print(".env file found")
    else:
        print(".env file not found, using defaults")

    if not any(
        os.getenv(name)
        for name in ("FIREBASE_CREDENTIALS_JSON", "FIREBASE_CREDENTIALS_PATH", "FIREBASE_PRIVATE_KEY")
    ):
        print("No Firebase service account configured, application default credentials will be used")

def run_main_app(host="0.0.0.0", port=8000, reload=True, workers=1):
    """Run the FastAPI application"""
    print(f"\nStarting Campus Admin API on {host}:{port}")
    print(f"API Docs: http://{host}:{port}/api/docs")

    import uvicorn
    uvicorn.run(
        "campus_admin.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=None if reload else workers,
        log_level="info"
    )

def main():
    parser = argparse.ArgumentParser(description="Campus Admin API Runner")

    parser.add_argument(
        "--mode",
        choices=["dev", "prod"],
        default="dev",
        help="Server mode (default: dev)"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=4,
        help="Worker processes in prod mode (default: 4)"
    )
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload"
    )

    args = parser.parse_args()

    check_environment()

    if args.mode == "prod":
        os.environ.setdefault("ENVIRONMENT", "production")

    reload = not args.no_reload and args.mode != "prod"
    run_main_app(args.host, args.port, reload, args.workers)

    return 0

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nServer stopped by user")
        sys.exit(0)
