"""Production startup script for the discoverability API.

Starts uvicorn with settings taken from the environment and exits cleanly
on SIGTERM/SIGINT.
"""

import os
import signal
import sys


def start_api() -> None:
    """Start the FastAPI application with uvicorn."""
    port = os.getenv("PORT", "8000")
    workers = os.getenv("API_WORKERS", "1")
    host = os.getenv("API_HOST", "0.0.0.0")

    if workers != "1" and not os.getenv("REDIS_URL"):
        print("Warning: usage limits are per process without REDIS_URL.")

    print(f"Starting API server on {host}:{port} with {workers} worker(s)...")

    # Use exec to replace the current process
    os.execvp(
        "uvicorn",
        [
            "uvicorn",
            "api.main:app",
            "--host",
            host,
            "--port",
            port,
            "--workers",
            workers,
            "--proxy-headers",
            "--forwarded-allow-ips",
            "*",
        ],
    )


def signal_handler(signum: int, _frame: object) -> None:
    """Handle shutdown signals gracefully."""
    print(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def main() -> None:
    """Main entry point."""
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    start_api()


if __name__ == "__main__":
    main()
