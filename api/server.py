"""Server entry point for running the FastAPI application.

Usage:
    python -m api.server [--host HOST] [--port PORT] [--reload]
"""

import argparse
import os

import uvicorn
from dotenv import load_dotenv

# Load .env before the app module is imported; several modules read the
# environment at import time.
load_dotenv()


def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Run the FastAPI server."""
    uvicorn.run(
        "api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=os.getenv("UVICORN_LOG_LEVEL", "info"),
        # Request logging comes from structlog and the OTel FastAPI instrumentation
        access_log=False,
    )


def main():
    parser = argparse.ArgumentParser(description="Run the Thought Sort API server")
    parser.add_argument("--host", default=os.getenv("API_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("API_PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    run_server(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
