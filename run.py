"""
Start the SupportDesk server under uvicorn.

Usage:
    python run.py                  # 127.0.0.1:8000
    python run.py --reload         # restart on code changes
    python run.py --port 8080 --log-level debug

MongoDB must run as a replica set: the lifecycle notifier is fed by
change streams.
"""
import argparse

import uvicorn

from supportdesk.config.settings import settings


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the SupportDesk server")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Restart when source files change")
    parser.add_argument(
        "--log-level",
        default=settings.log_level.lower(),
        choices=["critical", "error", "warning", "info", "debug"],
        help="uvicorn log level (default: LOG_LEVEL from the environment)"
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)

    if settings.is_production and settings.session_secret == "change-me-in-production":
        raise SystemExit("SESSION_SECRET must be set in production")

    print(f"SupportDesk on http://{args.host}:{args.port} ({settings.environment})")
    print(f"  MongoDB: {settings.mongo_db}")
    print(f"  Summaries: {settings.llm_provider or 'disabled'}")

    # One process: each notifier stream holds its own change-stream cursor
    uvicorn.run(
        "supportdesk.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
