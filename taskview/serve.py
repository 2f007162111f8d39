"""Command-line launcher for the task view service."""

from __future__ import annotations

import argparse
import os
from typing import Sequence

import uvicorn

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 18170


def _env_port() -> int:
    raw_value = os.getenv("TASKVIEW_PORT", "").strip()
    if not raw_value:
        return DEFAULT_PORT
    try:
        return int(raw_value)
    except ValueError:
        raise SystemExit("TASKVIEW_PORT must be an integer.") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve the task view JSON tool endpoints."
    )
    parser.add_argument(
        "--host",
        default=os.getenv("TASKVIEW_HOST", "").strip() or DEFAULT_HOST,
        help="Bind address (default: env TASKVIEW_HOST or 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=_env_port(),
        help="Bind port (default: env TASKVIEW_PORT or 18170).",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on source changes.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    uvicorn.run(
        "taskview.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
