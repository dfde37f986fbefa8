"""
CareerNest Payments Backend — Uvicorn Launcher
Run this file to start the development server.

Usage:
    python run.py
    python run.py --port 8000
    python run.py --reload
    python run.py --momo-mode sandbox
"""
import argparse
import os

import uvicorn

from careernest.config import Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CareerNest Payments Backend Server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable hot reload for development")
    parser.add_argument("--workers", type=int, default=1, help="Number of workers (default: 1)")
    parser.add_argument(
        "--momo-mode",
        choices=["mock", "sandbox", "live"],
        help="Override MOMO_MODE for this run (default: from environment / .env)",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    # Workers import the app fresh, so the override has to travel through the environment
    if args.momo_mode:
        os.environ["MOMO_MODE"] = args.momo_mode
    settings = Settings()

    callback = settings.MOMO_CALLBACK_URL or f"http://localhost:{args.port}/api/momo/callback"
    print(f"""
    ========================================================
      CareerNest Payments -- Backend Server
      API:      http://{args.host}:{args.port}
      Docs:     http://localhost:{args.port}/docs
      Gateway:  MTN MoMo ({settings.MOMO_MODE}, {settings.SETTLEMENT_CURRENCY})
      Callback: {callback}
    ========================================================
    """)
    if settings.MOMO_MODE != "mock" and not settings.MOMO_CALLBACK_TOKEN:
        print("  WARNING: MOMO_CALLBACK_TOKEN is empty; MoMo callbacks will be rejected.\n")

    uvicorn.run(
        "careernest.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers,
        log_level="info",
    )


if __name__ == "__main__":
    main()
