"""
LORO CRM AI v1.4: Main Entry Point

Run the API with:
    python main.py serve

Or to check configuration:
    python main.py
"""

import argparse

from config.settings import (
    validate_config, VERSION, APP_NAME,
    MODEL_FALLBACK_ORDER, RETRY_ATTEMPTS, API_HOST, API_PORT,
)
from core.logging_setup import setup_logging


def show_status():
    """Show configuration status."""
    print("=" * 60)
    print(f"{APP_NAME} v{VERSION}")
    print("=" * 60)

    print("\n📋 Configuration:")
    config = validate_config()
    for key, ok in config.items():
        if key != "all_ok":
            status = "✅" if ok else "❌"
            print(f"  {status} {key}")

    print("\n🤖 Model fallback order:")
    for position, model in enumerate(MODEL_FALLBACK_ORDER, start=1):
        print(f"  {position}. {model}")
    print(f"  Attempts per model: {RETRY_ATTEMPTS}")

    if not config["api_key"]:
        print("\n  No API key set: AI routes will serve fallback content.")

    print("\n" + "=" * 60)
    print("To start the API:")
    print("  python main.py serve")
    print("=" * 60)


def serve(host: str, port: int):
    import uvicorn

    setup_logging()
    uvicorn.run("api.app:create_app", factory=True, host=host, port=port, log_config=None)


def main():
    parser = argparse.ArgumentParser(description=f"{APP_NAME} v{VERSION}")
    subcommands = parser.add_subparsers(dest="command")
    serve_parser = subcommands.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=API_HOST)
    serve_parser.add_argument("--port", type=int, default=API_PORT)
    args = parser.parse_args()

    if args.command == "serve":
        serve(args.host, args.port)
    else:
        show_status()


if __name__ == "__main__":
    main()
