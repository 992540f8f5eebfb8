"""Dealer's Dojo relay server launcher

Runs the FastAPI chat relay and publishes the level catalog.
"""

import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from dealersdojo.core.catalog import DEFAULT_PATH, load_catalog
from dealersdojo.core.config import configure_logging, load_settings
from dealersdojo.core.errors import CatalogLoadError, ConfigError
from dealersdojo.server.api import create_app
from dealersdojo.server.relay import build_relay

# API keys come from the environment / .env
load_dotenv()


def main():
    """Script entry point, starts the relay server"""
    print("=" * 60)
    print("Dealer's Dojo - Relay Server")
    print("=" * 60)
    print()

    settings = load_settings()
    configure_logging(settings)

    catalog_path = Path(settings.catalog_path) if settings.catalog_path else DEFAULT_PATH
    print(f"Checking level catalog at {catalog_path}...")
    try:
        catalog = load_catalog(catalog_path)
    except CatalogLoadError as exc:
        print(f"[!] {exc}")
        return 1
    print(f"[OK] {len(catalog)} levels")
    print()

    print("Initializing AI provider...")
    try:
        relay = build_relay(settings)
    except ConfigError as exc:
        print(f"[!] {exc}")
        return 1
    print(f"[OK] AI Provider: {relay.provider.name}")
    if not relay.provider.configured:
        print("[!] GEMINI_API_KEY is not set; /api/chat will answer 500 until it is.")
    print()

    static_dir = Path(settings.static_root) if settings.static_root else None
    app = create_app(relay, catalog_path=catalog_path, static_dir=static_dir)

    url = f"http://{settings.server_host}:{settings.server_port}"
    print("=" * 60)
    print(f"Relay running at: {url}/api/chat")
    print(f"Levels at: {url}/levels.json")
    print("=" * 60)
    print()

    config = uvicorn.Config(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=str(settings.log_level).lower(),
    )
    server = uvicorn.Server(config)
    try:
        server.run()
    except KeyboardInterrupt:
        print("\nServer interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
