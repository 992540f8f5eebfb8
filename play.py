"""Dealer's Dojo game client launcher

Loads the level catalog and the local progress record, then opens the
pygame window. The relay server (run.py) must be reachable for chat turns.
"""

import logging
import sys

from dotenv import load_dotenv

from dealersdojo.ai.relay_client import RelayClient
from dealersdojo.core.catalog import load_catalog
from dealersdojo.core.config import configure_logging, load_settings
from dealersdojo.core.errors import CatalogLoadError
from dealersdojo.core.save import ProgressStore
from dealersdojo.core.session import SessionController
from dealersdojo.ui.game import DojoGame

load_dotenv()

logger = logging.getLogger("dealersdojo.play")


def main():
    settings = load_settings()
    configure_logging(settings)

    controller = None
    fatal_error = None
    try:
        catalog = load_catalog(settings.catalog_source)
    except CatalogLoadError as exc:
        logger.error("%s", exc)
        fatal_error = str(exc)
    else:
        store = ProgressStore(settings.save_path, len(catalog))
        relay = RelayClient(settings.relay_url, timeout=settings.relay_timeout)
        controller = SessionController(catalog=catalog, store=store, relay=relay)
        print(f"[OK] {len(catalog)} levels, progress at {settings.save_path}")

    game = DojoGame(settings, controller, fatal_error=fatal_error)
    game.run()
    return 0 if fatal_error is None else 1


if __name__ == "__main__":
    sys.exit(main())
