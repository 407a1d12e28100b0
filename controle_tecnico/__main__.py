"""Run the Controle Técnico API server.

    python -m controle_tecnico            serve the API
    python -m controle_tecnico passphrase print a new ENCRYPTION_KEY value
"""
import sys
import logging
from typing import Optional

from aiohttp import web

from .app import create_app
from .conf import AppConfig
from .exceptions import ConfigurationError
from .vault.config import generate_passphrase

logger = logging.getLogger("controle")


def main(argv: Optional[list[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if argv[:1] == ["passphrase"]:
        print(generate_passphrase())
        return 0

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    try:
        config = AppConfig.from_env()
    except ConfigurationError as err:
        logger.critical("%s:", err)
        for problem in err.errors:
            logger.critical("  - %s", problem)
        return 1
    logging.getLogger().setLevel(config.log_level)

    app = create_app(config)
    logger.info("%s listening on port %d", config.app_name, config.port)
    web.run_app(app, port=config.port, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
