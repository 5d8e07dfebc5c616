"""
Color Crash Main - Hexagonal Architecture
Entry point: ambiente, logging, configurazione, orchestrator.
"""

import os
import sys
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler
from dotenv import load_dotenv

from config.config_loader import ConfigLoader, get_colorcrash_home, resolve_path
from core.orchestrator import GameOrchestrator

DEFAULT_LOG_CONFIG = {
    'log_file': 'colorcrash.log',
    'max_bytes': 10*1024*1024,
    'backup_count': 3
}


# ===== LOGGING SETUP =====
def setup_logging(log_config: dict, home: Path) -> None:
    """
    Configura il sistema di logging

    Args:
        log_config: Configurazione logging (log_file, max_bytes, backup_count, level)
        home: Path alla home directory del progetto
    """
    log_file = resolve_path(log_config.get('log_file', 'colorcrash.log'), relative_to=home)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    max_bytes = log_config.get('max_bytes', 10*1024*1024)
    backup_count = log_config.get('backup_count', 3)

    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s')
    handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO))
    logger.addHandler(handler)
    logger.addHandler(console_handler)

    # Silence noisy libraries
    logging.getLogger("gpiozero").setLevel(logging.WARNING)


# ===== ENTRY POINT =====
def main():
    """Entry point principale"""

    load_dotenv(".env")

    home = get_colorcrash_home()

    # COLORCRASH_CONFIG è OBBLIGATORIO - fail fast se mancante
    config_file = os.getenv("COLORCRASH_CONFIG")
    if not config_file:
        print("❌ ERROR: COLORCRASH_CONFIG environment variable not set")
        print("   Set it in .env file or as environment variable:")
        print("   COLORCRASH_CONFIG=config/game_config.yaml")
        print("")
        print("   You can also set COLORCRASH_HOME (optional):")
        print(f"   Current COLORCRASH_HOME: {home}")
        sys.exit(1)

    try:
        config = ConfigLoader.load(config_file)
    except Exception as e:
        setup_logging(DEFAULT_LOG_CONFIG, home)
        logging.getLogger(__name__).error(f"❌ Invalid configuration: {e}", exc_info=True)
        sys.exit(1)

    setup_logging({**DEFAULT_LOG_CONFIG, **config.get('logging', {})}, home)

    logger = logging.getLogger(__name__)
    logger.info(f"🏠 COLORCRASH_HOME: {home}")
    logger.info(f"🚀 Starting Color Crash with config: {config_file}")

    try:
        orchestrator = GameOrchestrator(config)
        orchestrator.run()

    except Exception as e:
        logger.error(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
