"""
Configuration Loader - Carica e valida configurazioni YAML
"""

import os
import yaml
import logging
from typing import Dict, Any, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

REQUIRED_GAME_SECTIONS = ('rollcall', 'round', 'scoring', 'audio')
MIN_DEVICES = 2
MAX_DEVICES = 4


def get_colorcrash_home() -> Path:
    """
    Ottiene la directory home del progetto.

    Usa in ordine:
    1. COLORCRASH_HOME environment variable (se impostata)
    2. Directory padre di config/ (root del repository)
    """
    if 'COLORCRASH_HOME' in os.environ:
        home = Path(os.environ['COLORCRASH_HOME']).resolve()
        logger.debug(f"COLORCRASH_HOME from env: {home}")
        return home

    config_dir = Path(__file__).parent.resolve()
    home = config_dir.parent
    logger.debug(f"COLORCRASH_HOME auto-detected: {home}")
    return home


def resolve_path(path: str, relative_to: Optional[Path] = None) -> Path:
    """
    Risolve un path in assoluto.

    Se il path è già assoluto, lo restituisce così com'è.
    Se è relativo, lo risolve rispetto a COLORCRASH_HOME o alla directory specificata.
    """
    p = Path(path)

    if p.is_absolute():
        return p.resolve()

    base_dir = relative_to if relative_to else get_colorcrash_home()
    return (base_dir / p).resolve()


class ConfigLoader:
    """
    Loader per configurazioni YAML con validazione.
    """

    @classmethod
    def load(cls, config_path: str, validate_adapters: bool = True) -> Dict[str, Any]:
        """
        Carica configurazione da file YAML.

        Args:
            config_path: Path al file YAML (può essere relativo o assoluto)
            validate_adapters: Se True, valida che gli adapter configurati esistano

        Returns:
            Dict con configurazione completa (con 'colorcrash_home' aggiunto)

        Raises:
            FileNotFoundError: Se il file non esiste
            yaml.YAMLError: Se c'è un errore di parsing YAML
            ValueError: Se la configurazione non è valida
        """
        config_file = resolve_path(config_path)
        home = get_colorcrash_home()

        if not config_file.exists():
            error_msg = f"Configuration file not found: {config_file} (from: {config_path})"
            logger.error(f"❌ {error_msg}")
            logger.error(f"   COLORCRASH_HOME: {home}")
            raise FileNotFoundError(error_msg)

        try:
            with open(config_file, 'r') as f:
                config = yaml.safe_load(f)

            if config is None:
                raise ValueError("Configuration file is empty")

            cls._validate_config_structure(config)
            cls._validate_game(config['game'])

            if validate_adapters:
                cls._validate_adapters(config)

            config['colorcrash_home'] = str(home)

            logger.info(f"✅ Configuration loaded from: {config_file}")
            logger.info(f"   COLORCRASH_HOME: {home}")
            cls._log_config_summary(config)

            return config

        except yaml.YAMLError as e:
            error_msg = f"YAML parsing error in {config_path}: {e}"
            logger.error(f"❌ {error_msg}")
            raise yaml.YAMLError(error_msg)

        except Exception as e:
            logger.error(f"❌ Error loading config from {config_path}: {e}")
            raise

    @classmethod
    def _validate_config_structure(cls, config: Dict[str, Any]) -> None:
        """
        Valida che la configurazione abbia la struttura minima richiesta.

        Raises:
            ValueError: Se la configurazione non è valida
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration root must be a mapping")

        for section in ('game', 'adapters', 'queues'):
            if section not in config:
                raise ValueError(f"Missing required '{section}' section in configuration")

        if 'input' not in config['adapters'] or 'output' not in config['adapters']:
            raise ValueError("Missing 'input' or 'output' in adapters configuration")

        if 'input_maxsize' not in config['queues']:
            raise ValueError("Missing 'input_maxsize' in queues configuration")

    @classmethod
    def _validate_game(cls, game: Dict[str, Any]) -> None:
        """
        Valida la sezione 'game'.

        Raises:
            ValueError: Sezioni o chiavi mancanti, required_devices fuori intervallo
        """
        for section in REQUIRED_GAME_SECTIONS:
            if section not in game:
                raise ValueError(f"Missing required 'game.{section}' section in configuration")

        rollcall = game['rollcall']
        for key in ('required_devices', 'timeout_ms'):
            if key not in rollcall:
                raise ValueError(f"Missing required 'game.rollcall.{key}' in configuration")

        required = rollcall['required_devices']
        if not isinstance(required, int) or not MIN_DEVICES <= required <= MAX_DEVICES:
            raise ValueError(
                f"game.rollcall.required_devices must be an integer between "
                f"{MIN_DEVICES} and {MAX_DEVICES}, got {required!r}"
            )

        if 'timeout_ms' not in game['round']:
            raise ValueError("Missing required 'game.round.timeout_ms' in configuration")

        for path, value in (('game.rollcall.timeout_ms', rollcall['timeout_ms']),
                            ('game.round.timeout_ms', game['round']['timeout_ms'])):
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{path} must be a positive integer, got {value!r}")

    @classmethod
    def _validate_adapters(cls, config: Dict[str, Any]) -> None:
        """
        Valida che gli adapter configurati esistano nei moduli del factory.

        Raises:
            ValueError: Se un adapter configurato non esiste
        """
        # Import qui per evitare circular import
        from adapters.factory import AdapterFactory

        available = AdapterFactory.get_available_classes()

        for direction in ('input', 'output'):
            for adapter_config in config['adapters'][direction] or []:
                class_name = adapter_config.get('class', '')
                if class_name not in available[direction]:
                    raise ValueError(
                        f"Unknown {direction} adapter class '{class_name}'. "
                        f"Available: {', '.join(available[direction])}"
                    )

    @classmethod
    def _log_config_summary(cls, config: Dict[str, Any]) -> None:
        """Log riassunto configurazione"""
        game = config['game']
        logger.info("📋 Configuration Summary:")
        logger.info(f"  Required buttons: {game['rollcall']['required_devices']}")
        logger.info(f"  Round timeout: {game['round']['timeout_ms']}ms")
        logger.info(f"  Input Adapters: {len(config['adapters']['input'] or [])}")
        logger.info(f"  Output Adapters: {len(config['adapters']['output'] or [])}")
