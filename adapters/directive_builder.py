"""
Directive Builder - Serializza i comandi del core nelle direttive di trasporto
Schema: GameEngine.StartInputHandler / GadgetController.SetLight
"""

import logging
from typing import List

from core.commands import SetLight, StartInputHandler

logger = logging.getLogger(__name__)

SET_LIGHT_VERSION = 1


def start_input_handler(command: StartInputHandler) -> dict:
    directive = {
        "type": "GameEngine.StartInputHandler",
        "timeout": command.timeout_ms,
        "recognizers": command.recognizers,
        "events": command.events,
    }
    if command.proxies:
        directive["proxies"] = list(command.proxies)
    return directive


def set_light(command: SetLight) -> dict:
    return {
        "type": "GadgetController.SetLight",
        "version": SET_LIGHT_VERSION,
        "targetGadgets": list(command.target_gadgets),
        "parameters": {
            "triggerEvent": command.trigger.value,
            "triggerEventTimeMs": 0,
            "animations": command.animations,
        },
    }


def build_directive(command) -> dict:
    """
    Converte un singolo comando in direttiva.

    Raises:
        TypeError: Se il comando non è supportato
    """
    if isinstance(command, StartInputHandler):
        return start_input_handler(command)
    if isinstance(command, SetLight):
        return set_light(command)

    logger.error(f"❌ Unsupported gadget command: {type(command)}")
    raise TypeError(f"Unsupported gadget command: {type(command).__name__}")


def build_directives(commands: list) -> List[dict]:
    """Converte i comandi preservandone l'ordine (ordine di esecuzione sul device)"""
    return [build_directive(command) for command in commands]
