"""
Keyboard Input Adapter - Simula la piattaforma vocale da tastiera (stdin)

Comandi:
    launch | end                      -> apertura / chiusura sessione
    yes | no | stop | start | help    -> intent vocali
    press <gadgetId>                  -> button_down_event
    timeout                           -> timeout della finestra corrente
    <evento> <gadgetId> [...]         -> evento nominato (es. first_button_checked_in A)
"""

import sys
import logging
import threading
import uuid
from queue import PriorityQueue
from typing import Optional

from adapters.ports import InputPort
from core.events import (
    BUTTON_DOWN_EVENT, TIMEOUT_EVENT,
    Event, EventPriority, InputEventType,
    create_gadget_event, create_input_event,
)

logger = logging.getLogger(__name__)

COMMANDS = {
    "launch": InputEventType.LAUNCH,
    "end": InputEventType.SESSION_ENDED,
    "yes": InputEventType.YES,
    "no": InputEventType.NO,
    "stop": InputEventType.STOP,
    "start": InputEventType.START_ROUND,
    "help": InputEventType.HELP,
}


def parse_command(text: str, source: str, metadata: dict) -> Event:
    """
    Converte una riga digitata in un evento di input.

    Raises:
        ValueError: Se la riga è vuota o il comando richiede un gadgetId mancante
    """
    tokens = text.strip().split()
    if not tokens:
        raise ValueError("Empty command")

    command, args = tokens[0].lower(), tokens[1:]

    if command in COMMANDS:
        return create_input_event(COMMANDS[command], command, source,
                                  priority=EventPriority.HIGH, metadata=dict(metadata))

    if command == TIMEOUT_EVENT:
        return create_gadget_event(TIMEOUT_EVENT, [], source, metadata=dict(metadata))

    if command == "press":
        command = BUTTON_DOWN_EVENT

    if not args:
        raise ValueError(f"Command '{command}' requires at least one gadgetId")

    input_events = [
        {"gadgetId": gadget_id, "action": "down", "color": "000000"}
        for gadget_id in args
    ]
    return create_gadget_event(command, input_events, source, metadata=dict(metadata))


class KeyboardInput(InputPort):
    """
    Keyboard Input Adapter.
    Legge comandi da stdin e li pubblica sulla input_queue con una
    sessione simulata (session_id/user_id da config).
    """

    def __init__(self, name: str, config: dict, input_queue: PriorityQueue):
        super().__init__(name, config, input_queue)
        self.session_id = config.get('session_id', 'keyboard-session')
        self.user_id = config.get('user_id', 'keyboard-user')
        self.prompt = config.get('prompt', 'Tu > ')
        self.worker_thread: Optional[threading.Thread] = None
        logger.info(f"⌨️  KeyboardInput initialized (session={self.session_id})")

    def start(self) -> None:
        """Avvia worker thread"""
        self.running = True

        if not sys.stdin.isatty():
            logger.warning("⚠️ stdin is not interactive, keyboard input disabled")
            return

        self.worker_thread = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name=f"{self.name}_worker"
        )
        self.worker_thread.start()

        logger.info(f"▶️  {self.name} started")
        print(self.prompt, end="", flush=True)

    def stop(self) -> None:
        """Ferma worker"""
        self.running = False
        if self.worker_thread:
            self.worker_thread.join(timeout=1.0)

        logger.info(f"⏹️  {self.name} stopped")

    def handle_line(self, text: str) -> bool:
        """Pubblica l'evento corrispondente alla riga. Ritorna False se scartata."""
        metadata = {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "request_id": str(uuid.uuid4()),
        }
        try:
            event = parse_command(text, self.name, metadata)
        except ValueError as e:
            logger.warning(f"⌨️  Invalid command '{text}': {e}")
            return False

        self.input_queue.put(event)
        logger.debug(f"⌨️  Keyboard input: {text}")
        return True

    def _worker_loop(self) -> None:
        """Loop principale di lettura tastiera"""
        while self.running:
            try:
                text = input()

                if text:
                    self.handle_line(text)
                    print(self.prompt, end="", flush=True)

            except EOFError:
                logger.info("EOF received, keyboard input terminating")
                break
            except Exception as e:
                logger.error(f"Error reading keyboard input: {e}")
                break
