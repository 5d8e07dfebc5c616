"""
Pipe Input Adapter - Legge richieste della piattaforma da named pipe
Ogni riga è una busta di richiesta JSON (vedi adapters.request_parser).
"""

import os
import json
import stat
import threading
import logging
from pathlib import Path
from typing import Optional

from adapters.ports import InputPort
from adapters.request_parser import parse_request

logger = logging.getLogger(__name__)


class PipeInputAdapter(InputPort):
    """
    Input adapter che legge richieste da una named pipe (FIFO).
    Formato: JSON line-delimited

    Esempio JSON:
    {"session": {"sessionId": "s1", "user": {"userId": "u1"}},
     "request": {"type": "LaunchRequest", "requestId": "r1"}}
    """

    def __init__(self, name: str, config: dict, input_queue):
        """
        Args:
            name: Nome adapter
            config: Configurazione con 'pipe_path'
            input_queue: Queue per pubblicare eventi
        """
        super().__init__(name, config, input_queue)
        self.pipe_path = Path(config['pipe_path'])
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Avvia il reader thread"""
        if self.running:
            logger.warning("PipeInput già in esecuzione")
            return

        self.pipe_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.pipe_path.exists():
            try:
                os.mkfifo(self.pipe_path)
                logger.info(f"Named pipe creata: {self.pipe_path}")
            except OSError as e:
                logger.error(f"Errore creazione named pipe: {e}")
                return
        elif not self._is_fifo(self.pipe_path):
            logger.error(f"{self.pipe_path} esiste ma non è una named pipe")
            return

        self.running = True
        self._thread = threading.Thread(target=self._read_loop, daemon=True,
                                        name=f"{self.name}_worker")
        self._thread.start()
        logger.info(f"PipeInput avviato su {self.pipe_path}")

    def stop(self):
        """Ferma il reader thread"""
        if not self.running:
            return

        logger.info(f"⏸️  Stopping {self.name}...")
        self.running = False

        # Sblocca la read aprendo la pipe in scrittura
        try:
            with open(self.pipe_path, 'w') as f:
                f.write('\n')
        except OSError as e:
            logger.debug(f"Pipe unblock error: {e}")

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=3.0)
            if self._thread.is_alive():
                logger.warning(f"⚠️  {self.name} thread did not terminate")

        logger.info(f"⏹️  {self.name} stopped")

    @staticmethod
    def _is_fifo(path: Path) -> bool:
        return stat.S_ISFIFO(os.stat(path).st_mode)

    def _read_loop(self):
        """Loop di lettura dalla pipe"""
        while self.running:
            try:
                # Apri in read mode (blocca finché qualcuno scrive)
                with open(self.pipe_path, 'r') as pipe:
                    logger.debug("Pipe aperta, in attesa di dati...")

                    while self.running:
                        line = pipe.readline()
                        if not line:  # EOF
                            break

                        line = line.strip()
                        if not line:
                            continue

                        try:
                            self.process_line(line)
                        except (ValueError, TypeError) as e:
                            logger.error(f"Richiesta scartata: {e}")

            except Exception as e:
                if self.running:
                    logger.error(f"Errore lettura pipe: {e}", exc_info=True)

    def process_line(self, line: str) -> int:
        """
        Decodifica una riga JSON e pubblica gli eventi risultanti.

        Returns:
            Numero di eventi pubblicati

        Raises:
            ValueError: JSON non valido o richiesta non riconosciuta
        """
        envelope = json.loads(line)
        events = parse_request(envelope, self.name)
        for event in events:
            self.input_queue.put(event)
            logger.info(f"Event pubblicato: {event.type.value}")
        return len(events)
