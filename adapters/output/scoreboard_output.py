"""
Scoreboard Output Adapter - Persistenza dei punteggi a fine sessione
"""

import logging
import threading
from queue import Empty
from typing import Dict, Optional

from adapters.ports import OutputPort
from core.events import Event, OutputEventType
from infrastructure.scoreboard_store import ScoreboardStore

logger = logging.getLogger(__name__)


class ScoreboardOutputPort(OutputPort):

    @classmethod
    def handled_events(cls):
        """Eventi gestiti da questo adapter"""
        return [OutputEventType.SAVE_SCOREBOARD]

    def __init__(self, name: str, config: dict):
        queue_maxsize = config['queue_maxsize']  # Fail-fast: must be present
        super().__init__(name, config, queue_maxsize)
        self.worker_thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Avvia worker che consuma dalla coda interna"""
        self.running = True
        self.worker_thread = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name=f"{self.name}_worker"
        )
        self.worker_thread.start()
        logger.info(f"▶️  {self.name} started")

    def stop(self) -> None:
        logger.info(f"⏸️  Stopping {self.name}...")
        self.running = False
        if self.worker_thread and self.worker_thread.is_alive():
            self.worker_thread.join(timeout=3.0)
            if self.worker_thread.is_alive():
                logger.warning(f"⚠️  {self.name} thread did not terminate")
        self._cleanup()
        logger.info(f"⏹️  {self.name} stopped")

    def _cleanup(self) -> None:
        pass

    def _worker_loop(self) -> None:
        while self.running:
            try:
                event = self.output_queue.get(timeout=0.5)
                if event.type == OutputEventType.SAVE_SCOREBOARD:
                    self.save(event)
                else:
                    logger.warning(f"Unknown scoreboard event type: {event.type}")
                self.output_queue.task_done()
            except Empty:
                continue
            except KeyboardInterrupt:
                break
            except Exception as e:
                logger.error(f"Error in scoreboard worker: {e}", exc_info=True)

    def save(self, event: Event) -> None:
        raise NotImplementedError


class ScoreboardOutput(ScoreboardOutputPort):
    """
    Salva su SQLite il tabellone ricevuto.
    Contenuto evento: {"user_id": str, "record": {"round": n, "players": [...]}}
    """

    def __init__(self, name: str, config: dict):
        super().__init__(name, config)
        db_path = config['db_path']
        try:
            self.store = ScoreboardStore(db_path)
            logger.info(f"✅ Scoreboard store initialized ({db_path})")
        except Exception as e:
            logger.error(f"❌ Scoreboard store initialization failed: {e}")
            raise RuntimeError(f"Scoreboard store initialization failed: {e}") from e

    def save(self, event: Event) -> None:
        content = event.content or {}
        self.store.save(content["user_id"], content["record"])

    def _cleanup(self) -> None:
        try:
            self.store.close()
        except Exception as e:
            logger.debug(f"Scoreboard store close error: {e}")


class MockScoreboardOutput(ScoreboardOutputPort):
    """Mock: tiene i tabelloni in memoria"""

    def __init__(self, name: str, config: dict):
        super().__init__(name, config)
        self.saved: Dict[str, dict] = {}

    def save(self, event: Event) -> None:
        content = event.content or {}
        self.saved[content["user_id"]] = content["record"]
        logger.info(f"💾 [MOCK SCOREBOARD] {content['user_id']}: {content['record']}")
