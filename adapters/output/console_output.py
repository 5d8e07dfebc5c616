"""
Console Output Adapter - Stampa le risposte della skill in console
Utile per development e per giocare da tastiera.
"""

import logging
import re
import threading
from queue import Empty
from typing import List

from adapters.ports import OutputPort
from core.events import Event, OutputEventType

logger = logging.getLogger(__name__)

_SSML_TAG = re.compile(r"<[^>]+>")


def speech_text(ssml: str) -> str:
    """Rimuove i tag SSML"""
    return _SSML_TAG.sub("", ssml or "").strip()


def describe_directive(directive: dict) -> str:
    """Riga leggibile per una direttiva hardware"""
    directive_type = directive.get("type", "?")
    if directive_type == "GadgetController.SetLight":
        params = directive.get("parameters", {})
        targets = directive.get("targetGadgets") or ["all"]
        return f"{directive_type} [{params.get('triggerEvent')}] -> {', '.join(targets)}"
    if directive_type == "GameEngine.StartInputHandler":
        events = ", ".join(directive.get("events", {}).keys())
        return f"{directive_type} timeout={directive.get('timeout')}ms events=[{events}]"
    return directive_type


class ConsoleOutputPort(OutputPort):
    """Port per output console"""

    @classmethod
    def handled_events(cls):
        return [
            OutputEventType.SKILL_RESPONSE,
            OutputEventType.GADGET_DIRECTIVE
        ]


class ConsoleOutput(ConsoleOutputPort):
    """Stampa eventi in console con formattazione"""

    def __init__(self, name: str, config: dict):
        queue_maxsize = config.get('queue_maxsize', 100)
        super().__init__(name, config, queue_maxsize)
        self.verbose = config.get('verbose', False)
        self.worker_thread = None

    def start(self):
        self.running = True
        self.worker_thread = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name=f"{self.name}_worker"
        )
        self.worker_thread.start()
        logger.info(f"▶️  {self.name} started")

    def stop(self):
        self.running = False
        if self.worker_thread:
            self.worker_thread.join(timeout=1.0)
        logger.info(f"⏹️  {self.name} stopped")

    def _worker_loop(self):
        while self.running:
            try:
                event = self.output_queue.get(timeout=0.5)
                for line in self.format_event(event):
                    print(f"\r{line}", flush=True)
                self.output_queue.task_done()
            except Empty:
                continue
            except KeyboardInterrupt:
                break
            except Exception as e:
                logger.error(f"Console output error: {e}")

    def format_event(self, event: Event) -> List[str]:
        """Righe da stampare per l'evento"""
        if event.type == OutputEventType.SKILL_RESPONSE:
            response = (event.content or {}).get("response", {})
            lines = []
            speech = response.get("outputSpeech", {}).get("ssml")
            if speech:
                lines.append(f"🔊 Alexa: {speech_text(speech)}")
            if response.get("shouldEndSession") is False:
                lines.append("🎤 (listening)")
            elif response.get("shouldEndSession") is True:
                lines.append("👋 (session closed)")
            return lines

        if event.type == OutputEventType.GADGET_DIRECTIVE:
            if self.verbose:
                return [f"💡 {describe_directive(event.content or {})}"]
            return []

        return [f"📊 {event.type.name}: {event.content}"]


class MockConsoleOutput(ConsoleOutputPort):
    """Mock console output per test: memorizza gli eventi ricevuti"""

    def __init__(self, name: str, config: dict):
        queue_maxsize = config.get('queue_maxsize', 100)
        super().__init__(name, config, queue_maxsize)
        self.worker_thread = None
        self.received: List[Event] = []

    def start(self):
        self.running = True
        self.worker_thread = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name=f"{self.name}_worker"
        )
        self.worker_thread.start()
        logger.info(f"▶️  {self.name} started (MOCK)")

    def stop(self):
        self.running = False
        if self.worker_thread:
            self.worker_thread.join(timeout=1.0)

    def _worker_loop(self):
        while self.running:
            try:
                event = self.output_queue.get(timeout=0.5)
                self.received.append(event)
                logger.debug(f"MOCK Console: {event.type.name}")
                self.output_queue.task_done()
            except Empty:
                continue
            except Exception as e:
                logger.error(f"Mock console error: {e}")
