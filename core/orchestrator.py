from __future__ import annotations

"""
Game Orchestrator - Core Component
Orchestra il main event loop e il ciclo di vita di Color Crash.
"""

import queue
import signal
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, TYPE_CHECKING

# Core imports
from core.events import (
    Event, EventPriority, InputEventType, OutputEventType, create_output_event
)
from core.event_router import EventRouter
from core.brain import GameBrain
from core.state import RequestContext

# Adapters imports
from adapters.factory import AdapterFactory
from adapters.response_builder import build_response

# Infrastructure
from config.config_loader import resolve_path
from infrastructure.scoreboard_store import ScoreboardStore

if TYPE_CHECKING:
    from adapters.ports import InputPort, OutputPort


class GameOrchestrator:
    """
    Orchestratore principale.

    Responsabilità:
    - Setup coda di input e router
    - Inizializzazione Brain (con loader dei punteggi)
    - Creazione e avvio adapters
    - Main event loop: evento -> Brain -> risposta/direttive/salvataggi -> Router
    - Gestione shutdown
    """

    def __init__(self, config: Dict[str, Any], brain: Optional[GameBrain] = None):
        """
        Args:
            config: Configurazione già caricata e validata
            brain: Brain già costruito (default: costruito da config['game'])
        """
        self.logger = logging.getLogger(__name__)
        self.running = False

        # Setup signal handlers per shutdown pulito
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.config = config
        self.home = Path(config.get('colorcrash_home', '.'))

        queue_config = self.config['queues']
        self.input_queue: queue.PriorityQueue = queue.PriorityQueue(maxsize=queue_config['input_maxsize'])

        self.router = EventRouter()

        self.scoreboard_store: Optional[ScoreboardStore] = None
        if brain is None:
            brain = self._create_brain()
        self.brain = brain

        # Adapters - creati PRIMA del setup routes
        self.input_adapters: List[InputPort] = []
        self.output_adapters: List[OutputPort] = []
        self._create_adapters()

        self._setup_routes()

        self.logger.info("🚀 GameOrchestrator initialized")

    def _create_brain(self) -> GameBrain:
        """Brain con loader dei punteggi se è configurato uno storage"""
        storage = self.config.get('storage')
        loader = None
        if storage and storage.get('db_path'):
            db_path = storage['db_path']
            if db_path != ":memory:":
                db_path = str(resolve_path(db_path, relative_to=self.home))
            self.scoreboard_store = ScoreboardStore(db_path)
            loader = self.scoreboard_store.load
        return GameBrain(self.config['game'], scoreboard_loader=loader)

    def _signal_handler(self, signum, frame):
        """Handler per SIGINT (CTRL-C) e SIGTERM"""
        sig_name = 'SIGINT' if signum == signal.SIGINT else 'SIGTERM'
        self.logger.info(f"⚠️  {sig_name} received, shutting down...")
        self.running = False

    def _setup_routes(self) -> None:
        """
        Configura le route interrogando gli adapter output (handled_events()).
        """
        for adapter in self.output_adapters:
            for event_type in type(adapter).handled_events():
                self.router.register_route(event_type, adapter, adapter.name)

        event_type_count = len(set(
            event_type
            for adapter in self.output_adapters
            for event_type in type(adapter).handled_events()
        ))

        self.logger.info(
            f"📍 Router configured dynamically with {event_type_count} event types "
            f"across {len(self.output_adapters)} adapters"
        )

    def _create_adapters(self) -> None:
        """Crea adapters dalla configurazione usando Factory"""
        for adapter_cfg in self.config['adapters']['input'] or []:
            class_name = adapter_cfg.get('class')
            config = self._resolve_adapter_paths(adapter_cfg.get('config') or {})

            adapter = AdapterFactory.create_input_adapter(class_name, config, self.input_queue)
            self.input_adapters.append(adapter)

        for adapter_cfg in self.config['adapters']['output'] or []:
            class_name = adapter_cfg.get('class')
            config = self._resolve_adapter_paths(adapter_cfg.get('config') or {})

            output_adapter = AdapterFactory.create_output_adapter(class_name, config)
            self.output_adapters.append(output_adapter)

        self.logger.info(
            f"✅ Adapters created: {len(self.input_adapters)} input, "
            f"{len(self.output_adapters)} output"
        )

    def _resolve_adapter_paths(self, config: dict) -> dict:
        """Risolve rispetto a COLORCRASH_HOME le chiavi *_path degli adapter"""
        resolved = dict(config)
        for key, value in config.items():
            if key.endswith('_path') and isinstance(value, str) and value != ":memory:":
                resolved[key] = str(resolve_path(value, relative_to=self.home))
        return resolved

    def _start_adapters(self) -> None:
        """Avvia tutti gli adapters (output prima, per non perdere risposte)"""
        for out_adapter in self.output_adapters:
            try:
                out_adapter.start()
                self.logger.info(f"▶️  Started output adapter: {out_adapter.name}")
            except Exception as e:
                self.logger.error(f"❌ Failed to start {out_adapter.name}: {e}")

        for in_adapter in self.input_adapters:
            try:
                in_adapter.start()
                self.logger.info(f"▶️  Started input adapter: {in_adapter.name}")
            except Exception as e:
                self.logger.error(f"❌ Failed to start {in_adapter.name}: {e}")

    def _stop_adapters(self) -> None:
        """Ferma tutti gli adapters"""
        self.logger.info("Stopping adapters...")

        for in_adapter in self.input_adapters:
            try:
                in_adapter.stop()
            except Exception as e:
                self.logger.error(f"Error stopping {in_adapter.name}: {e}")

        for out_adapter in self.output_adapters:
            try:
                out_adapter.stop()
            except Exception as e:
                self.logger.error(f"Error stopping {out_adapter.name}: {e}")

    def handle_event(self, input_event: Event) -> RequestContext:
        """
        Processa un singolo evento di input fino al completamento
        e smista gli effetti agli output adapter.
        """
        ctx = self.brain.process_event(input_event)
        self.router.route_events(self.build_output_events(input_event, ctx))
        return ctx

    @staticmethod
    def build_output_events(input_event: Event, ctx: RequestContext) -> List[Event]:
        """
        Traduce il contesto in eventi di output:
        risposta completa, una direttiva per evento (in ordine), salvataggi punteggi.
        """
        metadata = {
            "session_id": (input_event.metadata or {}).get("session_id"),
            "request_id": ctx.request_id,
        }
        events: List[Event] = []

        if input_event.type not in (InputEventType.SESSION_ENDED, InputEventType.SHUTDOWN):
            response = build_response(ctx)
            events.append(create_output_event(
                OutputEventType.SKILL_RESPONSE, response,
                priority=EventPriority.HIGH, metadata=dict(metadata)
            ))
            for directive in response["response"]["directives"]:
                events.append(create_output_event(
                    OutputEventType.GADGET_DIRECTIVE, directive,
                    priority=EventPriority.HIGH, metadata=dict(metadata)
                ))

        for save in ctx.scoreboard_saves:
            events.append(create_output_event(
                OutputEventType.SAVE_SCOREBOARD, save,
                priority=EventPriority.LOW, metadata=dict(metadata)
            ))

        return events

    def run(self) -> None:
        """Main event loop"""
        self.running = True

        self._start_adapters()
        self._print_banner()

        self.logger.info("🧠 Entering main event loop")

        try:
            while self.running:
                try:
                    input_event = self.input_queue.get(timeout=1.0)
                except queue.Empty:
                    continue

                if input_event.type == InputEventType.SHUTDOWN:
                    self.logger.info("Shutdown event received")
                    self.running = False

                self.handle_event(input_event)
                self.input_queue.task_done()

        except Exception as e:
            self.logger.error(f"Error in main loop: {e}", exc_info=True)

        finally:
            self._shutdown()

    def _shutdown(self) -> None:
        """Procedura di shutdown pulita"""
        self.logger.info("🛑 Shutting down Color Crash...")

        self.running = False

        self._stop_adapters()

        if self.scoreboard_store:
            try:
                self.scoreboard_store.close()
            except Exception as e:
                self.logger.warning(f"Could not close scoreboard store: {e}")

        try:
            stats = self.router.get_stats()
            self.logger.info(f"📊 Router stats: {stats}")
        except Exception as e:
            self.logger.warning(f"Could not get router stats: {e}")

        self.logger.info("👋 Color Crash shutdown complete")

    def _print_banner(self) -> None:
        """Stampa banner di avvio"""
        game = self.config['game']
        print("\n" + "="*60)
        print("🎮 COLOR CRASH - Hexagonal Architecture")
        print("="*60)
        print(f"Required buttons: {game['rollcall']['required_devices']}")
        print(f"Round timeout: {game['round']['timeout_ms']}ms")
        print(f"Input Adapters: {len(self.input_adapters)}")
        print(f"Output Adapters: {len(self.output_adapters)}")
        for event_type, count in self.router.get_routes().items():
            print(f"  {event_type.value} -> {count} adapter(s)")
        print("="*60 + "\n")
