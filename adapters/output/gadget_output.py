"""
Gadget Output Adapters - Esecuzione delle direttive hardware
(GadgetController.SetLight, GameEngine.StartInputHandler)

GPIOGadgetOutput rispecchia le luci dei bottoni su LED RGB collegati al GPIO,
un LED per bottone nell'ordine in cui i gadgetId compaiono nelle direttive.
"""

import os
import logging
import threading
from queue import Empty
from typing import Dict, List, Optional, Tuple

# Mock GPIO per testing
if not os.path.exists('/proc/device-tree/model'):
    os.environ['GPIOZERO_PIN_FACTORY'] = 'mock'

from gpiozero import RGBLED

from adapters.ports import OutputPort
from core.events import Event, OutputEventType

logger = logging.getLogger(__name__)

SET_LIGHT = "GadgetController.SetLight"
START_INPUT_HANDLER = "GameEngine.StartInputHandler"


def dominant_color(animations: list) -> str:
    """Colore dello step più lungo della prima animazione ('000000' se vuota)"""
    if not animations or not animations[0].get("sequence"):
        return "000000"
    step = max(animations[0]["sequence"], key=lambda s: s.get("durationMs", 0))
    return step.get("color", "000000")


def color_to_bits(color: str) -> Tuple[int, int, int]:
    """'RRGGBB' -> (r, g, b) acceso/spento per LED senza PWM"""
    color = color.lstrip("#")
    channels = [int(color[i:i + 2], 16) for i in (0, 2, 4)]
    return tuple(1 if value >= 128 else 0 for value in channels)


class GadgetOutputPort(OutputPort):
    """Port per le direttive hardware"""

    @classmethod
    def handled_events(cls):
        return [OutputEventType.GADGET_DIRECTIVE]

    def __init__(self, name: str, config: dict):
        super().__init__(name, config, config.get('queue_maxsize', 100))
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
        """Ferma worker"""
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
                if event.type == OutputEventType.GADGET_DIRECTIVE:
                    self.apply_directive(event.content or {})
                else:
                    logger.warning(f"Unknown gadget event type: {event.type}")
                self.output_queue.task_done()
            except Empty:
                continue
            except KeyboardInterrupt:
                logger.info("Gadget worker interrupted")
                break
            except Exception as e:
                logger.error(f"Error in gadget worker: {e}", exc_info=True)

    def apply_directive(self, directive: dict) -> None:
        raise NotImplementedError


class GPIOGadgetOutput(GadgetOutputPort):
    """
    Luci dei bottoni su LED RGB (Raspberry Pi).

    Config:
    - pins: lista di terne [red, green, blue], una per bottone
    - queue_maxsize: dimensione coda (default 100)

    Le animazioni vengono ridotte al loro colore dominante; i trigger
    buttonDown/buttonUp vengono memorizzati per bottone.
    """

    def __init__(self, name: str, config: dict):
        super().__init__(name, config)
        pins = config['pins']
        if not pins:
            raise ValueError("GPIOGadgetOutput requires at least one RGB pin triple")

        try:
            self.leds: List[RGBLED] = [RGBLED(*triple, pwm=False) for triple in pins]
            logger.info(f"✅ {len(self.leds)} RGB LEDs initialized on pins {pins}")
        except Exception as e:
            logger.error(f"❌ RGB LED initialization failed: {e}")
            raise RuntimeError(f"RGB LED initialization failed: {e}") from e

        self.gadget_leds: Dict[str, RGBLED] = {}
        self.triggers: Dict[str, Dict[str, str]] = {}

    def _led_for(self, gadget_id: str) -> Optional[RGBLED]:
        if gadget_id not in self.gadget_leds:
            if len(self.gadget_leds) >= len(self.leds):
                logger.warning(f"No free LED for gadget {gadget_id}")
                return None
            self.gadget_leds[gadget_id] = self.leds[len(self.gadget_leds)]
            logger.info(f"💡 Gadget {gadget_id} -> LED #{len(self.gadget_leds)}")
        return self.gadget_leds[gadget_id]

    def apply_directive(self, directive: dict) -> None:
        directive_type = directive.get("type")

        if directive_type == START_INPUT_HANDLER:
            logger.debug(f"Input handler opened for {directive.get('timeout')}ms")
            return

        if directive_type != SET_LIGHT:
            logger.warning(f"Unknown directive: {directive_type}")
            return

        params = directive.get("parameters", {})
        trigger = params.get("triggerEvent", "none")
        color = dominant_color(params.get("animations", []))
        targets = directive.get("targetGadgets") or []

        if targets:
            leds = [(gadget_id, self._led_for(gadget_id)) for gadget_id in targets]
        elif self.gadget_leds:
            leds = list(self.gadget_leds.items())
        else:
            leds = [(None, led) for led in self.leds]

        for gadget_id, led in leds:
            if led is None:
                continue
            if trigger == "none":
                led.value = color_to_bits(color)
            elif gadget_id is not None:
                self.triggers.setdefault(gadget_id, {})[trigger] = color

        logger.debug(f"💡 SetLight[{trigger}] {color} -> {targets or 'all'}")

    def _cleanup(self) -> None:
        for led in self.leds:
            try:
                led.off()
                led.close()
            except Exception as e:
                logger.debug(f"LED cleanup error: {e}")


class MockGadgetOutput(GadgetOutputPort):
    """
    Mock Gadget Output per testing.
    Scrive su log invece di accendere LED e memorizza le direttive ricevute.
    """

    def __init__(self, name: str, config: dict):
        super().__init__(name, config)
        self.directives: List[dict] = []
        logger.info("💡 MockGadgetOutput initialized")

    def apply_directive(self, directive: dict) -> None:
        self.directives.append(directive)
        directive_type = directive.get("type")
        if directive_type == SET_LIGHT:
            params = directive.get("parameters", {})
            color = dominant_color(params.get("animations", []))
            targets = directive.get("targetGadgets") or ["all"]
            logger.info(
                f"💡 [MOCK GADGET] SetLight[{params.get('triggerEvent')}] "
                f"#{color} -> {', '.join(targets)}"
            )
        else:
            logger.info(f"🎮 [MOCK GADGET] {directive_type}")
