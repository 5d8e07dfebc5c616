"""
Roll Call - Registrazione dei bottoni
Ogni bottone riceve un ruolo stabile (1..N) nell'ordine della prima pressione.
"""

import logging
from typing import Dict, List, Optional

from . import animations
from .commands import SetLight, StartInputHandler
from .state import RequestContext, SessionState, SkillMode

logger = logging.getLogger(__name__)

MIN_DEVICES = 2
MAX_DEVICES = 4

# Prefissi usati dai proxy e dai nomi evento ("forth" è il nome evento esposto)
ORDINALS = ["first", "second", "third", "forth"]


# Animazioni usate durante il roll call
ROLL_CALL_ANIMATIONS = {
    "roll_call_complete": animations.fade_in(1, "green", 5000),
    "check_in_idle": animations.solid(1, "green", 8000),
    "check_in_down": animations.solid(1, "green", 1000),
    "check_in_up": animations.solid(1, "white", 4000),
    "timeout": animations.fade("black", 1000),
}


def proxy_name(ordinal: int) -> str:
    return f"{ORDINALS[ordinal - 1]}_button"


def check_in_event_name(ordinal: int) -> str:
    return f"{ORDINALS[ordinal - 1]}_button_checked_in"


def build_recognizers(required_devices: int) -> Dict[str, dict]:
    """
    Un recognizer per ordinale: il bottone n premuto dopo i bottoni 1..n-1.
    I proxy permettono di riferirsi a bottoni non ancora noti.
    """
    recognizers = {}
    for ordinal in range(1, required_devices + 1):
        pattern = [
            {"gadgetIds": [proxy_name(i)], "action": "down"}
            for i in range(1, ordinal + 1)
        ]
        recognizers[f"roll_call_{proxy_name(ordinal)}_recognizer"] = {
            "type": "match",
            "fuzzy": ordinal > 1,
            "anchor": "end",
            "pattern": pattern,
        }
    return recognizers


def build_events(required_devices: int) -> Dict[str, dict]:
    """
    Eventi nominati riportati alla skill. L'evento dell'ultimo ordinale
    richiesto chiude la finestra di input.
    """
    events = {}
    for ordinal in range(1, required_devices + 1):
        events[check_in_event_name(ordinal)] = {
            "meets": [f"roll_call_{proxy_name(ordinal)}_recognizer"],
            "reports": "matches",
            "shouldEndInputHandler": ordinal == required_devices,
            "maximumInvocations": 1,
        }
    events["timeout"] = {
        "meets": ["timed out"],
        "reports": "history",
        "shouldEndInputHandler": True,
    }
    return events


class RollCallController:
    """
    Protocollo di registrazione dei bottoni.

    NOT_STARTED -> AWAITING_DEVICES -> COMPLETE (mode=PLAY)
    Il timeout lascia la sessione in AWAITING_DEVICES in attesa di conferma.
    """

    def __init__(self, config: dict):
        """
        Args:
            config: Sezione 'game' della configurazione (rollcall, audio)

        Raises:
            ValueError: Se required_devices è fuori dall'intervallo supportato
        """
        rollcall_config = config["rollcall"]
        self.required_devices = int(rollcall_config["required_devices"])
        if not MIN_DEVICES <= self.required_devices <= MAX_DEVICES:
            raise ValueError(
                f"required_devices must be between {MIN_DEVICES} and {MAX_DEVICES}, "
                f"got {self.required_devices}"
            )
        self.timeout_ms = int(rollcall_config["timeout_ms"])
        self.auto_start_round = bool(rollcall_config.get("auto_start_round", True))
        self.waiting_audio = config.get("audio", {}).get("waiting_audio", "")

        self.recognizers = build_recognizers(self.required_devices)
        self.events = build_events(self.required_devices)

    def start(self, session: SessionState, ctx: RequestContext,
              timeout_ms: Optional[int] = None) -> RequestContext:
        """Avvia (o riavvia) il roll call. Non fallisce mai."""
        timeout = timeout_ms if timeout_ms is not None else self.timeout_ms
        logger.info(f"📋 Roll call started (session={session.session_id}, timeout={timeout}ms)")

        ctx.add_directive(StartInputHandler(
            timeout_ms=timeout,
            recognizers=self.recognizers,
            events=self.events,
            proxies=[proxy_name(i) for i in range(1, self.required_devices + 1)],
        ))
        ctx.add_directive(SetLight.button_down(ROLL_CALL_ANIMATIONS["check_in_down"]))
        ctx.add_directive(SetLight.button_up(ROLL_CALL_ANIMATIONS["check_in_up"]))

        session.mode = SkillMode.ROLL_CALL
        session.roster.clear()
        session.roll_call_complete = False
        session.expecting_end_confirmation = False
        session.scoreboard = None
        session.round_active = False
        session.pending_input_handler_id = ctx.request_id

        self._say_waiting(ctx)
        ctx.open_microphone = False
        return ctx

    def handle_check_in(self, session: SessionState, ctx: RequestContext,
                        ordinal: int) -> RequestContext:
        """
        Registra il bottone che ha soddisfatto il recognizer `ordinal`.

        Eventi fuori ordine o duplicati vengono scartati in silenzio.
        """
        ctx.open_microphone = False

        if session.roll_call_complete or ordinal > self.required_devices:
            logger.debug(f"Check-in #{ordinal} ignored: roll call not expecting it")
            return ctx

        device_id = self._reported_device(ctx.input_events, ordinal)
        if not session.roster.enroll(ordinal, device_id):
            logger.debug(
                f"Check-in #{ordinal} from {device_id} discarded "
                f"(registered={session.registered_count})"
            )
            return ctx

        logger.info(f"🔘 Button {ordinal} checked in: {device_id}")
        ctx.say(f"Hello, button {ordinal}.")
        ctx.add_directive(SetLight.idle(ROLL_CALL_ANIMATIONS["check_in_idle"], [device_id]))

        if session.registered_count == self.required_devices:
            self._complete(session, ctx)
        else:
            self._say_waiting(ctx)
        return ctx

    def handle_timeout(self, session: SessionState, ctx: RequestContext) -> RequestContext:
        """Finestra scaduta prima di raggiungere il numero richiesto di bottoni"""
        logger.info(
            f"⏰ Roll call timeout with {session.registered_count}/"
            f"{self.required_devices} buttons"
        )
        ctx.say(
            f"For this skill we need {self.required_devices} buttons.",
            "Would you like more time to press the buttons?",
        )
        ctx.reprompt = ["Say yes to go back and add buttons, or no to exit now."]

        enrolled = session.roster.device_ids
        ctx.add_directive(SetLight.idle(ROLL_CALL_ANIMATIONS["timeout"], enrolled))
        ctx.add_directive(SetLight.button_down(animations.DEFAULT_ANIMATIONS["button_down"], enrolled))
        ctx.add_directive(SetLight.button_up(animations.DEFAULT_ANIMATIONS["button_up"], enrolled))

        session.expecting_end_confirmation = True
        session.pending_input_handler_id = None
        ctx.open_microphone = True
        return ctx

    def _complete(self, session: SessionState, ctx: RequestContext) -> None:
        session.roll_call_complete = True
        session.mode = SkillMode.PLAY
        logger.info(f"✅ Roll call complete: {session.roster.device_ids}")

        ctx.say(f"Awesome. I've registered {self.required_devices} buttons.")
        enrolled = session.roster.device_ids
        ctx.add_directive(SetLight.idle(ROLL_CALL_ANIMATIONS["roll_call_complete"], enrolled))
        ctx.add_directive(SetLight.button_down(animations.DEFAULT_ANIMATIONS["button_down"]))
        ctx.add_directive(SetLight.button_up(animations.DEFAULT_ANIMATIONS["button_up"]))

        if not self.auto_start_round:
            ctx.say("Say start when you are ready to play.")
            ctx.reprompt = ["Say start to begin the first round."]
            ctx.open_microphone = True

    @staticmethod
    def _reported_device(input_events: List[dict], ordinal: int) -> Optional[str]:
        """
        Con reports='matches' il bottone n-esimo è l'evento n-esimo;
        se il payload è più corto si usa l'ultimo evento.
        """
        if not input_events:
            return None
        if len(input_events) >= ordinal:
            return input_events[ordinal - 1].get("gadgetId")
        return input_events[-1].get("gadgetId")

    def _say_waiting(self, ctx: RequestContext) -> None:
        if self.waiting_audio:
            ctx.say(self.waiting_audio)
