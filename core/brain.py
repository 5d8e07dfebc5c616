"""
Game Brain - Logica di business pura
Smista ogni evento in ingresso all'unico handler competente (modalità + nome evento).
Zero dipendenze da I/O, hardware, code.
"""

import logging
import random
import uuid
from typing import Callable, Optional

from . import animations
from .commands import SetLight
from .events import (
    BUTTON_DOWN_EVENT, CHECK_IN_EVENTS, TIMEOUT_EVENT,
    Event, InputEventType,
)
from .gameplay import RoundController
from .rollcall import RollCallController
from .session_store import SessionStore
from .state import RequestContext, SessionState, SkillMode

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"

ScoreboardLoader = Callable[[str], Optional[dict]]


class GameBrain:
    """
    Cervello della skill - Logica pura.

    Input: Event di input
    Output: RequestContext popolato (testo, reprompt, comandi, microfono)

    NON SA NULLA DI:
    - Code
    - Adapter
    - Formato di trasporto delle direttive
    - Backend di persistenza (riceve solo un loader)
    """

    def __init__(
        self,
        config: dict,
        sessions: Optional[SessionStore] = None,
        scoreboard_loader: Optional[ScoreboardLoader] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            config: Sezione 'game' della configurazione
            sessions: Store delle sessioni (default: nuovo store in memoria)
            scoreboard_loader: user_id -> record dell'ultima sessione, o None
            rng: Generatore casuale per i colori (iniettabile per i test)
        """
        self.config = config
        self.sessions = sessions or SessionStore()
        self.scoreboard_loader = scoreboard_loader

        self.rollcall = RollCallController(config)
        self.rounds = RoundController(config, rng=rng)
        self.launch_timeout_ms = int(config["rollcall"].get("launch_timeout_ms", self.rollcall.timeout_ms))

        logger.info(
            f"🧠 GameBrain initialized (required_devices={self.rollcall.required_devices}, "
            f"round_timeout={self.rounds.timeout_ms}ms)"
        )

    def process_event(self, input_event: Event) -> RequestContext:
        """
        METODO PRINCIPALE: Processa un evento di input.

        Returns:
            RequestContext sempre popolato; nessun errore arriva al chiamante.
        """
        metadata = input_event.metadata or {}
        ctx = RequestContext(request_id=metadata.get("request_id") or str(uuid.uuid4()))
        session_id = metadata.get("session_id") or DEFAULT_SESSION_ID

        try:
            if input_event.type == InputEventType.LAUNCH:
                self._handle_launch(session_id, metadata.get("user_id"), ctx)

            elif input_event.type == InputEventType.SESSION_ENDED:
                self._handle_session_ended(session_id, ctx)

            elif input_event.type == InputEventType.SHUTDOWN:
                logger.info("Shutdown event received by brain")

            else:
                session = self.sessions.get(session_id)
                if session is None:
                    self._handle_missing_session(input_event, session_id, metadata, ctx)
                elif input_event.type == InputEventType.GADGET_EVENT:
                    self._handle_gadget_event(session, input_event, ctx)
                elif input_event.type == InputEventType.YES:
                    self._handle_yes(session, ctx)
                elif input_event.type == InputEventType.NO:
                    self._handle_no(session, ctx)
                elif input_event.type == InputEventType.START_ROUND:
                    self._handle_start_round(session, ctx)
                elif input_event.type == InputEventType.STOP:
                    self._handle_goodbye(session, ctx)
                elif input_event.type == InputEventType.HELP:
                    self._help(session, ctx)
                else:
                    logger.warning(f"Unhandled event type: {input_event.type}")

        except KeyboardInterrupt:
            logger.info("Brain interrupted by user")
            raise
        except Exception as e:
            logger.error(f"Brain processing error for event {input_event.type}: {e}", exc_info=True)
            ctx = RequestContext(request_id=ctx.request_id)
            ctx.say("Sorry, something went wrong. Please try again.")
            ctx.open_microphone = True

        return ctx

    # ===== SESSIONE =====

    def _handle_launch(self, session_id: str, user_id: Optional[str], ctx: RequestContext) -> None:
        session = self.sessions.create(session_id, user_id)
        logger.info(f"🚀 New session {session_id} (user={user_id})")

        ctx.say("Welcome to the Color Crash skill.")
        previous = self._load_previous(user_id)
        if previous:
            best = max(previous["players"], key=lambda p: p.get("score", 0))
            ctx.say(
                f"Last time, the {best.get('color')} player won "
                f"with {best.get('score', 0)} points."
            )
        ctx.say(f"Press each of your {self.rollcall.required_devices} buttons once to check in.")
        self.rollcall.start(session, ctx, timeout_ms=self.launch_timeout_ms)

    def _handle_session_ended(self, session_id: str, ctx: RequestContext) -> None:
        session = self.sessions.end(session_id)
        if session is None:
            return
        self._queue_scoreboard_save(session, ctx)
        logger.info(f"👋 Session {session_id} ended")

    def _handle_missing_session(self, input_event: Event, session_id: str,
                                metadata: dict, ctx: RequestContext) -> None:
        if input_event.type == InputEventType.GADGET_EVENT:
            logger.warning(f"Gadget event for unknown session {session_id}, ignored")
        elif input_event.type == InputEventType.STOP:
            ctx.say("Good Bye!")
            ctx.end_session = True
        else:
            self._handle_launch(session_id, metadata.get("user_id"), ctx)

    def _load_previous(self, user_id: Optional[str]) -> Optional[dict]:
        if not user_id or not self.scoreboard_loader:
            return None
        try:
            record = self.scoreboard_loader(user_id)
        except Exception as e:
            logger.error(f"❌ Failed to load scoreboard for {user_id}: {e}", exc_info=True)
            return None
        if record and record.get("players"):
            return record
        return None

    # ===== HARDWARE =====

    def _handle_gadget_event(self, session: SessionState, input_event: Event, ctx: RequestContext) -> None:
        """Smista l'evento hardware in base a modalità e nome evento"""
        content = input_event.content or {}
        name = content.get("name")
        ctx.input_events = list(content.get("input_events") or [])

        originating = (input_event.metadata or {}).get("originating_request_id")
        if originating and originating != session.pending_input_handler_id:
            logger.info(
                f"🕰️  Stale event '{name}' from window {originating} ignored "
                f"(current: {session.pending_input_handler_id})"
            )
            return

        if session.mode == SkillMode.ROLL_CALL:
            if name in CHECK_IN_EVENTS:
                self.rollcall.handle_check_in(session, ctx, CHECK_IN_EVENTS[name])
                if session.mode == SkillMode.PLAY and self.rollcall.auto_start_round:
                    self.rounds.start_round(session, ctx)
                return
            if name == TIMEOUT_EVENT:
                if not session.expecting_end_confirmation:
                    self.rollcall.handle_timeout(session, ctx)
                return

        elif session.mode == SkillMode.PLAY and session.round_active:
            if name == BUTTON_DOWN_EVENT:
                self.rounds.handle_button_pressed(session, ctx)
                return
            if name == TIMEOUT_EVENT:
                self.rounds.handle_timeout(session, ctx)
                return

        logger.warning(f"Gadget event '{name}' not expected in mode {session.mode.value}, ignored")

    # ===== INTENT VOCALI =====

    def _handle_yes(self, session: SessionState, ctx: RequestContext) -> None:
        if not session.expecting_end_confirmation:
            self._help(session, ctx)
            return

        if session.mode == SkillMode.ROLL_CALL:
            ctx.say("Ok. Press each of your buttons once to check in.")
            self.rollcall.start(session, ctx)
        elif session.mode == SkillMode.EXIT:
            self.rounds.start_round(session, ctx)
        else:
            self._help(session, ctx)

    def _handle_no(self, session: SessionState, ctx: RequestContext) -> None:
        if not session.expecting_end_confirmation:
            self._help(session, ctx)
            return
        self._handle_goodbye(session, ctx)

    def _handle_start_round(self, session: SessionState, ctx: RequestContext) -> None:
        ready = session.roll_call_complete and not session.round_active
        if ready and session.mode in (SkillMode.PLAY, SkillMode.EXIT):
            self.rounds.start_round(session, ctx)
        else:
            self._help(session, ctx)

    def _handle_goodbye(self, session: SessionState, ctx: RequestContext) -> None:
        """Fine skill: saluto, animazioni di default, salvataggio punteggi"""
        ctx.say("Good Bye!")
        ctx.add_directive(SetLight.idle(animations.solid(1, "black", 100)))
        ctx.add_directive(SetLight.button_down(animations.DEFAULT_ANIMATIONS["button_down"]))
        ctx.add_directive(SetLight.button_up(animations.DEFAULT_ANIMATIONS["button_up"]))

        session.mode = SkillMode.EXIT
        session.expecting_end_confirmation = False
        self._queue_scoreboard_save(session, ctx)
        self.sessions.end(session.session_id)

        ctx.open_microphone = False
        ctx.end_session = True

    def _help(self, session: SessionState, ctx: RequestContext) -> None:
        if session.roll_call_complete:
            ctx.say("Say start to play a round, or stop to exit.")
        else:
            ctx.say("Press each of your buttons once to check in, or say stop to exit.")
        ctx.reprompt = ["What would you like to do?"]
        ctx.open_microphone = True

    @staticmethod
    def _queue_scoreboard_save(session: SessionState, ctx: RequestContext) -> None:
        if session.scoreboard is None or not session.user_id:
            return
        ctx.scoreboard_saves.append({
            "user_id": session.user_id,
            "record": session.scoreboard.to_record(session.round_number),
        })
