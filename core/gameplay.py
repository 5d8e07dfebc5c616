"""
Game Play - Round a tempo
Colori casuali per bottone, raccolta pressioni, punteggio e riepilogo.
"""

import logging
import random
from typing import List, Optional

from . import animations
from .commands import SetLight, StartInputHandler
from .state import RequestContext, Scoreboard, SessionState, SkillMode

logger = logging.getLogger(__name__)

ROUND_COLORS = ["blue", "red", "green", "yellow"]
MAX_PLAYERS = len(ROUND_COLORS)

# Recognizer che scatta per qualsiasi bottone premuto: la distinzione
# tra bottoni avviene sul payload dell'evento, non sul recognizer.
BUTTON_DOWN_RECOGNIZER = {
    "button_down_recognizer": {
        "type": "match",
        "fuzzy": False,
        "anchor": "end",
        "pattern": [{"action": "down"}],
    }
}

# La finestra non si chiude alla prima pressione: solo il timeout la termina.
ROUND_EVENTS = {
    "button_down_event": {
        "meets": ["button_down_recognizer"],
        "reports": "matches",
        "shouldEndInputHandler": False,
    },
    "timeout": {
        "meets": ["timed out"],
        "reports": "history",
        "shouldEndInputHandler": True,
    },
}


class RoundController:
    """
    Protocollo del round.

    IDLE -> COLLECTING -> SCORED, con SCORED -> COLLECTING se l'utente continua.
    """

    def __init__(self, config: dict, rng: Optional[random.Random] = None):
        """
        Args:
            config: Sezione 'game' della configurazione (round, scoring, audio)
            rng: Generatore casuale (iniettabile per i test)
        """
        round_config = config["round"]
        self.timeout_ms = int(round_config["timeout_ms"])
        self.clamp_at_zero = bool(config.get("scoring", {}).get("clamp_at_zero", False))
        self.waiting_audio = config.get("audio", {}).get("waiting_audio", "")
        self.rng = rng or random.Random()

    def assign_colors(self, count: int) -> List[str]:
        """Permutazione casuale uniforme dei colori, lunga quanto i giocatori"""
        return self.rng.sample(ROUND_COLORS, count)

    def start_round(self, session: SessionState, ctx: RequestContext) -> RequestContext:
        """Nuovo round: colori rimescolati, tabellone azzerato, finestra aperta"""
        device_ids = session.roster.device_ids[-MAX_PLAYERS:]
        colors = self.assign_colors(len(device_ids))

        session.scoreboard = Scoreboard.fresh(device_ids, colors)
        session.round_number += 1
        session.round_active = True
        session.mode = SkillMode.PLAY
        session.expecting_end_confirmation = False

        ctx.add_directive(StartInputHandler(
            timeout_ms=self.timeout_ms,
            recognizers=BUTTON_DOWN_RECOGNIZER,
            events=ROUND_EVENTS,
        ))
        session.pending_input_handler_id = ctx.request_id

        logger.info(
            f"🎲 Round {session.round_number} started: "
            f"{dict(zip(device_ids, colors))}"
        )

        for device_id, color in zip(device_ids, colors):
            ctx.add_directive(SetLight.idle(animations.breathe(30, color, 450), [device_id]))
        for device_id, color in zip(device_ids, colors):
            ctx.add_directive(SetLight.button_down(animations.solid(1, color, 2000), [device_id]))
        for device_id, color in zip(device_ids, colors):
            ctx.add_directive(SetLight.button_up(animations.solid(1, color, 200), [device_id]))

        ctx.say("Ok. Each player, hit your color.")
        if self.waiting_audio:
            ctx.say(self.waiting_audio)
        ctx.open_microphone = False
        return ctx

    def award_for(self, scoreboard: Scoreboard) -> int:
        """Punti della prossima pressione: i primi a premere prendono di più"""
        award = len(scoreboard.entries) - scoreboard.presses_scored
        if self.clamp_at_zero:
            return max(award, 0)
        return award

    def handle_button_pressed(self, session: SessionState, ctx: RequestContext) -> RequestContext:
        """Assegna i punti alla pressione riportata nel payload"""
        ctx.open_microphone = False
        button_id = ctx.input_events[0].get("gadgetId") if ctx.input_events else None

        scoreboard = session.scoreboard
        role = session.roster.role_of(button_id) if button_id else None
        entry = scoreboard.entry_for(button_id) if (scoreboard and role) else None

        if entry is None:
            logger.warning(f"Button event received for unregistered gadget: {button_id}")
            ctx.say(
                "Unregistered button.",
                "Only buttons registered during roll call are in play.",
            )
        else:
            award = self.award_for(scoreboard)
            entry.score += award
            scoreboard.presses_scored += 1
            logger.info(f"🔘 Button {role} ({entry.color}) pressed: +{award} -> {entry.score}")
            ctx.say(f"Button {role}.")

        if self.waiting_audio:
            ctx.say(self.waiting_audio)
        return ctx

    def handle_timeout(self, session: SessionState, ctx: RequestContext) -> RequestContext:
        """Fine round: riepilogo punteggi e richiesta di conferma"""
        ctx.say("Round over. The scores are as follows:")
        scoreboard = session.scoreboard or Scoreboard()
        for entry in scoreboard.entries:
            ctx.say(f"{entry.color} player won {entry.score} points.")
        ctx.say("Would you like to play another round?")
        ctx.reprompt = ["Say yes to keep playing, or no to exit."]

        enrolled = session.roster.device_ids
        ctx.add_directive(SetLight.idle(animations.fade_out(1, "white", 2000), enrolled))
        ctx.add_directive(SetLight.button_down(animations.DEFAULT_ANIMATIONS["button_down"], enrolled))
        ctx.add_directive(SetLight.button_up(animations.DEFAULT_ANIMATIONS["button_up"], enrolled))

        session.expecting_end_confirmation = True
        session.mode = SkillMode.EXIT
        session.round_active = False
        session.pending_input_handler_id = None

        logger.info(f"🏁 Round {session.round_number} over: {scoreboard.scores}")
        ctx.open_microphone = True
        return ctx
