from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class SkillMode(Enum):
    """Fase corrente della sessione"""
    ROLL_CALL = "roll_call"
    PLAY = "play"
    EXIT = "exit"


class DeviceRoster:
    """
    Mappa ordinata ruolo (1..N) -> device id.

    Unico punto di modifica: enroll(). Il conteggio dei dispositivi registrati
    è derivato dagli slot assegnati, quindi non può divergere dalla mappa.
    """

    def __init__(self):
        self._slots: Dict[int, str] = {}

    def enroll(self, ordinal: int, device_id: str) -> bool:
        """
        Assegna device_id al ruolo ordinal.

        Returns:
            True se assegnato; False se ordinal non è il successivo atteso
            o se il device è già registrato (nessuna modifica).
        """
        if not device_id:
            return False
        if ordinal != len(self) + 1:
            return False
        if device_id in self:
            return False
        self._slots[ordinal] = device_id
        return True

    def clear(self) -> None:
        self._slots = {}

    def role_of(self, device_id: str) -> Optional[int]:
        for ordinal, assigned in self._slots.items():
            if assigned == device_id:
                return ordinal
        return None

    def __contains__(self, device_id) -> bool:
        return device_id in self._slots.values()

    def __len__(self) -> int:
        return len(self._slots)

    @property
    def count(self) -> int:
        return len(self)

    @property
    def device_ids(self) -> List[str]:
        """Device id in ordine di ruolo"""
        return [self._slots[ordinal] for ordinal in sorted(self._slots)]

    def __repr__(self):
        return f"DeviceRoster({self.device_ids})"


@dataclass
class ScoreEntry:
    device_id: str
    color: str
    score: int = 0


@dataclass
class Scoreboard:
    """
    Tabellone del round corrente: una entry per dispositivo registrato.
    Le viste parallele (device_ids, colors, scores) hanno sempre la stessa lunghezza.
    """
    entries: List[ScoreEntry] = field(default_factory=list)
    presses_scored: int = 0

    @classmethod
    def fresh(cls, device_ids: List[str], colors: List[str]) -> "Scoreboard":
        if len(device_ids) != len(colors):
            raise ValueError(
                f"Scoreboard needs one color per device, got "
                f"{len(device_ids)} devices and {len(colors)} colors"
            )
        return cls(entries=[ScoreEntry(d, c) for d, c in zip(device_ids, colors)])

    @property
    def device_ids(self) -> List[str]:
        return [e.device_id for e in self.entries]

    @property
    def colors(self) -> List[str]:
        return [e.color for e in self.entries]

    @property
    def scores(self) -> List[int]:
        return [e.score for e in self.entries]

    def entry_for(self, device_id: str) -> Optional[ScoreEntry]:
        for entry in self.entries:
            if entry.device_id == device_id:
                return entry
        return None

    def to_record(self, round_number: int) -> dict:
        """Formato persistito tra sessioni"""
        return {
            "round": round_number,
            "players": [{"color": e.color, "score": e.score} for e in self.entries],
        }


@dataclass
class SessionState:
    """
    Stato di una singola conversazione.
    Vive esattamente quanto la sessione: è l'unico canale tra roll call e gioco.
    """
    session_id: str
    user_id: Optional[str] = None
    mode: SkillMode = SkillMode.ROLL_CALL
    roster: DeviceRoster = field(default_factory=DeviceRoster)
    roll_call_complete: bool = False
    pending_input_handler_id: Optional[str] = None
    scoreboard: Optional[Scoreboard] = None
    expecting_end_confirmation: bool = False
    round_number: int = 0
    round_active: bool = False

    @property
    def registered_count(self) -> int:
        return self.roster.count


@dataclass
class RequestContext:
    """
    Contesto di una singola richiesta: accumula output e direttive.
    Creato per ogni evento in ingresso e scartato dopo l'assemblaggio della risposta.
    """
    request_id: str
    input_events: List[dict] = field(default_factory=list)
    output_speech: List[str] = field(default_factory=list)
    reprompt: List[str] = field(default_factory=list)
    directives: list = field(default_factory=list)
    open_microphone: bool = False
    end_session: bool = False
    scoreboard_saves: List[dict] = field(default_factory=list)

    def say(self, *lines: str) -> None:
        self.output_speech.extend(lines)

    def add_directive(self, command) -> None:
        self.directives.append(command)
