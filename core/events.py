"""
Event System - Definizioni eventi e priorità
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Optional, Union
import itertools
import time


class InputEventType(Enum):
    """Tipi di eventi in ingresso (richieste dalla piattaforma vocale)"""

    # ===== SESSIONE =====
    LAUNCH = "launch"                     # Avvio skill (nuova sessione)
    SESSION_ENDED = "session_ended"       # Fine sessione lato piattaforma

    # ===== HARDWARE =====
    GADGET_EVENT = "gadget_event"         # Evento nominato dall'input handler

    # ===== INTENT VOCALI =====
    YES = "yes"
    NO = "no"
    START_ROUND = "start_round"
    STOP = "stop"
    HELP = "help"                         # Aiuto o intent non riconosciuto

    # Sistema
    SHUTDOWN = "shutdown"


class OutputEventType(Enum):
    """Tipi di eventi in uscita verso gli output adapter"""

    SKILL_RESPONSE = "skill_response"     # Risposta completa assemblata
    GADGET_DIRECTIVE = "gadget_directive" # Singola direttiva hardware (luci/input handler)
    SAVE_SCOREBOARD = "save_scoreboard"   # Persistenza punteggi tra sessioni


EventType = Union[InputEventType, OutputEventType]

_sequence = itertools.count()


# Nomi degli eventi riportati dall'input handler hardware
CHECK_IN_EVENTS = {
    "first_button_checked_in": 1,
    "second_button_checked_in": 2,
    "third_button_checked_in": 3,
    "forth_button_checked_in": 4,
}
BUTTON_DOWN_EVENT = "button_down_event"
TIMEOUT_EVENT = "timeout"


class EventPriority(Enum):
    """
    Priorità eventi per PriorityQueue.
    Valore minore = priorità maggiore
    """
    CRITICAL = 0    # Emergenze (SHUTDOWN, fine sessione)
    HIGH = 1        # Eventi hardware e intent utente
    NORMAL = 2      # Operazioni normali
    LOW = 3         # Background tasks (persistenza)

    def __lt__(self, other):
        return self.value < other.value


@dataclass(order=True)
class Event:
    """
    Evento base del sistema.
    Usato sia per input che output.
    """

    # Priority first per PriorityQueue sorting, sequence come spareggio (FIFO)
    priority: EventPriority = field(compare=True)

    # Event data
    type: EventType = field(compare=False)
    content: Any = field(compare=False)

    # Metadata
    timestamp: float = field(default_factory=time.time, compare=False)
    source: Optional[str] = field(default=None, compare=False)
    metadata: Optional[dict] = field(default=None, compare=False)

    # Contatore di creazione
    sequence: int = field(default_factory=lambda: next(_sequence), compare=True, repr=False)

    def __repr__(self):
        content_str = str(self.content)[:50]
        if len(str(self.content)) > 50:
            content_str += "..."
        return (f"Event(type={self.type.value}, "
                f"priority={self.priority.name}, "
                f"content={content_str})")


# ===== HELPER FUNCTIONS =====

def create_input_event(
    event_type: InputEventType,
    content: Any,
    source: str,
    priority: EventPriority = EventPriority.NORMAL,
    metadata: Optional[dict] = None
) -> Event:
    """Helper per creare eventi di input"""
    return Event(
        priority=priority,
        type=event_type,
        content=content,
        source=source,
        metadata=metadata or {}
    )


def create_output_event(
    event_type: OutputEventType,
    content: Any,
    priority: EventPriority = EventPriority.NORMAL,
    metadata: Optional[dict] = None
) -> Event:
    """Helper per creare eventi di output"""
    return Event(
        priority=priority,
        type=event_type,
        content=content,
        metadata=metadata or {}
    )


def create_gadget_event(
    name: str,
    input_events: list,
    source: str,
    metadata: Optional[dict] = None
) -> Event:
    """
    Helper per creare un GADGET_EVENT.

    Args:
        name: Nome dell'evento dichiarato nell'input handler (es. 'timeout')
        input_events: Lista di eventi grezzi dei bottoni
                      ({'gadgetId', 'action', 'color', 'timestamp'})
        source: Nome dell'adapter che ha prodotto l'evento
        metadata: session_id, user_id, request_id, originating_request_id
    """
    return create_input_event(
        InputEventType.GADGET_EVENT,
        {"name": name, "input_events": list(input_events or [])},
        source=source,
        priority=EventPriority.HIGH,
        metadata=metadata
    )
