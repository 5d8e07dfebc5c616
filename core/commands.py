"""
Gadget command definitions for Brain → Directive Builder control flow.

Commands are semantic instructions that the controllers append to the request
context. The directive builder (adapter side) turns each of them into the
transport-ready directive required by the hardware-control channel.
Order of commands in the context is the execution order on the device.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class LightTrigger(str, Enum):
    """
    Momento in cui un'animazione viene applicata al bottone.

    - NONE: animazione "idle", parte subito
    - BUTTON_DOWN: alla pressione
    - BUTTON_UP: al rilascio
    """
    NONE = "none"
    BUTTON_DOWN = "buttonDown"
    BUTTON_UP = "buttonUp"


@dataclass
class StartInputHandler:
    """
    Apre una finestra di raccolta eventi hardware.

    recognizers/events seguono lo schema della finestra: i recognizer sono
    pattern sulle azioni dei bottoni, gli eventi mappano il soddisfacimento
    dei recognizer a callback nominate che il core riceverà in seguito.
    """
    timeout_ms: int
    recognizers: dict
    events: dict
    proxies: List[str] = field(default_factory=list)


@dataclass
class SetLight:
    """
    Imposta un'animazione su uno o più bottoni.

    target_gadgets vuoto significa "tutti i bottoni collegati".
    """
    trigger: LightTrigger
    animations: list
    target_gadgets: List[str] = field(default_factory=list)

    @classmethod
    def idle(cls, animations: list, targets: Optional[List[str]] = None) -> "SetLight":
        return cls(LightTrigger.NONE, animations, list(targets or []))

    @classmethod
    def button_down(cls, animations: list, targets: Optional[List[str]] = None) -> "SetLight":
        return cls(LightTrigger.BUTTON_DOWN, animations, list(targets or []))

    @classmethod
    def button_up(cls, animations: list, targets: Optional[List[str]] = None) -> "SetLight":
        return cls(LightTrigger.BUTTON_UP, animations, list(targets or []))
