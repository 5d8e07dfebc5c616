"""
Animation Library - Pattern di animazione per i bottoni
Funzioni pure: (cicli, colore, durata) -> pattern opaco per il directive builder.
"""

import re
from typing import List

# Colori nominali supportati -> esadecimale RGB
COLORS = {
    "white": "FFFFFF",
    "red": "FF0000",
    "orange": "FF3300",
    "green": "00FF00",
    "dark green": "004411",
    "blue": "0000FF",
    "light blue": "00A0B0",
    "purple": "4B0098",
    "yellow": "FFD400",
    "black": "000000",
}

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def resolve_color(color: str) -> str:
    """
    Converte un colore nominale o esadecimale nel formato 'RRGGBB'.

    Raises:
        ValueError: Se il colore non è riconosciuto
    """
    if not isinstance(color, str):
        raise ValueError(f"Color must be a string, got {type(color)}")

    name = color.strip().lower()
    if name in COLORS:
        return COLORS[name]

    match = _HEX_COLOR.match(color.strip())
    if match:
        return match.group(1).upper()

    available = ", ".join(sorted(COLORS))
    raise ValueError(f"Unknown color '{color}'. Available: {available}")


def _step(duration_ms: int, color: str, blend: bool) -> dict:
    return {
        "durationMs": int(duration_ms),
        "blend": blend,
        "color": resolve_color(color),
    }


def _animation(cycles: int, sequence: List[dict]) -> list:
    return [{
        "repeat": int(cycles),
        "targetLights": ["1"],
        "sequence": sequence,
    }]


def solid(cycles: int, color: str, duration_ms: int) -> list:
    """Colore fisso per duration_ms, ripetuto cycles volte"""
    return _animation(cycles, [_step(duration_ms, color, False)])


def fade(color: str, duration_ms: int) -> list:
    """Dissolvenza dal colore corrente al colore indicato"""
    return _animation(1, [_step(duration_ms, color, True)])


def fade_in(cycles: int, color: str, duration_ms: int) -> list:
    """Dal nero al colore indicato"""
    return _animation(cycles, [
        _step(1, "black", True),
        _step(duration_ms, color, True),
    ])


def fade_out(cycles: int, color: str, duration_ms: int) -> list:
    """Dal colore indicato al nero"""
    return _animation(cycles, [
        _step(1, color, True),
        _step(duration_ms, "black", True),
    ])


def breathe(cycles: int, color: str, duration_ms: int) -> list:
    """
    Effetto "respiro": sale al colore, lo mantiene brevemente e si spegne.
    duration_ms è la durata della salita.
    """
    return _animation(cycles, [
        _step(1, "black", True),
        _step(duration_ms, color, True),
        _step(300, color, True),
        _step(300, "black", True),
    ])


# Animazioni di default dei bottoni (ripristinate a fine fase)
DEFAULT_ANIMATIONS = {
    "button_down": fade_out(1, "blue", 200),
    "button_up": solid(1, "black", 100),
}
