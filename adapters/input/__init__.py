"""
Input Adapters (Primary Adapters)
Adattatori che ricevono richieste dal mondo esterno e le trasformano in eventi.
"""

from .keyboard_input import KeyboardInput
from .pipe_input import PipeInputAdapter

__all__ = [
    'KeyboardInput',
    'PipeInputAdapter'
]
