"""
Output Adapters (Secondary Adapters)
Adattatori che eseguono azioni nel mondo esterno in risposta agli eventi.
"""

from .console_output import ConsoleOutput, MockConsoleOutput
from .gadget_output import GPIOGadgetOutput, MockGadgetOutput
from .pipe_output import PipeOutputAdapter
from .scoreboard_output import MockScoreboardOutput, ScoreboardOutput

__all__ = [
    'ConsoleOutput',
    'MockConsoleOutput',
    'GPIOGadgetOutput',
    'MockGadgetOutput',
    'PipeOutputAdapter',
    'ScoreboardOutput',
    'MockScoreboardOutput'
]
