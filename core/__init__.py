"""
Color Crash Core - Hexagonal Architecture
Logica di gioco pura, zero dipendenze esterne.
"""

from .events import (
    Event, EventType, EventPriority, InputEventType, OutputEventType,
    create_input_event, create_output_event, create_gadget_event
)
from .event_router import EventRouter
from .brain import GameBrain
from .state import RequestContext, SessionState, SkillMode

__all__ = [
    'Event',
    'EventType',
    'EventPriority',
    'InputEventType',
    'OutputEventType',
    'create_input_event',
    'create_output_event',
    'create_gadget_event',
    'EventRouter',
    'GameBrain',
    'RequestContext',
    'SessionState',
    'SkillMode'
]
