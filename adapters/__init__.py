"""
Adapters - Primary e Secondary Adapters per l'architettura esagonale
"""

from .ports import InputPort, OutputPort
from .factory import AdapterFactory

from . import input
from . import output

__all__ = [
    'InputPort',
    'OutputPort',
    'AdapterFactory'
]
