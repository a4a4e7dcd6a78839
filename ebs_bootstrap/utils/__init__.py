"""
Utility functions shared by the bootstrap stages.
"""

from .retry import PollResult, poll_until
from .commands import run_command, command_available

__all__ = [
    'PollResult',
    'poll_until',
    'run_command',
    'command_available',
]
