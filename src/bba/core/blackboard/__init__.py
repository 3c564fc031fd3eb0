"""Blackboard — token-bounded knowledge store and its persistence."""

from bba.core.blackboard.backend import BlackboardBackend, FileBackend
from bba.core.blackboard.blackboard import Blackboard
from bba.core.blackboard.models import BlackboardData, Section, SessionInfo, UpdateResult

__all__ = [
    "Blackboard",
    "BlackboardBackend",
    "BlackboardData",
    "FileBackend",
    "Section",
    "SessionInfo",
    "UpdateResult",
]
