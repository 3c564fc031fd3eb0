"""Exploration tools for directory listing, file reading, search, blackboard writes."""

from bba.tools.definitions import FILE_READ, GREP_SEARCH, LIST_DIR, TOOLS, UPDATE_BLACKBOARD
from bba.tools.executor import ToolExecutor
from bba.tools.models import ToolOutcome

__all__ = [
    "FILE_READ",
    "GREP_SEARCH",
    "LIST_DIR",
    "TOOLS",
    "UPDATE_BLACKBOARD",
    "ToolExecutor",
    "ToolOutcome",
]
