"""Blackboard Agent — LLM-driven exploration with a token-bounded blackboard."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from bba.agent.agent import BlackboardAgent as BlackboardAgent
    from bba.core.blackboard.blackboard import Blackboard as Blackboard

_LAZY_EXPORTS = {
    "BlackboardAgent": "bba.agent.agent",
    "Blackboard": "bba.core.blackboard.blackboard",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'bba' has no attribute {name!r}")
