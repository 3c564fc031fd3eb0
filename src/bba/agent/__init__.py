"""Agent layer: loop, prompts, profiles, tool dispatch and run orchestration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bba.agent.agent import BlackboardAgent as BlackboardAgent
    from bba.agent.events import AgentObserver as AgentObserver
    from bba.agent.loop import AgentLoop as AgentLoop
    from bba.agent.loop import LoopState as LoopState
    from bba.agent.profiles import AnalysisProfile as AnalysisProfile
    from bba.agent.profiles import ProfileRegistry as ProfileRegistry

__all__ = [
    "AgentLoop",
    "AgentObserver",
    "AnalysisProfile",
    "BlackboardAgent",
    "LoopState",
    "ProfileRegistry",
]

_LAZY_EXPORTS = {
    "BlackboardAgent": "bba.agent.agent",
    "AgentObserver": "bba.agent.events",
    "AgentLoop": "bba.agent.loop",
    "LoopState": "bba.agent.loop",
    "AnalysisProfile": "bba.agent.profiles",
    "ProfileRegistry": "bba.agent.profiles",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'bba.agent' has no attribute {name!r}")
