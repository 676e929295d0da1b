"""
Follow-on actions triggered from successful runs.
"""

from .agent_runner import SideEffectTrigger, AgentRunnerClient
from .dispatcher import ActionDispatcher

__all__ = ["SideEffectTrigger", "AgentRunnerClient", "ActionDispatcher"]
