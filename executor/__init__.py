"""
ORE Automation Executor Package

Async executor that checkpoints and redeploys delegated ORE automation
accounts every tick.
"""
from executor.decision import Action, ActionKind, decide, select_squares
from executor.models.state import ExecutorState
from executor.scheduler import TickScheduler

__all__ = [
    "Action",
    "ActionKind",
    "decide",
    "select_squares",
    "ExecutorState",
    "TickScheduler",
]
