"""
Build graph: nodes, actions, named steps and the scheduler
"""

from .actions import Action, CommandAction, CommandRunner, FailAction, SequenceAction
from .node import BuildGraph, BuildNode, NodeKind, Step
from .scheduler import ExecutionReport, GraphScheduler, NodeState

__all__ = [
    "Action",
    "CommandAction",
    "CommandRunner",
    "FailAction",
    "SequenceAction",
    "BuildGraph",
    "BuildNode",
    "NodeKind",
    "Step",
    "ExecutionReport",
    "GraphScheduler",
    "NodeState",
]
