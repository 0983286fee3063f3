"""Execution engine adapters."""

from uniagent.engine.base import ExecutionEngine
from uniagent.engine.dry_run import DryRunEngine
from uniagent.engine.factory import create_engine
from uniagent.engine.http import HttpExecutionEngine

__all__ = [
    "ExecutionEngine",
    "DryRunEngine",
    "HttpExecutionEngine",
    "create_engine",
]
