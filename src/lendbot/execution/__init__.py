"""Execution layer -- live and dry-run executors for allocator actions."""

from lendbot.execution.dry_run_executor import DryRunExecutor
from lendbot.execution.executor import Executor
from lendbot.execution.live_executor import LiveExecutor

__all__ = ["DryRunExecutor", "Executor", "LiveExecutor"]
