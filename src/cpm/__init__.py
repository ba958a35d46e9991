"""
CPM (Critical Path Method) scheduling for task dependency graphs.

This module provides:
- Task network construction with dependency lookups
- Topological ordering with cycle detection
- Forward/backward pass CPM calculations
- Slack and critical path identification
- Near-critical and what-if analysis helpers
"""

from .models import Task, ScheduledTask, ScheduleResult, CriticalPathResult, TaskImpactResult
from .network import (
    TaskNetwork,
    ScheduleError,
    CyclicDependencyError,
    UnresolvedDependencyError,
    InvalidTaskError,
)
from .engine import CPMEngine, MissingDependencyPolicy, compute_schedule
from .analysis import analyze_schedule, analyze_critical_path, analyze_task_impact, print_critical_path_report
from .loader import tasks_from_records, load_tasks, schedule_to_dataframe, write_schedule_csv, example_milestone

__all__ = [
    # Models
    'Task',
    'ScheduledTask',
    'ScheduleResult',
    'CriticalPathResult',
    'TaskImpactResult',
    # Errors
    'ScheduleError',
    'CyclicDependencyError',
    'UnresolvedDependencyError',
    'InvalidTaskError',
    # Core
    'TaskNetwork',
    'CPMEngine',
    'MissingDependencyPolicy',
    'compute_schedule',
    # Analysis
    'analyze_schedule',
    'analyze_critical_path',
    'analyze_task_impact',
    'print_critical_path_report',
    # Loading / export
    'tasks_from_records',
    'load_tasks',
    'schedule_to_dataframe',
    'write_schedule_csv',
    'example_milestone',
]
