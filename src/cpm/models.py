"""
Data models for CPM calculations.

Defines dataclasses for input tasks, scheduled tasks, and analysis results.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class Task:
    """Represents a task as supplied by the task-management layer."""

    id: str
    title: str
    duration: Number
    dependencies: tuple[str, ...] = ()

    def __post_init__(self):
        if isinstance(self.dependencies, str):
            raise TypeError(
                f"Task {self.id} dependencies must be a sequence of ids, not a string"
            )
        # Dependencies behave as a set; keep first-seen order for determinism
        deps = tuple(dict.fromkeys(str(d) for d in self.dependencies))
        object.__setattr__(self, 'dependencies', deps)

    def is_milestone(self) -> bool:
        """Check if task is a milestone (zero duration)."""
        return self.duration == 0


@dataclass(frozen=True)
class ScheduledTask:
    """A task annotated with its CPM dates and slack."""

    id: str
    title: str
    duration: Number
    dependencies: tuple[str, ...]

    early_start: Number
    early_finish: Number
    late_start: Number
    late_finish: Number
    slack: Number
    is_critical: bool

    def to_record(self) -> dict:
        """Flat dict representation (dependencies as a list)."""
        record = asdict(self)
        record['dependencies'] = list(self.dependencies)
        return record


@dataclass
class ScheduleResult:
    """Results from a CPM calculation."""

    tasks: list[ScheduledTask]
    critical_path: list[str]       # task ids ordered by early start
    project_duration: Number
    critical_tasks: list[ScheduledTask]

    def get_task(self, task_id: str) -> Optional[ScheduledTask]:
        """Get a scheduled task by id."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_tasks_by_slack(self, max_slack: Number = None) -> list[ScheduledTask]:
        """Get tasks sorted by slack (ascending)."""
        tasks = self.tasks
        if max_slack is not None:
            tasks = [t for t in tasks if t.slack <= max_slack]
        return sorted(tasks, key=lambda t: t.slack)

    def to_records(self) -> list[dict]:
        return [t.to_record() for t in self.tasks]

    def to_dict(self) -> dict:
        """JSON-ready representation of the whole result."""
        return {
            'tasks': self.to_records(),
            'critical_path': list(self.critical_path),
            'project_duration': self.project_duration,
            'critical_tasks': [t.to_record() for t in self.critical_tasks],
        }


@dataclass
class TaskImpactResult:
    """Results from single task what-if analysis."""

    task_id: str
    task_title: str
    duration_delta: Number
    original_duration: Number
    new_duration: Number
    original_project_duration: Number
    new_project_duration: Number
    slip: Number
    affected_task_ids: list[str]
    original_critical_path: list[str]
    new_critical_path: list[str]
    critical_path_changed: bool

    def get_slip_summary(self) -> str:
        """Get human-readable slip summary."""
        if self.slip > 0:
            return f"Project finish slips by {self.slip:g}"
        if self.slip < 0:
            return f"Project finish improves by {-self.slip:g}"
        return "No impact on project finish"


@dataclass
class CriticalPathResult:
    """Results from critical path analysis."""

    critical_path: list[ScheduledTask]
    near_critical_tasks: list[ScheduledTask]
    slack_distribution: dict[str, int]  # slack bucket -> count
    project_duration: Number
    near_critical_threshold: Number
    total_tasks: int
    unresolved_dependencies: dict[str, list[str]] = field(default_factory=dict)

    def get_critical_path_length(self) -> int:
        """Number of tasks on critical path."""
        return len(self.critical_path)

    def get_risk_summary(self) -> str:
        """Get summary of schedule risk."""
        critical = len(self.critical_path)
        near_critical = len(self.near_critical_tasks)
        return (f"{critical} critical tasks, {near_critical} near-critical "
                f"(slack <= {self.near_critical_threshold:g})")
