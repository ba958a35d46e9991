"""
CPM (Critical Path Method) Engine.

Implements forward and backward pass calculations over a TaskNetwork in
plain numeric time units (no calendar arithmetic).
"""

import logging
import math
from enum import Enum
from typing import Iterable, Optional, Union

from src.config.settings import settings
from .models import Task, ScheduledTask, ScheduleResult, Number
from .network import TaskNetwork, UnresolvedDependencyError

logger = logging.getLogger(__name__)

# Late starts this close to the early start are rounding residue from
# fractional durations and are pinned to it
SNAP_REL_TOL = 1e-9
SNAP_ABS_TOL = 1e-9


class MissingDependencyPolicy(str, Enum):
    """How to treat dependency ids that are not in the input set."""

    IGNORE = 'ignore'   # contributes no constraint
    ERROR = 'error'     # reject the input before computing


class CPMEngine:
    """
    CPM calculation engine.

    Performs forward pass (early times), backward pass (late times),
    slack calculation, and critical path identification. Computed values
    live on the engine instance, so use one engine per calculation.
    """

    def __init__(self, network: TaskNetwork, float_tolerance: Number = 0.0):
        """
        Initialize CPM engine.

        Args:
            network: Task network to calculate
            float_tolerance: Tasks with abs(slack) <= tolerance are critical.
                             The default of 0 means slack must be exactly zero.
        """
        if float_tolerance < 0:
            raise ValueError(f"float_tolerance must be >= 0, got {float_tolerance}")

        self.network = network
        self.float_tolerance = float_tolerance

        self.early_start: dict[str, Number] = {}
        self.early_finish: dict[str, Number] = {}
        self.late_start: dict[str, Number] = {}
        self.late_finish: dict[str, Number] = {}
        self.slack: dict[str, Number] = {}
        self.is_critical: dict[str, bool] = {}
        self._order: Optional[list[str]] = None

    def _topological_order(self) -> list[str]:
        if self._order is None:
            self._order = self.network.topological_sort()
        return self._order

    def forward_pass(self) -> None:
        """
        Calculate early start and early finish for all tasks.

        Processes tasks in topological order. A task starts when its latest
        dependency finishes, or at 0 when it has none.
        """
        for task_id in self._topological_order():
            task = self.network.tasks[task_id]
            early_start = max(
                (self.early_finish[d] for d in self.network.get_predecessors(task_id)),
                default=0,
            )
            self.early_start[task_id] = early_start
            self.early_finish[task_id] = early_start + task.duration

    def get_project_duration(self) -> Number:
        """Get the latest early finish (0 for an empty network)."""
        if len(self.early_finish) != len(self.network):
            raise RuntimeError("Run forward_pass before requesting project duration")
        return max(self.early_finish.values(), default=0)

    def backward_pass(self, project_duration: Number = None) -> None:
        """
        Calculate late start, late finish and slack for all tasks.

        Processes tasks in reverse topological order. Tasks without
        successors must finish by the project duration; others by the
        earliest late start among their successors.

        Late finish is derived from the (possibly pinned) late start so that
        late_finish == late_start + duration holds exactly.
        """
        if project_duration is None:
            project_duration = self.get_project_duration()

        for task_id in reversed(self._topological_order()):
            task = self.network.tasks[task_id]
            successors = self.network.get_successors(task_id)

            if not successors:
                late_finish = project_duration
            else:
                late_finish = min(self.late_start[s] for s in successors)

            early_start = self.early_start[task_id]
            late_start = late_finish - task.duration
            if late_start <= early_start or math.isclose(
                late_start, early_start, rel_tol=SNAP_REL_TOL, abs_tol=SNAP_ABS_TOL
            ):
                late_start = early_start
            late_finish = late_start + task.duration
            slack = late_start - early_start

            self.late_finish[task_id] = late_finish
            self.late_start[task_id] = late_start
            self.slack[task_id] = slack
            self.is_critical[task_id] = abs(slack) <= self.float_tolerance

    def get_critical_path(self) -> list[str]:
        """
        Return critical task IDs ordered by early start.

        Ties keep the network's insertion order.
        """
        critical = [tid for tid in self.network.tasks if self.is_critical.get(tid)]
        return sorted(critical, key=lambda tid: self.early_start[tid])

    def _scheduled_task(self, task: Task) -> ScheduledTask:
        tid = task.id
        return ScheduledTask(
            id=tid,
            title=task.title,
            duration=task.duration,
            dependencies=task.dependencies,
            early_start=self.early_start[tid],
            early_finish=self.early_finish[tid],
            late_start=self.late_start[tid],
            late_finish=self.late_finish[tid],
            slack=self.slack[tid],
            is_critical=self.is_critical[tid],
        )

    def run(self) -> ScheduleResult:
        """
        Execute full CPM calculation.

        Returns:
            ScheduleResult with tasks in network order
        """
        self.forward_pass()
        project_duration = self.get_project_duration()
        self.backward_pass(project_duration)

        scheduled = {tid: self._scheduled_task(t) for tid, t in self.network.tasks.items()}
        critical_path = self.get_critical_path()

        logger.debug(
            f"CPM complete: {len(scheduled)} tasks, duration {project_duration}, "
            f"{len(critical_path)} critical"
        )

        return ScheduleResult(
            tasks=list(scheduled.values()),
            critical_path=critical_path,
            project_duration=project_duration,
            critical_tasks=[scheduled[tid] for tid in critical_path],
        )


def compute_schedule(
    tasks: Iterable[Task],
    missing_dependencies: Union[MissingDependencyPolicy, str, None] = None,
    float_tolerance: Number = None,
) -> ScheduleResult:
    """
    Compute the CPM schedule for an ordered sequence of tasks.

    Args:
        tasks: Tasks in display order; ids must be unique
        missing_dependencies: 'ignore' or 'error' (default from settings)
        float_tolerance: Slack tolerance for criticality (default from settings)

    Returns:
        ScheduleResult with per-task times, critical path and project duration

    Raises:
        CyclicDependencyError: If the dependencies contain a cycle
        UnresolvedDependencyError: If a dependency id is missing and the
            policy is 'error'
        InvalidTaskError: For duplicate ids or invalid durations
    """
    if missing_dependencies is None:
        missing_dependencies = settings.CPM_MISSING_DEPENDENCY_POLICY
    policy = MissingDependencyPolicy(missing_dependencies)

    if float_tolerance is None:
        float_tolerance = settings.CPM_FLOAT_TOLERANCE

    network = TaskNetwork.from_tasks(tasks)

    missing = network.unresolved_dependencies()
    if missing:
        if policy is MissingDependencyPolicy.ERROR:
            raise UnresolvedDependencyError(missing)
        refs = sum(len(v) for v in missing.values())
        logger.warning(
            f"Ignoring {refs} unresolved dependency reference(s) on {len(missing)} task(s)"
        )

    return CPMEngine(network, float_tolerance=float_tolerance).run()
