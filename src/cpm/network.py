"""
Task Network for CPM calculations.

Manages tasks and their dependency relationships with support for
topological sorting and network traversal.
"""

import math
import numbers
from collections import defaultdict
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional

from .models import Task

# Traversal markers for the depth-first topological sort
_UNVISITED = 0
_IN_PROGRESS = 1
_FINISHED = 2


class ScheduleError(ValueError):
    """Base class for errors that prevent a schedule from being computed."""


class CyclicDependencyError(ScheduleError):
    """Raised when the dependency relation contains a cycle."""

    def __init__(self, task_id: str):
        super().__init__(f"Circular dependency detected involving task: {task_id}")
        self.task_id = task_id


class UnresolvedDependencyError(ScheduleError):
    """Raised when tasks depend on identifiers missing from the input set."""

    def __init__(self, missing: dict[str, list[str]]):
        refs = '; '.join(f"{tid} -> {', '.join(deps)}" for tid, deps in missing.items())
        super().__init__(f"Unresolved dependency references: {refs}")
        self.missing = missing


class InvalidTaskError(ScheduleError):
    """Raised for duplicate task ids or unusable durations."""


class TaskNetwork:
    """
    Task dependency network for CPM calculations.

    Tasks keep their insertion order. Dependencies naming ids that are not in
    the network are kept on the task but excluded from predecessor/successor
    lookups; see unresolved_dependencies().
    """

    def __init__(self):
        self.tasks: dict[str, Task] = {}
        self._dependents: dict[str, list[str]] = defaultdict(list)

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> 'TaskNetwork':
        """Build a network from an ordered sequence of tasks."""
        network = cls()
        for task in tasks:
            network.add_task(task)
        return network

    def add_task(self, task: Task) -> None:
        """
        Add a task to the network.

        Raises InvalidTaskError for a duplicate id or a negative,
        non-numeric or non-finite duration.
        """
        if task.id in self.tasks:
            raise InvalidTaskError(f"Duplicate task id: {task.id}")
        _check_duration(task)

        self.tasks[task.id] = task
        for dep_id in task.dependencies:
            self._dependents[dep_id].append(task.id)

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID."""
        return self.tasks.get(task_id)

    def get_predecessors(self, task_id: str) -> list[str]:
        """Get resolved dependency ids of a task."""
        task = self.tasks.get(task_id)
        if task is None:
            return []
        return [d for d in task.dependencies if d in self.tasks]

    def get_successors(self, task_id: str) -> list[str]:
        """Get ids of tasks that depend on task_id."""
        if task_id not in self.tasks:
            return []
        return list(self._dependents.get(task_id, []))

    def get_start_tasks(self) -> list[str]:
        """Get task IDs with no resolved predecessors."""
        return [tid for tid in self.tasks if not self.get_predecessors(tid)]

    def get_end_tasks(self) -> list[str]:
        """Get task IDs with no successors."""
        return [tid for tid in self.tasks if not self._dependents.get(tid)]

    def unresolved_dependencies(self) -> dict[str, list[str]]:
        """Map task id -> dependency ids that are not in the network."""
        missing = {}
        for tid, task in self.tasks.items():
            absent = [d for d in task.dependencies if d not in self.tasks]
            if absent:
                missing[tid] = absent
        return missing

    def topological_sort(self) -> list[str]:
        """
        Return task IDs in topological order (dependencies before dependents).

        Depth-first traversal in task insertion order, visiting each task's
        dependencies before appending the task itself. Uses an explicit stack
        of (node, next dependency position) frames so deep chains do not hit
        the interpreter recursion limit.

        Raises CyclicDependencyError naming the task reached while it was
        still on the active path.
        """
        ids = list(self.tasks)
        index = {tid: i for i, tid in enumerate(ids)}
        deps = [
            [index[d] for d in self.tasks[tid].dependencies if d in index]
            for tid in ids
        ]

        state = [_UNVISITED] * len(ids)
        order = []

        for root in range(len(ids)):
            if state[root] != _UNVISITED:
                continue

            state[root] = _IN_PROGRESS
            stack = [[root, 0]]

            while stack:
                frame = stack[-1]
                node, pos = frame

                if pos < len(deps[node]):
                    frame[1] += 1
                    dep = deps[node][pos]
                    if state[dep] == _IN_PROGRESS:
                        raise CyclicDependencyError(ids[dep])
                    if state[dep] == _UNVISITED:
                        state[dep] = _IN_PROGRESS
                        stack.append([dep, 0])
                else:
                    stack.pop()
                    state[node] = _FINISHED
                    order.append(ids[node])

        return order

    def reverse_topological_sort(self) -> list[str]:
        """Return task IDs in reverse topological order (dependents first)."""
        return list(reversed(self.topological_sort()))

    def get_all_predecessors(self, task_id: str, include_self: bool = False) -> set[str]:
        """Get all predecessor task IDs (transitive closure)."""
        return self._closure(task_id, self.get_predecessors, include_self)

    def get_all_successors(self, task_id: str, include_self: bool = False) -> set[str]:
        """Get all successor task IDs (transitive closure)."""
        return self._closure(task_id, self.get_successors, include_self)

    def _closure(self, task_id: str, neighbours, include_self: bool) -> set[str]:
        result = set()
        if include_self:
            result.add(task_id)

        visited = set()
        queue = [task_id]

        while queue:
            current = queue.pop()
            if current in visited:
                continue
            visited.add(current)

            for other in neighbours(current):
                result.add(other)
                queue.append(other)

        return result

    def with_duration(self, task_id: str, new_duration) -> 'TaskNetwork':
        """
        Create a copy of the network with one task's duration changed.

        Used for what-if analysis; the original network is not modified.
        """
        if task_id not in self.tasks:
            raise KeyError(f"Task {task_id} not in network")

        return TaskNetwork.from_tasks(
            replace(task, duration=new_duration) if tid == task_id else task
            for tid, task in self.tasks.items()
        )

    def get_statistics(self) -> dict:
        """Get network statistics."""
        unresolved = self.unresolved_dependencies()
        return {
            'total_tasks': len(self.tasks),
            'total_dependencies': sum(len(self.get_predecessors(t)) for t in self.tasks),
            'start_tasks': len(self.get_start_tasks()),
            'end_tasks': len(self.get_end_tasks()),
            'milestones': sum(1 for t in self.tasks.values() if t.is_milestone()),
            'unresolved_references': sum(len(v) for v in unresolved.values()),
        }

    def validate(self) -> list[str]:
        """
        Validate network integrity.

        Returns list of issues found (empty if valid).
        """
        issues = []

        for tid, missing in self.unresolved_dependencies().items():
            for dep_id in missing:
                issues.append(f"Task {tid} references missing dependency: {dep_id}")

        try:
            self.topological_sort()
        except CyclicDependencyError as e:
            issues.append(str(e))

        return issues

    def __len__(self) -> int:
        return len(self.tasks)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self.tasks

    def __repr__(self) -> str:
        edges = sum(len(self.get_predecessors(t)) for t in self.tasks)
        return f"TaskNetwork({len(self.tasks)} tasks, {edges} dependencies)"


def _check_duration(task: Task) -> None:
    duration = task.duration
    if isinstance(duration, bool) or not isinstance(duration, (numbers.Real, Decimal)):
        raise InvalidTaskError(
            f"Task {task.id} has non-numeric duration: {duration!r}"
        )
    if not math.isfinite(duration):
        raise InvalidTaskError(f"Task {task.id} has non-finite duration: {duration}")
    if duration < 0:
        raise InvalidTaskError(f"Task {task.id} has negative duration: {duration}")
