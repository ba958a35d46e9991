"""
Critical Path Analysis.

Identifies critical and near-critical tasks, summarises the slack
distribution, and measures the impact of changing a single task's duration.
"""

from collections import defaultdict
from typing import Sequence

from src.config.settings import settings
from .engine import compute_schedule
from .models import Task, ScheduleResult, CriticalPathResult, TaskImpactResult, Number
from .network import TaskNetwork


def analyze_schedule(
    result: ScheduleResult,
    near_critical_threshold: Number = None,
    unresolved_dependencies: dict[str, list[str]] = None,
) -> CriticalPathResult:
    """
    Categorise the tasks of a computed schedule by slack.

    Args:
        result: Computed schedule
        near_critical_threshold: Tasks with 0 < slack <= threshold are near-critical
        unresolved_dependencies: Missing references to report alongside

    Returns:
        CriticalPathResult with critical path, near-critical tasks and slack buckets
    """
    if near_critical_threshold is None:
        near_critical_threshold = settings.CPM_NEAR_CRITICAL_THRESHOLD

    near_critical = []
    slack_buckets = defaultdict(int)
    threshold = near_critical_threshold

    for task in result.tasks:
        if task.is_critical:
            slack_buckets['0 (critical)'] += 1
        elif task.slack <= threshold:
            near_critical.append(task)
            slack_buckets[f'<= {threshold:g} (near-critical)'] += 1
        elif task.slack <= 2 * threshold:
            slack_buckets[f'<= {2 * threshold:g}'] += 1
        else:
            slack_buckets[f'> {2 * threshold:g}'] += 1

    near_critical.sort(key=lambda t: t.slack)

    return CriticalPathResult(
        critical_path=list(result.critical_tasks),
        near_critical_tasks=near_critical,
        slack_distribution=dict(slack_buckets),
        project_duration=result.project_duration,
        near_critical_threshold=near_critical_threshold,
        total_tasks=len(result.tasks),
        unresolved_dependencies=dict(unresolved_dependencies or {}),
    )


def analyze_critical_path(
    tasks: Sequence[Task],
    near_critical_threshold: Number = None,
    missing_dependencies: str = None,
    float_tolerance: Number = None,
) -> CriticalPathResult:
    """
    Run CPM on tasks and analyze critical and near-critical tasks.

    Args:
        tasks: Tasks in display order
        near_critical_threshold: Slack threshold for near-critical classification
        missing_dependencies: Missing-dependency policy ('ignore' or 'error')
        float_tolerance: Slack tolerance for criticality

    Returns:
        CriticalPathResult
    """
    tasks = list(tasks)
    result = compute_schedule(
        tasks,
        missing_dependencies=missing_dependencies,
        float_tolerance=float_tolerance,
    )
    unresolved = TaskNetwork.from_tasks(tasks).unresolved_dependencies()
    return analyze_schedule(result, near_critical_threshold, unresolved)


def analyze_task_impact(
    tasks: Sequence[Task],
    task_id: str,
    duration_delta: Number,
    missing_dependencies: str = None,
    float_tolerance: Number = None,
) -> TaskImpactResult:
    """
    Calculate impact of changing one task's duration.

    Args:
        tasks: Tasks in display order (not modified)
        task_id: ID of task to modify
        duration_delta: Change in duration (positive = longer); the new
                        duration is clamped at 0

    Returns:
        TaskImpactResult with baseline vs new project duration and affected tasks
    """
    network = TaskNetwork.from_tasks(tasks)
    if task_id not in network:
        raise KeyError(f"Task {task_id} not found in network")

    task = network.tasks[task_id]
    new_duration = max(0, task.duration + duration_delta)
    modified_network = network.with_duration(task_id, new_duration)

    options = dict(missing_dependencies=missing_dependencies, float_tolerance=float_tolerance)
    baseline = compute_schedule(network.tasks.values(), **options)
    modified = compute_schedule(modified_network.tasks.values(), **options)

    # Tasks whose early finish moved
    affected = [
        new.id for old, new in zip(baseline.tasks, modified.tasks)
        if old.early_finish != new.early_finish
    ]

    return TaskImpactResult(
        task_id=task_id,
        task_title=task.title,
        duration_delta=duration_delta,
        original_duration=task.duration,
        new_duration=new_duration,
        original_project_duration=baseline.project_duration,
        new_project_duration=modified.project_duration,
        slip=modified.project_duration - baseline.project_duration,
        affected_task_ids=affected,
        original_critical_path=baseline.critical_path,
        new_critical_path=modified.critical_path,
        critical_path_changed=baseline.critical_path != modified.critical_path,
    )


def print_critical_path_report(result: CriticalPathResult, title: str = None) -> None:
    """Print a formatted critical path report."""
    print("=" * 80)
    print("CRITICAL PATH ANALYSIS REPORT")
    if title:
        print(title)
    print("=" * 80)

    print(f"\nProject Duration: {result.project_duration:g}")
    print(f"Total Tasks: {result.total_tasks}")
    print(f"Critical Tasks: {len(result.critical_path)}")
    print(f"Near-Critical Tasks (slack <= {result.near_critical_threshold:g}): "
          f"{len(result.near_critical_tasks)}")

    if result.total_tasks:
        print("\n--- Slack Distribution ---")
        for bucket, count in sorted(result.slack_distribution.items()):
            pct = count / result.total_tasks * 100
            bar = '#' * int(pct / 2)
            print(f"  {bucket:25s}: {count:5d} ({pct:5.1f}%) {bar}")

    print("\n--- Critical Path ---")
    if result.critical_path:
        print("  " + " -> ".join(t.id for t in result.critical_path))
    for i, task in enumerate(result.critical_path[:20]):
        print(f"  {i+1:3d}. {task.id:12s} | {task.title[:40]:40s} | "
              f"ES {task.early_start:g} EF {task.early_finish:g}")

    if len(result.critical_path) > 20:
        print(f"  ... and {len(result.critical_path) - 20} more critical tasks")

    if result.near_critical_tasks:
        print("\n--- Near-Critical Tasks (first 10) ---")
        for i, task in enumerate(result.near_critical_tasks[:10]):
            print(f"  {i+1:3d}. {task.id:12s} | Slack: {task.slack:6g} | "
                  f"{task.title[:35]:35s}")

    if result.unresolved_dependencies:
        print("\n--- Unresolved Dependencies (ignored) ---")
        for tid, missing in result.unresolved_dependencies.items():
            print(f"  {tid}: {', '.join(missing)}")

    print("\n" + "=" * 80)
