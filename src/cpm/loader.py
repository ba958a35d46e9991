"""
Data Loader for CPM task input and schedule export.

Converts task records supplied by the task-management layer (dicts, CSV or
JSON exports) into Task objects, and writes computed schedules back out as
DataFrames / CSV.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd
from pydantic import ValidationError

from schemas.schedule import TaskInputRow, ScheduledTaskRow
from schemas.validator import validated_df_to_csv
from src.config.settings import settings
from .models import Task, ScheduleResult
from .network import InvalidTaskError

logger = logging.getLogger(__name__)

DEPENDENCY_SEPARATORS = re.compile(r'[;,|]')

FLOAT_COLUMNS = ['duration', 'early_start', 'early_finish', 'late_start', 'late_finish', 'slack']


def _is_missing(value: Any) -> bool:
    if isinstance(value, (list, tuple, set)):
        return False
    return value is None or bool(pd.isna(value))


def split_dependencies(value: Any) -> list[str]:
    """
    Normalise a dependency field to a list of ids.

    Accepts a list/tuple/set of ids or a string delimited by ';', ',' or '|'.
    Blank and missing values give an empty list.
    """
    if _is_missing(value):
        return []
    if isinstance(value, str):
        parts = DEPENDENCY_SEPARATORS.split(value)
    elif isinstance(value, (list, tuple, set)):
        parts = list(value)
    else:
        parts = [value]
    return [str(p).strip() for p in parts if str(p).strip()]


def tasks_from_records(
    records: Iterable[dict],
    default_duration: Optional[float] = None,
) -> list[Task]:
    """
    Convert task records into Task objects.

    Each record needs an 'id'; 'title', 'duration' (or
    'estimated_effort_hours') and 'dependencies' are optional. A record
    without any duration gets default_duration (settings default).

    Args:
        records: Iterable of dicts, in display order
        default_duration: Duration for records without an estimate

    Returns:
        List of Task objects in record order

    Raises:
        InvalidTaskError: If a record fails schema validation
    """
    if default_duration is None:
        default_duration = settings.CPM_DEFAULT_DURATION

    tasks = []
    for idx, record in enumerate(records):
        cleaned = {
            key: value for key, value in record.items()
            if key in TaskInputRow.model_fields and key != 'dependencies'
            and not _is_missing(value)
        }
        # CSV readers hand back numeric ids and titles
        for key in ('id', 'title'):
            if key in cleaned:
                cleaned[key] = str(cleaned[key]).strip()
        cleaned['dependencies'] = split_dependencies(record.get('dependencies'))

        try:
            row = TaskInputRow(**cleaned)
        except ValidationError as e:
            raise InvalidTaskError(f"Invalid task record {idx}: {e}") from e

        if row.duration is not None:
            duration = row.duration
        elif row.estimated_effort_hours is not None:
            duration = row.estimated_effort_hours
        else:
            logger.debug(f"Task {row.id} has no duration, using default {default_duration}")
            duration = default_duration

        tasks.append(Task(
            id=row.id,
            title=row.title,
            duration=duration,
            dependencies=tuple(row.dependencies),
        ))

    return tasks


def load_tasks(path: Path, default_duration: Optional[float] = None) -> list[Task]:
    """
    Load tasks from a CSV or JSON file.

    CSV files need an 'id' column and may have 'title', 'duration',
    'estimated_effort_hours' and 'dependencies' columns. JSON files hold
    either a list of task objects or an object with a 'tasks' list.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix == '.csv':
        df = pd.read_csv(path, dtype={
            'id': str, 'title': str, 'dependencies': str,
            'duration': float, 'estimated_effort_hours': float,
        })
        records = df.to_dict('records')
    elif suffix == '.json':
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
        records = data.get('tasks') if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise ValueError(f"{path}: expected a list of tasks or an object with a 'tasks' list")
    else:
        raise ValueError(f"Unsupported task file type: {path.suffix}")

    tasks = tasks_from_records(records, default_duration=default_duration)
    logger.info(f"Loaded {len(tasks)} tasks from {path}")
    return tasks


def schedule_to_dataframe(result: ScheduleResult) -> pd.DataFrame:
    """
    Flatten a schedule to one row per task (ScheduledTaskRow layout).

    Dependencies are joined with ';'. critical_path_position is the 1-based
    position on the critical path, empty for non-critical tasks.
    """
    positions = {tid: i + 1 for i, tid in enumerate(result.critical_path)}

    rows = []
    for task in result.tasks:
        rows.append({
            'id': task.id,
            'title': task.title,
            'duration': task.duration,
            'dependencies': ';'.join(task.dependencies),
            'early_start': task.early_start,
            'early_finish': task.early_finish,
            'late_start': task.late_start,
            'late_finish': task.late_finish,
            'slack': task.slack,
            'is_critical': task.is_critical,
            'critical_path_position': positions.get(task.id),
        })

    df = pd.DataFrame(rows, columns=list(ScheduledTaskRow.model_fields))
    return df.astype({
        **{col: float for col in FLOAT_COLUMNS},
        'is_critical': bool,
        'critical_path_position': 'Int64',
    })


def write_schedule_csv(result: ScheduleResult, output_dir: Path = None) -> Path:
    """
    Write schedule.csv to output_dir after schema validation.

    Returns:
        Path of the written file
    """
    if output_dir is None:
        output_dir = settings.OUTPUT_DATA_DIR
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    output_path = output_dir / 'schedule.csv'
    validated_df_to_csv(schedule_to_dataframe(result), output_path, strict=True, index=False)
    logger.info(f"Wrote {len(result.tasks)} scheduled tasks to {output_path}")
    return output_path


def example_milestone() -> tuple[str, list[Task]]:
    """Four-task demonstration milestone with two parallel critical branches."""
    tasks = [
        Task(id='A', title='Setup Infrastructure', duration=3),
        Task(id='B', title='Deploy Backend', duration=2, dependencies=('A',)),
        Task(id='C', title='Deploy Frontend', duration=2, dependencies=('A',)),
        Task(id='D', title='Integration Testing', duration=3, dependencies=('B', 'C')),
    ]
    return 'Deployment Phase', tasks
