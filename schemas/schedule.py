"""
CPM schedule table schemas.

Input: task rows supplied by the task-management layer (CSV/JSON export).
Output Location: {OUTPUT_DATA_DIR}/schedule.csv
"""

from typing import Optional
from pydantic import BaseModel, Field


class TaskInputRow(BaseModel):
    """
    A task record as exported by the task-management layer.

    Duration may be given directly or as estimated effort hours.
    """
    id: str = Field(min_length=1, description="Unique task identifier")
    title: str = Field(default="", description="Display title")
    duration: Optional[float] = Field(default=None, ge=0, description="Task duration")
    estimated_effort_hours: Optional[float] = Field(
        default=None, ge=0, description="Estimated effort, used when duration is absent"
    )
    dependencies: list[str] = Field(default_factory=list, description="IDs of tasks this task depends on")


class ScheduledTaskRow(BaseModel):
    """
    One row per task with computed CPM times.

    File: schedule.csv
    """
    id: str = Field(description="Unique task identifier")
    title: str = Field(description="Display title")
    duration: float = Field(description="Task duration")
    dependencies: str = Field(description="Dependency ids joined with ';'")
    early_start: float = Field(description="Earliest start")
    early_finish: float = Field(description="Earliest finish")
    late_start: float = Field(description="Latest start without delaying the project")
    late_finish: float = Field(description="Latest finish without delaying the project")
    slack: float = Field(description="late_start - early_start")
    is_critical: bool = Field(description="True when slack is zero")
    critical_path_position: Optional[int] = Field(
        default=None, description="1-based position on the critical path, empty if not critical"
    )
