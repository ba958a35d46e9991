"""Pytest configuration and fixtures."""
import pytest
from typing import List

from src.cpm.models import Task


@pytest.fixture
def example_tasks() -> List[Task]:
    """Deployment milestone: A -> (B, C) -> D with two equal branches."""
    return [
        Task(id='A', title='Setup Infrastructure', duration=3),
        Task(id='B', title='Deploy Backend', duration=2, dependencies=('A',)),
        Task(id='C', title='Deploy Frontend', duration=2, dependencies=('A',)),
        Task(id='D', title='Integration Testing', duration=3, dependencies=('B', 'C')),
    ]


@pytest.fixture
def slack_tasks() -> List[Task]:
    """Network with one short branch that carries slack."""
    return [
        Task(id='start', title='Kickoff', duration=1),
        Task(id='long', title='Long branch', duration=5, dependencies=('start',)),
        Task(id='short', title='Short branch', duration=2, dependencies=('start',)),
        Task(id='end', title='Handover', duration=1, dependencies=('long', 'short')),
        Task(id='docs', title='Write docs', duration=1, dependencies=('start',)),
    ]


@pytest.fixture
def task_records() -> List[dict]:
    """Task records as exported by the task-management layer."""
    return [
        {'id': 'T1', 'title': 'Design', 'estimated_effort_hours': 16, 'dependencies': []},
        {'id': 'T2', 'title': 'Build', 'estimated_effort_hours': None, 'dependencies': ['T1']},
        {'id': 'T3', 'title': 'Review', 'duration': 4, 'dependencies': 'T1;T2'},
    ]
