"""
Data schemas for schedule input and export validation.

This module defines Pydantic models for task input records and the
schedule CSV export so the export layout stays stable for downstream
consumers (Gantt and milestone views).

Usage:
    from schemas import validated_df_to_csv
    from schemas.schedule import ScheduledTaskRow

    errors = validate_dataframe(df, ScheduledTaskRow)
    validated_df_to_csv(df, output_dir / 'schedule.csv', index=False)
"""

from .validator import (
    validate_output_file,
    validate_dataframe,
    validated_df_to_csv,
    SchemaValidationError,
)
from .registry import SCHEMA_REGISTRY, get_schema_for_file

__all__ = [
    'validate_output_file',
    'validate_dataframe',
    'validated_df_to_csv',
    'SchemaValidationError',
    'SCHEMA_REGISTRY',
    'get_schema_for_file',
]
