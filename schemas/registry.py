"""
Schema registry mapping file names to their Pydantic schemas.

This registry enables automatic schema lookup based on file name
and provides a central reference for all output data schemas.
"""

from typing import Type, Dict, Optional
from pathlib import Path
from pydantic import BaseModel

from .schedule import ScheduledTaskRow


# Registry mapping file names to schemas
# Keys are file names (without path), values are Pydantic model classes
SCHEMA_REGISTRY: Dict[str, Type[BaseModel]] = {
    'schedule.csv': ScheduledTaskRow,
}


def get_schema_for_file(file_path: str) -> Optional[Type[BaseModel]]:
    """
    Get the schema for a file by its name.

    Args:
        file_path: File name or full path

    Returns:
        Pydantic model class, or None if no schema is registered
    """
    filename = Path(file_path).name
    return SCHEMA_REGISTRY.get(filename)


def list_registered_files() -> list[str]:
    """List all file names with registered schemas."""
    return sorted(SCHEMA_REGISTRY.keys())
