"""
Configuration settings for the CPM scheduling tools.
Load configuration from environment variables or a .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)


class Settings:
    """Application settings loaded from environment variables."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    DATA_DIR = Path(os.getenv('DATA_DIR', str(PROJECT_ROOT / 'data')))
    OUTPUT_DATA_DIR = DATA_DIR / 'output'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', '')    # empty disables file logging

    # ============================================================================
    # CPM Configuration
    # ============================================================================
    # 'ignore': unknown dependency ids add no constraint; 'error': reject input
    CPM_MISSING_DEPENDENCY_POLICY = os.getenv('CPM_MISSING_DEPENDENCY_POLICY', 'ignore').strip().lower()
    CPM_FLOAT_TOLERANCE = float(os.getenv('CPM_FLOAT_TOLERANCE', '0'))
    CPM_NEAR_CRITICAL_THRESHOLD = float(os.getenv('CPM_NEAR_CRITICAL_THRESHOLD', '8'))
    # Duration used for tasks with no estimate (hours)
    CPM_DEFAULT_DURATION = float(os.getenv('CPM_DEFAULT_DURATION', '8'))

    @classmethod
    def validate_required_settings(cls) -> list[str]:
        """
        Validate that settings hold usable values.
        Returns list of problems found.
        """
        problems = []

        if cls.CPM_MISSING_DEPENDENCY_POLICY not in ('ignore', 'error'):
            problems.append(
                f"CPM_MISSING_DEPENDENCY_POLICY must be 'ignore' or 'error', "
                f"got {cls.CPM_MISSING_DEPENDENCY_POLICY!r}"
            )
        if cls.CPM_FLOAT_TOLERANCE < 0:
            problems.append('CPM_FLOAT_TOLERANCE must be >= 0')
        if cls.CPM_NEAR_CRITICAL_THRESHOLD < 0:
            problems.append('CPM_NEAR_CRITICAL_THRESHOLD must be >= 0')
        if cls.CPM_DEFAULT_DURATION < 0:
            problems.append('CPM_DEFAULT_DURATION must be >= 0')

        return problems


# Create settings instance
settings = Settings()
