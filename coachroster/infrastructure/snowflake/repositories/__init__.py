"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .athletes import AthleteRepository
from .base import SnowflakeConfig, SnowflakeConnection
from .programs import ProgramRepository

__all__ = [
    "AthleteRepository",
    "ProgramRepository",
    "SnowflakeConfig",
    "SnowflakeConnection",
]
