"""
Snowflake persistence for athletes and programs.
"""

from .client import (
    MockSnowflakeConnection,
    SnowflakeConnectionError,
    create_snowflake_connection,
)

__all__ = [
    "MockSnowflakeConnection",
    "SnowflakeConnectionError",
    "create_snowflake_connection",
]
