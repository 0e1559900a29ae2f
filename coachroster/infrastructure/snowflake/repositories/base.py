"""
Shared plumbing for Snowflake repositories.

Repositories translate between domain models and rows. This module holds
the connection protocol, the connection settings, and the cursor helper
that turns driver failures into RosterStoreError.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, Protocol

from coachroster.core.roster.errors import RosterError, RosterStoreError

logger = logging.getLogger(__name__)


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a mock without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "COACHROSTER"
    schema: str = "ROSTER"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


class SnowflakeRepository:
    """Base class holding the connection and the error translation."""

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    @contextmanager
    def _cursor(self, operation: str, **context: Any) -> Iterator[Any]:
        """
        Yield a cursor and close it afterwards.

        Domain errors raised inside the block pass through untouched;
        anything else from the driver is logged and re-raised as
        RosterStoreError.
        """
        cursor = None
        try:
            cursor = self._conn.cursor()
            yield cursor
        except RosterError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to {operation}",
                extra={**context, "error": str(e)},
            )
            raise RosterStoreError(f"Failed to {operation}: {e}") from e
        finally:
            if cursor is not None:
                cursor.close()

    def ping(self) -> bool:
        """Run a trivial query. Used by the readiness check."""
        with self._cursor("ping database") as cursor:
            cursor.execute("SELECT 1")
            return cursor.fetchone() is not None


def build_update(table: str, fields: dict[str, Any], allowed: Iterable[str]) -> tuple[str, list[Any]]:
    """
    Build "UPDATE table SET a = %s, b = %s WHERE id = %s".

    Column names are checked against allowed so they can be interpolated
    safely; values always go through parameters.
    """
    allowed = set(allowed)
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown columns for {table}: {', '.join(sorted(unknown))}")

    columns = sorted(fields)
    assignments = ", ".join(f"{column} = %s" for column in columns)
    return (
        f"UPDATE {table} SET {assignments} WHERE id = %s",
        [fields[column] for column in columns],
    )
