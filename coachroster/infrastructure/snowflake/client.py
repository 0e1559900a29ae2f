"""
Opening connections to Snowflake, or to an in-memory stand-in.

Repositories take either a connection from create_snowflake_connection or
a MockSnowflakeConnection and never know which one they got. The mock
understands exactly the SQL the athlete and program repositories issue,
nothing more.
"""

import base64
import logging
import re
import threading
from contextlib import contextmanager
from typing import Any, Generator, Optional

from .repositories.base import SnowflakeConfig, SnowflakeConnection

logger = logging.getLogger(__name__)


class SnowflakeConnectionError(Exception):
    """Could not open a connection (bad credentials, unreachable account)."""
    pass


def _load_private_key(key_pem: bytes) -> bytes:
    """
    PEM in, unencrypted PKCS8 DER out (the form the connector accepts).
    """
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    private_key = serialization.load_pem_private_key(
        key_pem,
        password=None,
        backend=default_backend()
    )

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


def _connect_params(config: SnowflakeConfig) -> dict[str, Any]:
    """Build connector arguments, picking key-pair or password auth."""
    params: dict[str, Any] = {
        'account': config.account,
        'user': config.user,
        'database': config.database,
        'schema': config.schema,
        'warehouse': config.warehouse,
        'client_session_keep_alive': True,
    }
    if config.role:
        params['role'] = config.role

    if config.private_key_base64:
        logger.info("Snowflake auth: key pair (base64)")
        params['private_key'] = _load_private_key(base64.b64decode(config.private_key_base64))
    elif config.private_key_path:
        logger.info("Snowflake auth: key pair (file)")
        with open(config.private_key_path, 'rb') as key_file:
            params['private_key'] = _load_private_key(key_file.read())
    elif config.password:
        logger.info("Snowflake auth: password")
        params['password'] = config.password
    else:
        raise SnowflakeConnectionError(
            "Either password or a private key must be provided"
        )
    return params


@contextmanager
def create_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Open a real Snowflake connection and close it on exit.

    Only failures to connect become SnowflakeConnectionError. Errors raised
    while the connection is in use propagate unchanged; the connection is
    closed either way.

    Usage:
        with create_snowflake_connection(config) as conn:
            repo = AthleteRepository(conn)
    """
    import snowflake.connector

    try:
        conn = snowflake.connector.connect(**_connect_params(config))
    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}") from e

    logger.debug(
        "Snowflake connected",
        extra={
            "account": config.account,
            "database": config.database,
            "schema": config.schema,
        }
    )

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Snowflake connection closed")
        except Exception as e:
            logger.warning(
                "Snowflake connection did not close cleanly",
                extra={"error": str(e)}
            )


# ---------------------------------------------------------------------------
# In-memory stand-in
# ---------------------------------------------------------------------------

_INSERT_RE = re.compile(r"INSERT\s+INTO\s+(\w+)\s*\(([^)]*)\)", re.IGNORECASE)
_UPDATE_RE = re.compile(r"UPDATE\s+(\w+)\s+SET\s+(.+?)\s+WHERE\s+id\s*=\s*%s", re.IGNORECASE | re.DOTALL)
_DELETE_RE = re.compile(r"DELETE\s+FROM\s+(\w+)\s+WHERE\s+id\s*=\s*%s", re.IGNORECASE)
_SET_COLUMN_RE = re.compile(r"(\w+)\s*=\s*%s")


class MockSnowflakeError(Exception):
    """Raised by the mock for writes a test marked as failing."""
    pass


class MockSnowflakeCursor:
    """
    Cursor over the in-memory tables.

    Statements are recognised by shape (regex and prefix checks), so only
    the fixed SQL in the athlete and program repositories is understood.
    Anything else executes as a no-op with no rows.
    """

    def __init__(self, connection: 'MockSnowflakeConnection') -> None:
        self._connection = connection
        self._storage = connection._storage
        self._results: list = []
        self._rowcount: int = 0

    def execute(self, query: str, params: Optional[tuple] = None) -> 'MockSnowflakeCursor':
        """Run one statement against the in-memory tables."""
        logger.debug(
            "Mock cursor execute",
            extra={"query": " ".join(query.split())[:100], "params": params}
        )

        params = tuple(params or ())
        query_upper = " ".join(query.upper().split())
        self._results = []
        self._rowcount = 0

        with self._connection._lock:
            if query_upper.startswith('SELECT'):
                self._handle_select(query_upper, params)
            elif query_upper.startswith('INSERT INTO'):
                self._handle_insert(query, params)
            elif query_upper.startswith('UPDATE'):
                self._handle_update(query, params)
            elif query_upper.startswith('DELETE FROM'):
                self._handle_delete(query, params)

        return self

    def _handle_select(self, query: str, params: tuple) -> None:
        if query == 'SELECT 1':
            self._results = [(1,)]

        elif 'FROM ATHLETES A' in query and 'LEFT JOIN PROGRAMS' in query:
            athletes = self._storage['athletes'].values()
            if 'WHERE A.ID = %S' in query:
                athletes = [a for a in athletes if a['id'] == params[0]]
            else:
                athletes = sorted(athletes, key=lambda a: a['last_name'])
            self._results = [self._joined_row(a) for a in athletes]

        elif query.startswith('SELECT COUNT(*) FROM ATHLETES'):
            count = sum(
                1 for a in self._storage['athletes'].values()
                if a.get('program_id') == params[0]
            )
            self._results = [(count,)]

        elif query.startswith('SELECT MAX(CURRENT_WEEK) FROM ATHLETES'):
            weeks = [
                a.get('current_week') for a in self._storage['athletes'].values()
                if a.get('program_id') == params[0]
            ]
            self._results = [(max(weeks) if weeks else None,)]

        elif 'FROM PROGRAMS' in query:
            programs = self._storage['programs'].values()
            if 'WHERE ID = %S' in query:
                programs = [p for p in programs if p['id'] == params[0]]
            else:
                programs = sorted(programs, key=lambda p: p['name'])
            self._results = [(p['id'], p['name'], p['duration']) for p in programs]

    def _joined_row(self, athlete: dict) -> tuple:
        program = self._storage['programs'].get(athlete.get('program_id') or '')
        return (
            athlete['id'],
            athlete.get('first_name'),
            athlete.get('last_name'),
            athlete.get('email'),
            athlete.get('current_week'),
            athlete.get('last_checkin'),
            athlete.get('assigned_date'),
            athlete.get('program_id'),
            program['name'] if program else None,
            program['duration'] if program else None,
        )

    def _handle_insert(self, query: str, params: tuple) -> None:
        match = _INSERT_RE.search(query)
        if not match:
            return
        table = match.group(1).lower()
        columns = [c.strip().lower() for c in match.group(2).split(',')]
        row = dict(zip(columns, params))
        self._storage[table][row['id']] = row
        self._rowcount = 1

    def _handle_update(self, query: str, params: tuple) -> None:
        match = _UPDATE_RE.search(query)
        if not match:
            return
        table = match.group(1).lower()
        columns = [c.lower() for c in _SET_COLUMN_RE.findall(match.group(2))]
        record_id = params[-1]
        if record_id in self._connection._failing_ids:
            raise MockSnowflakeError(f"Simulated write failure for {record_id}")

        row = self._storage[table].get(record_id)
        if row is None:
            return
        row.update(zip(columns, params[:-1]))
        self._rowcount = 1

    def _handle_delete(self, query: str, params: tuple) -> None:
        match = _DELETE_RE.search(query)
        if not match:
            return
        table = match.group(1).lower()
        if self._storage[table].pop(params[0], None) is not None:
            self._rowcount = 1

    def fetchone(self):
        return self._results[0] if self._results else None

    def fetchall(self) -> list:
        return self._results

    def close(self) -> None:
        pass

    @property
    def rowcount(self) -> int:
        return self._rowcount


class MockSnowflakeConnection:
    """
    In-process roster database with two tables, athletes and programs.

    Used when SNOWFLAKE_MOCK_MODE is on and by the test suite. The
    underscore helpers seed rows, read them back and inject write
    failures; application code never calls them.
    """

    def __init__(self) -> None:
        # table name -> {row id -> row dict}
        self._storage: dict[str, dict[str, dict]] = {
            'athletes': {},
            'programs': {},
        }
        # bulk assignment writes from several threads at once
        self._lock = threading.Lock()
        self._failing_ids: set[str] = set()

        logger.info("Using in-memory roster database")

    def cursor(self) -> MockSnowflakeCursor:
        return MockSnowflakeCursor(self)

    def commit(self) -> None:
        logger.debug("mock commit")

    def _add_program(self, program_id: str, name: str, duration: int) -> None:
        self._storage['programs'][program_id] = {
            'id': program_id, 'name': name, 'duration': duration,
        }

    def _add_athlete(self, athlete_id: str, **fields: Any) -> None:
        """Seed an athlete row; unspecified columns get table defaults."""
        row = {
            'id': athlete_id,
            'first_name': '',
            'last_name': '',
            'email': '',
            'current_week': 1,
            'last_checkin': None,
            'assigned_date': None,
            'program_id': None,
        }
        row.update(fields)
        self._storage['athletes'][athlete_id] = row

    def _get_athlete(self, athlete_id: str) -> Optional[dict]:
        return self._storage['athletes'].get(athlete_id)

    def _fail_writes_for(self, *record_ids: str) -> None:
        """Make every UPDATE on these ids raise MockSnowflakeError."""
        self._failing_ids.update(record_ids)
