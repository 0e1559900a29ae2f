"""
Shared fixtures.

Everything runs against the in-memory MockSnowflakeConnection, so the
repositories execute their real SQL strings without a database.
"""

from datetime import date

import pytest

from coachroster.core.roster.schedule import FixedClock
from coachroster.core.roster.service import RosterService
from coachroster.infrastructure.snowflake.client import MockSnowflakeConnection
from coachroster.infrastructure.snowflake.repositories import (
    AthleteRepository,
    ProgramRepository,
)

TODAY = date(2024, 3, 22)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def connection() -> MockSnowflakeConnection:
    """
    A small roster:

    - p1 "Base Building", 8 weeks
    - p2 "Taper", 3 weeks
    - a1 Ada Lovelace on p1 since 2024-03-01 (3 weeks ago), week 3
    - a2 Grace Hopper on p2 since 2024-03-08, week 2 (ending soon)
    - a3 Alan Turing with no program
    """
    conn = MockSnowflakeConnection()
    conn._add_program("p1", "Base Building", 8)
    conn._add_program("p2", "Taper", 3)
    conn._add_athlete(
        "a1", first_name="Ada", last_name="Lovelace", email="ada@example.com",
        current_week=3, assigned_date=date(2024, 3, 1), program_id="p1",
    )
    conn._add_athlete(
        "a2", first_name="Grace", last_name="Hopper", email="grace@example.com",
        current_week=2, assigned_date=date(2024, 3, 8), program_id="p2",
    )
    conn._add_athlete(
        "a3", first_name="Alan", last_name="Turing", email="alan@example.com",
    )
    return conn


@pytest.fixture
def service(connection, clock) -> RosterService:
    return RosterService(
        athletes=AthleteRepository(connection),
        programs=ProgramRepository(connection),
        clock=clock,
    )
