"""
Unit tests for the Snowflake repositories and their shared plumbing.
"""

from datetime import date

import pytest

from coachroster.core.roster.errors import (
    AthleteNotFoundError,
    ProgramNotFoundError,
    RosterStoreError,
)
from coachroster.core.roster.models import Athlete, Program
from coachroster.infrastructure.snowflake.client import (
    SnowflakeConnectionError,
    _connect_params,
)
from coachroster.infrastructure.snowflake.repositories import (
    AthleteRepository,
    ProgramRepository,
    SnowflakeConfig,
)
from coachroster.infrastructure.snowflake.repositories.base import build_update


class UnreachableConnection:
    """A connection whose driver fails before a cursor exists."""

    def cursor(self):
        raise RuntimeError("socket closed")

    def commit(self) -> None:
        pass


class TestBuildUpdate:
    """Tests for the whitelisted UPDATE builder."""

    def test_builds_sorted_parameterised_update(self):
        """Columns are sorted and every value is a parameter."""
        query, values = build_update(
            "athletes", {"current_week": 1, "assigned_date": date(2024, 3, 1)},
            ("assigned_date", "current_week"),
        )

        assert query == "UPDATE athletes SET assigned_date = %s, current_week = %s WHERE id = %s"
        assert values == [date(2024, 3, 1), 1]

    def test_rejects_unknown_columns(self):
        """Column names outside the whitelist are refused."""
        with pytest.raises(ValueError, match="Unknown columns"):
            build_update("athletes", {"id; DROP TABLE athletes": 1}, ("email",))


class TestAthleteRepository:
    """Tests for athlete persistence."""

    @pytest.fixture
    def repo(self, connection) -> AthleteRepository:
        return AthleteRepository(connection)

    def test_get_joins_program(self, repo):
        """A loaded athlete carries its program's name and duration."""
        athlete = repo.get("a1")

        assert athlete.full_name == "Ada Lovelace"
        assert athlete.program.name == "Base Building"
        assert athlete.program.duration == 8

    def test_get_missing(self, repo):
        """An unknown id raises AthleteNotFoundError."""
        with pytest.raises(AthleteNotFoundError):
            repo.get("ghost")

    def test_program_without_date_reads_as_unassigned(self, repo, connection):
        """A stored program with no start date reads back as no program."""
        connection._add_athlete(
            "a4", first_name="B", last_name="C", email="b@c.d", program_id="p1",
        )

        athlete = repo.get("a4")

        assert athlete.program is None
        assert athlete.program_id is None

    def test_dangling_program_reference(self, repo, connection):
        """A reference to a deleted program keeps the id but has no program."""
        connection._add_athlete(
            "a4", first_name="B", last_name="C", email="b@c.d",
            program_id="gone", assigned_date=date(2024, 1, 1),
        )

        athlete = repo.get("a4")

        assert athlete.program is None
        assert athlete.program_id == "gone"

    def test_insert_and_list(self, repo):
        """Inserted athletes show up in last-name order."""
        repo.insert(Athlete(
            id="a5", first_name="Edsger", last_name="Dijkstra", email="ed@example.com",
        ))

        assert [a.id for a in repo.list_with_programs()] == ["a5", "a2", "a1", "a3"]

    def test_update_missing_raises(self, repo):
        """Updating an unknown id raises AthleteNotFoundError."""
        with pytest.raises(AthleteNotFoundError):
            repo.update("ghost", {"current_week": 2})

    def test_driver_errors_become_store_errors(self, repo, connection):
        """A failing statement surfaces as RosterStoreError."""
        connection._fail_writes_for("a1")
        with pytest.raises(RosterStoreError, match="Failed to update athlete"):
            repo.update("a1", {"current_week": 2})

    def test_cursor_failure_becomes_store_error(self):
        """A driver that can't even open a cursor also surfaces as RosterStoreError."""
        repo = AthleteRepository(UnreachableConnection())

        with pytest.raises(RosterStoreError, match="Failed to ping database: socket closed"):
            repo.ping()

    def test_count_for_program(self, repo):
        """Counts athletes referencing a program."""
        assert repo.count_for_program("p1") == 1
        assert repo.count_for_program("p9") == 0

    def test_max_week_for_program(self, repo, connection):
        """Reports the furthest week reached on a program, None when unused."""
        connection._add_athlete(
            "a4", first_name="B", last_name="C", email="b@c.d",
            current_week=6, assigned_date=date(2024, 1, 1), program_id="p1",
        )

        assert repo.max_week_for_program("p1") == 6
        assert repo.max_week_for_program("p2") == 2
        assert repo.max_week_for_program("p9") is None

    def test_ping(self, repo):
        """SELECT 1 succeeds against a working connection."""
        assert repo.ping() is True


class TestProgramRepository:
    """Tests for program persistence."""

    @pytest.fixture
    def repo(self, connection) -> ProgramRepository:
        return ProgramRepository(connection)

    def test_insert_get_update_delete(self, repo):
        """A program round-trips through insert, update and delete."""
        repo.insert(Program(id="p3", name="Sprint", duration=4))
        repo.update("p3", {"name": "Sprint Block"})

        assert repo.get("p3") == Program(id="p3", name="Sprint Block", duration=4)

        repo.delete("p3")
        with pytest.raises(ProgramNotFoundError):
            repo.get("p3")

    def test_delete_missing(self, repo):
        """Deleting an unknown program raises ProgramNotFoundError."""
        with pytest.raises(ProgramNotFoundError):
            repo.delete("p9")


class TestConnectParams:
    """Tests for building connector arguments from config."""

    def test_password_auth(self):
        """Password auth passes the password and no key."""
        params = _connect_params(SnowflakeConfig(account="acct", user="svc", password="pw"))

        assert params["password"] == "pw"
        assert params["database"] == "COACHROSTER"
        assert "private_key" not in params

    def test_requires_some_credential(self):
        """With neither password nor key the config is rejected."""
        with pytest.raises(SnowflakeConnectionError, match="password or a private key"):
            _connect_params(SnowflakeConfig(account="acct", user="svc"))
