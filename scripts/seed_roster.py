#!/usr/bin/env python3
"""
Load programs and athletes into Snowflake.

Reads a JSON file shaped like:

    {
      "programs": [{"id": "p1", "name": "Base Building", "duration": 8}],
      "athletes": [
        {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com",
         "program_id": "p1", "assigned_date": "2024-03-01", "current_week": 1}
      ]
    }

Program ids are optional; athletes may reference programs by id or by name.

Usage:
    python scripts/seed_roster.py --file roster.json
    python scripts/seed_roster.py --file roster.json --dry-run
    python scripts/seed_roster.py --file roster.json --create-tables

Requires:
    - .env file with Snowflake credentials
"""

import argparse
import json
import os
import sys
from datetime import date
from pathlib import Path

# Add the project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from coachroster.core.roster.errors import RosterError
from coachroster.core.roster.models import Athlete, Program
from coachroster.infrastructure.snowflake.client import (
    SnowflakeConnectionError,
    create_snowflake_connection,
)
from coachroster.infrastructure.snowflake.repositories import (
    AthleteRepository,
    ProgramRepository,
    SnowflakeConfig,
)

# Load environment variables
load_dotenv()

CREATE_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS programs (
        id VARCHAR(36) PRIMARY KEY,
        name VARCHAR(200) NOT NULL,
        duration INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS athletes (
        id VARCHAR(36) PRIMARY KEY,
        first_name VARCHAR(100) NOT NULL,
        last_name VARCHAR(100) NOT NULL,
        email VARCHAR(320) NOT NULL,
        current_week INTEGER NOT NULL DEFAULT 1,
        last_checkin DATE,
        assigned_date DATE,
        program_id VARCHAR(36) REFERENCES programs(id)
    )
    """,
)


def parse_roster_file(filepath: str) -> tuple[list[Program], list[Athlete]]:
    """
    Build domain objects from the seed file.

    Raises ValueError on anything the models reject, so a bad file is
    caught before we connect.
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        data = json.load(f)

    programs = []
    for entry in data.get('programs', []):
        fields = {'name': entry['name'], 'duration': int(entry['duration'])}
        if entry.get('id'):
            fields['id'] = entry['id']
        programs.append(Program(**fields))

    by_id = {p.id: p for p in programs}
    by_name = {p.name: p for p in programs}

    athletes = []
    for entry in data.get('athletes', []):
        program_key = entry.get('program_id') or entry.get('program')
        program = by_id.get(program_key) or by_name.get(program_key)
        if program_key and program is None:
            raise ValueError(
                f"{entry.get('email')}: unknown program {program_key!r}"
            )

        assigned = entry.get('assigned_date')
        athletes.append(Athlete(
            first_name=entry['first_name'],
            last_name=entry['last_name'],
            email=entry['email'],
            current_week=int(entry.get('current_week', 1)),
            assigned_date=date.fromisoformat(assigned) if assigned else None,
            program_id=program.id if program else None,
        ))

    return programs, athletes


def config_from_env() -> SnowflakeConfig:
    return SnowflakeConfig(
        account=os.getenv('SNOWFLAKE_ACCOUNT', ''),
        user=os.getenv('SNOWFLAKE_USER', ''),
        password=os.getenv('SNOWFLAKE_PASSWORD') or None,
        private_key_path=os.getenv('SNOWFLAKE_PRIVATE_KEY_PATH'),
        private_key_base64=os.getenv('SNOWFLAKE_PRIVATE_KEY_BASE64'),
        database=os.getenv('SNOWFLAKE_DATABASE', 'COACHROSTER'),
        schema=os.getenv('SNOWFLAKE_SCHEMA', 'ROSTER'),
        warehouse=os.getenv('SNOWFLAKE_WAREHOUSE', 'COMPUTE_WH'),
        role=os.getenv('SNOWFLAKE_ROLE'),
    )


def seed_snowflake(
    programs: list[Program],
    athletes: list[Athlete],
    create_tables: bool = False,
    dry_run: bool = False,
) -> bool:
    """Insert programs first, then athletes. Returns True if nothing failed."""
    if dry_run:
        print("\n=== DRY RUN - No data will be inserted ===\n")
        for program in programs:
            print(f"Would insert program: {program.name} ({program.duration} weeks)")
        for athlete in athletes:
            print(f"Would insert athlete: {athlete.full_name} <{athlete.email}>")
        print(f"\nTotal: {len(programs)} programs, {len(athletes)} athletes")
        return True

    config = config_from_env()
    if not config.account or not config.user:
        print("ERROR: Missing SNOWFLAKE_ACCOUNT or SNOWFLAKE_USER")
        return False

    inserted = 0
    errors = 0

    try:
        print(f"Connecting to Snowflake account: {config.account}")
        with create_snowflake_connection(config=config) as conn:
            if create_tables:
                cursor = conn.cursor()
                try:
                    for statement in CREATE_TABLES:
                        cursor.execute(statement)
                finally:
                    cursor.close()
                print("Tables ready")

            program_repo = ProgramRepository(conn)
            athlete_repo = AthleteRepository(conn)

            for program in programs:
                try:
                    program_repo.insert(program)
                    inserted += 1
                    print(f"[OK] Program: {program.name}")
                except RosterError as e:
                    errors += 1
                    print(f"[ERR] Program {program.name}: {e}")

            for athlete in athletes:
                try:
                    athlete_repo.insert(athlete)
                    inserted += 1
                    print(f"[OK] Athlete: {athlete.full_name}")
                except RosterError as e:
                    errors += 1
                    print(f"[ERR] Athlete {athlete.full_name}: {e}")

    except SnowflakeConnectionError as e:
        print(f"ERROR connecting to Snowflake: {e}")
        return False

    print("\n=== Seed Complete ===")
    print(f"Inserted: {inserted}")
    print(f"Errors: {errors}")

    return errors == 0


def main():
    parser = argparse.ArgumentParser(description='Seed the coaching roster in Snowflake')
    parser.add_argument('--file', default='roster.json', help='Roster JSON file path')
    parser.add_argument('--dry-run', action='store_true', help='Parse only, don\'t insert')
    parser.add_argument('--create-tables', action='store_true', help='Create tables if missing')
    args = parser.parse_args()

    filepath = Path(args.file)
    if not filepath.exists():
        # Try relative to project root
        filepath = Path(__file__).parent.parent / args.file

    if not filepath.exists():
        print(f"ERROR: Cannot find {args.file}")
        sys.exit(1)

    print(f"Reading roster from: {filepath}")
    try:
        programs, athletes = parse_roster_file(str(filepath))
    except (KeyError, ValueError) as e:
        print(f"ERROR: Invalid roster file: {e}")
        sys.exit(1)

    print(f"Found {len(programs)} programs and {len(athletes)} athletes")

    success = seed_snowflake(
        programs,
        athletes,
        create_tables=args.create_tables,
        dry_run=args.dry_run,
    )

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
