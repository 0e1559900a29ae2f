"""
Coach Roster - training program administration for a coaching roster.

This package contains the complete application:
- core: Framework-agnostic roster logic (weeks, check-in, selection)
- infrastructure: Snowflake persistence
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
