"""
Infrastructure layer - external service integrations.

- snowflake: Database persistence for the roster

These wrappers translate between external formats and our domain models.
"""
