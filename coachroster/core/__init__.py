"""
Core business logic for the coaching roster.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns. The week arithmetic and the assignment
rules can be tested in isolation.
"""
