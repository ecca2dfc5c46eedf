"""
Team Pulse - a team mood and goal tracker.

This package provides a REST API backed by SQLite for listing team members,
reporting moods and managing personal goals, plus a command-line client.
"""

__version__ = "0.1.0"
