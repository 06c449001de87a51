"""
CLI (Command Line Interface) for Page Monitor.

This is a thin wrapper around the monitor engine. All business logic lives
in the monitor package.
"""
